# scripts/convert_csv_to_json.py
# ------------------------------------------------------------
# One-off conversion of the source CSVs into the JSON files the
# API loads at startup (JSON parses much faster than CSV).
#
# INPUT : drug-data.csv, Drugs-Type.csv, drug-contraindication.csv
# OUTPUT: data/interactions.json, data/drug-details.json,
#         data/contraindications.json
#
# Every cell is kept as a string, headers verbatim.
# ------------------------------------------------------------
from __future__ import annotations

import os
import sys
import time
from pathlib import Path

import pandas as pd

DATA_DIR = Path(os.getenv("DRUG_DATA_DIR", "data"))

CONVERSIONS = [
    ("drug-data.csv", "interactions.json", "Drug interactions"),
    ("Drugs-Type.csv", "drug-details.json", "Drug details"),
    ("drug-contraindication.csv", "contraindications.json", "Contraindications"),
]


def convert_csv_to_json(csv_path: Path, json_path: Path, description: str) -> int:
    print(f"Converting {csv_path}...")
    start = time.perf_counter()

    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)

    # minified array of objects
    df.to_json(json_path, orient="records", force_ascii=False)

    size_mb = json_path.stat().st_size / 1024 / 1024
    print(f"✓ {description}")
    print(f"  - Records: {len(df):,}")
    print(f"  - Size: {size_mb:.2f} MB")
    print(f"  - Time: {time.perf_counter() - start:.2f}s\n")
    return len(df)


def main(src_dir: Path = Path("."), out_dir: Path = DATA_DIR) -> None:
    if not out_dir.exists():
        out_dir.mkdir(parents=True)
        print(f"✓ Created {out_dir}/ directory\n")

    for csv_name, json_name, description in CONVERSIONS:
        convert_csv_to_json(src_dir / csv_name, out_dir / json_name, description)

    print("✅ All CSV files converted successfully!")


if __name__ == "__main__":
    print("Starting CSV to JSON conversion...\n")
    try:
        main(Path(sys.argv[1]) if len(sys.argv) > 1 else Path("."))
    except (OSError, ValueError) as e:
        print(f"❌ Error during conversion: {e}")
        sys.exit(1)
