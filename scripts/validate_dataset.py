from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from rapidfuzz import fuzz, process

DATA_DIR = Path("data")
OUT_PATH = Path("data/quality_reports/validation_report.json")

DATASETS = {
    "interactions": ("interactions.json", ["Drug 1", "Drug 2", "Interaction Description"]),
    "drug_details": ("drug-details.json", ["Type", "Brand-Name", "GenericName", "Manufacturer"]),
    "contraindications": (
        "contraindications.json",
        ["drug_name", "contraindications", "manufacturer", "indications", "side_effects", "warnings"],
    ),
}

NEAR_DUP_THRESHOLD = 92.0


class DatasetValidator:
    def __init__(self, data_dir: Path = DATA_DIR):
        self.data_dir = data_dir
        self.frames: Dict[str, pd.DataFrame] = {}
        self.validation_report: Dict[str, Any] = {}

    def load(self):
        for name, (file_name, _) in DATASETS.items():
            path = self.data_dir / file_name
            with open(path, "r", encoding="utf-8") as f:
                rows = json.load(f)
            self.frames[name] = pd.DataFrame(rows).fillna("").astype(str)
            print(f"✅ {name}: {len(self.frames[name]):,} rows")

    def check_columns(self):
        """Expected CSV headers present in each dataset, and headers padded with spaces"""
        report = {}
        padded = {}
        for name, (_, expected) in DATASETS.items():
            columns = [str(c) for c in self.frames[name].columns]
            missing = sorted(set(expected) - set(columns))
            report[name] = missing
            padded[name] = [c for c in columns if c != c.strip()]
            if missing:
                print(f"❌ {name} missing columns: {missing}")
            if padded[name]:
                print(f"❌ {name} headers with extra spaces: {padded[name]}")
        self.validation_report["missing_columns"] = report
        self.validation_report["padded_columns"] = padded
        return report

    def check_empty_values(self):
        """Count empty and 'false' sentinel cells per column"""
        report = {}
        for name, df in self.frames.items():
            cells = df.apply(lambda col: col.str.strip().str.lower())
            report[name] = {
                "empty": {k: int(v) for k, v in (cells == "").sum().items()},
                "false_sentinel": {k: int(v) for k, v in (cells == "false").sum().items()},
            }
        self.validation_report["empty_values"] = report
        print("\n📋 Empty / 'false' cells recorded per column")
        return report

    def check_near_duplicate_drugs(self) -> List[Dict[str, Any]]:
        """Spelling variants among interaction drug names (e.g. ibuprofen / ibuprofin)"""
        df = self.frames["interactions"]
        names = pd.concat([df.get("Drug 1", pd.Series(dtype=str)), df.get("Drug 2", pd.Series(dtype=str))])
        names = sorted({n.strip().lower() for n in names if n.strip()})

        pairs: List[Dict[str, Any]] = []
        for i, name in enumerate(names):
            hits = process.extract(
                name,
                names[i + 1 :],
                scorer=fuzz.ratio,
                score_cutoff=NEAR_DUP_THRESHOLD,
                limit=5,
            )
            for other, score, _ in hits:
                pairs.append({"a": name, "b": other, "score": round(float(score), 1)})

        self.validation_report["near_duplicate_drugs"] = pairs
        print(f"\n🔄 Near-duplicate drug names: {len(pairs)}")
        return pairs

    def generate_report(self, output_path: Path = OUT_PATH):
        self.load()
        self.check_columns()
        self.check_empty_values()
        self.check_near_duplicate_drugs()

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(self.validation_report, f, indent=2, default=str)

        print(f"\n✅ Validation report saved to {output_path}")
        return self.validation_report


if __name__ == "__main__":
    DatasetValidator().generate_report()
