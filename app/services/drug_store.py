from __future__ import annotations

import json
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from app.services.drug_indexes import (
    build_contraindication_terms,
    build_filter_index,
    build_unique_drug_names,
)
from app.services.drug_records import (
    ContraindicationRecord,
    DrugDetailRecord,
    InteractionRecord,
    LoadError,
    parse_rows,
)

# -----------------------------------------------------------------------------
# CONFIG
# -----------------------------------------------------------------------------
DEFAULT_DATA_DIR = os.getenv("DRUG_DATA_DIR", "data")

INTERACTIONS_FILE = "interactions.json"
DRUG_DETAILS_FILE = "drug-details.json"
CONTRAINDICATIONS_FILE = "contraindications.json"


# -----------------------------------------------------------------------------
# SNAPSHOT
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class DrugTables:
    """Raw records plus derived indexes. Built once, never mutated."""

    interactions: Tuple[InteractionRecord, ...] = ()
    drug_details: Tuple[DrugDetailRecord, ...] = ()
    contraindications: Tuple[ContraindicationRecord, ...] = ()
    unique_drug_names: Tuple[str, ...] = ()
    filter_index: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    contraindication_terms: Tuple[str, ...] = ()

    def counts(self) -> Dict[str, int]:
        return {
            "interactions": len(self.interactions),
            "drugDetails": len(self.drug_details),
            "contraindicationData": len(self.contraindications),
            "uniqueDrugNames": len(self.unique_drug_names),
            "contraindicationTerms": len(self.contraindication_terms),
        }


EMPTY_TABLES = DrugTables()


def read_json_array(path: str) -> Any:
    if not os.path.exists(path):
        raise LoadError(
            f"Dataset not found: {path}\n"
            f"Tip: set DRUG_DATA_DIR env var or run scripts/convert_csv_to_json.py first."
        )
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError, RecursionError) as e:
        raise LoadError(f"Could not read {path}: {e}") from e


def build_tables(data_dir: str) -> DrugTables:
    interactions = parse_rows(
        read_json_array(os.path.join(data_dir, INTERACTIONS_FILE)),
        InteractionRecord,
        INTERACTIONS_FILE,
    )
    unique_names = build_unique_drug_names(interactions)
    print(f"✓ Loaded {len(interactions):,} drug interactions")

    details = parse_rows(
        read_json_array(os.path.join(data_dir, DRUG_DETAILS_FILE)),
        DrugDetailRecord,
        DRUG_DETAILS_FILE,
    )
    filter_index = build_filter_index(details)
    print(f"✓ Loaded {len(details):,} drug details, {len(filter_index):,} types")

    contra = parse_rows(
        read_json_array(os.path.join(data_dir, CONTRAINDICATIONS_FILE)),
        ContraindicationRecord,
        CONTRAINDICATIONS_FILE,
    )
    terms = build_contraindication_terms(contra)
    print(f"✓ Loaded {len(contra):,} contraindications, {len(terms):,} unique terms")

    return DrugTables(
        interactions=tuple(interactions),
        drug_details=tuple(details),
        contraindications=tuple(contra),
        unique_drug_names=tuple(unique_names),
        filter_index=filter_index,
        contraindication_terms=tuple(terms),
    )


# -----------------------------------------------------------------------------
# STORE
# -----------------------------------------------------------------------------
class DrugStore:
    """
    Application context holding the loaded datasets.

    Requests read `store.tables`. Until a load succeeds that is an empty
    snapshot, so every query degrades to "no results" instead of seeing
    half-built indexes.
    """

    def __init__(self, data_dir: str = DEFAULT_DATA_DIR):
        self.data_dir = data_dir
        self.tables: DrugTables = EMPTY_TABLES
        self.is_ready = False
        self.is_loading = False
        self.error: Optional[str] = None
        self._lock = threading.Lock()

    def load(self) -> None:
        # Only one caller builds; anyone arriving meanwhile returns at once.
        with self._lock:
            if self.is_ready or self.is_loading or self.error is not None:
                return
            self.is_loading = True

        print("Loading data from JSON files...")
        start = time.perf_counter()
        try:
            tables = build_tables(self.data_dir)
        except LoadError as e:
            with self._lock:
                self.error = str(e)
            print(f"❌ Error loading JSON files: {e}")
            raise
        else:
            with self._lock:
                self.tables = tables
                self.is_ready = True
        finally:
            with self._lock:
                self.is_loading = False

        print(f"✅ All data loaded successfully in {time.perf_counter() - start:.2f}s")
        print(f"📄 Data dir: {os.path.abspath(self.data_dir)}")

    @property
    def status(self) -> str:
        if self.is_ready:
            return "ready"
        if self.error is not None:
            return "error"
        return "loading"

    def health(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "status": self.status,
            "isLoading": self.is_loading,
            "dataLoaded": self.tables.counts(),
        }
        if self.error is not None:
            out["error"] = self.error
        return out
