import json
import threading
from pathlib import Path

import pytest

from app.services import drug_store
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
    clean_value,
    parse_rows,
)
from app.services.drug_store import DrugStore

DATA_DIR = Path(__file__).parent / "data"


def test_clean_value_sentinels():
    assert clean_value("  Advil ") == "Advil"
    assert clean_value("") is None
    assert clean_value("   ") is None
    assert clean_value("FALSE") is None
    assert clean_value(None) is None


def test_load_counts():
    store = DrugStore(str(DATA_DIR))
    store.load()

    h = store.health()
    assert h["status"] == "ready"
    assert h["isLoading"] is False
    assert h["dataLoaded"] == {
        "interactions": 6,
        "drugDetails": 6,
        "contraindicationData": 5,
        "uniqueDrugNames": 10,
        "contraindicationTerms": 5,
    }


def test_unique_drug_names_folded_and_sorted():
    store = DrugStore(str(DATA_DIR))
    store.load()

    names = list(store.tables.unique_drug_names)
    assert names == sorted(names)
    assert "amoxicillin" in names
    assert all(n == n.strip().lower() for n in names)


def test_load_is_idempotent():
    store = DrugStore(str(DATA_DIR))
    store.load()
    first = store.tables
    store.load()

    assert store.tables is first
    other = DrugStore(str(DATA_DIR))
    other.load()
    assert other.tables == first


def test_concurrent_loads_build_once(monkeypatch):
    calls = []
    real_build = drug_store.build_tables
    started = threading.Event()
    gate = threading.Event()

    def slow_build(data_dir):
        calls.append(data_dir)
        started.set()
        gate.wait(timeout=5)
        return real_build(data_dir)

    monkeypatch.setattr(drug_store, "build_tables", slow_build)

    store = DrugStore(str(DATA_DIR))
    t1 = threading.Thread(target=store.load)
    t1.start()
    assert started.wait(timeout=5)

    # second caller sees the loading flag and returns without building
    assert store.is_loading is True
    assert store.status == "loading"
    assert store.tables.counts()["interactions"] == 0
    store.load()

    gate.set()
    t1.join()

    assert len(calls) == 1
    assert store.is_ready


def test_missing_dataset(tmp_path):
    store = DrugStore(str(tmp_path))
    with pytest.raises(LoadError):
        store.load()

    h = store.health()
    assert h["status"] == "error"
    assert "interactions.json" in h["error"]
    assert h["isLoading"] is False
    assert store.is_ready is False

    # failures are permanent for this instance
    store.load()
    assert store.status == "error"


def test_malformed_dataset(tmp_path):
    for name in ("interactions.json", "drug-details.json", "contraindications.json"):
        (tmp_path / name).write_text("[]", encoding="utf-8")
    (tmp_path / "drug-details.json").write_text("{not json", encoding="utf-8")

    store = DrugStore(str(tmp_path))
    with pytest.raises(LoadError):
        store.load()

    assert store.status == "error"
    assert store.tables.counts()["interactions"] == 0


def test_top_level_must_be_array(tmp_path):
    for name in ("interactions.json", "drug-details.json", "contraindications.json"):
        (tmp_path / name).write_text("[]", encoding="utf-8")
    (tmp_path / "contraindications.json").write_text(json.dumps({"drug_name": "x"}), encoding="utf-8")

    with pytest.raises(LoadError):
        DrugStore(str(tmp_path)).load()


def test_filter_index_excludes_sentinels():
    rows = json.loads((DATA_DIR / "drug-details.json").read_text(encoding="utf-8"))
    index = build_filter_index(parse_rows(rows, DrugDetailRecord, "drug-details.json"))

    assert sorted(index) == ["analgesic", "antibiotic"]
    assert index["analgesic"] == {
        "brandNames": ["Advil", "Motrin", "Tylenol"],
        "genericNames": ["Acetaminophen", "Ibuprofen", "Naproxen"],
        "manufacturers": ["Johnson & Johnson", "Pfizer"],
    }


def test_indexes_ignore_input_order():
    rows = json.loads((DATA_DIR / "interactions.json").read_text(encoding="utf-8"))
    forward = parse_rows(rows, InteractionRecord, "interactions.json")
    backward = parse_rows(list(reversed(rows)), InteractionRecord, "interactions.json")
    assert build_unique_drug_names(forward) == build_unique_drug_names(backward)

    details = json.loads((DATA_DIR / "drug-details.json").read_text(encoding="utf-8"))
    assert build_filter_index(
        parse_rows(details, DrugDetailRecord, "d")
    ) == build_filter_index(parse_rows(list(reversed(details)), DrugDetailRecord, "d"))


def test_contraindication_terms():
    rows = json.loads((DATA_DIR / "contraindications.json").read_text(encoding="utf-8"))
    terms = build_contraindication_terms(parse_rows(rows, ContraindicationRecord, "c"))

    # "uv" is too short and "false" is a sentinel
    assert terms == ["asthma", "hypocalcemia", "peptic ulcer", "pregnancy", "renal failure"]


def test_deeply_nested_dataset_is_a_load_error(tmp_path):
    for name in ("interactions.json", "drug-details.json", "contraindications.json"):
        (tmp_path / name).write_text("[]", encoding="utf-8")
    (tmp_path / "interactions.json").write_text("[" * 100000 + "]" * 100000, encoding="utf-8")

    store = DrugStore(str(tmp_path))
    with pytest.raises(LoadError):
        store.load()

    h = store.health()
    assert h["status"] == "error"
    assert h["isLoading"] is False


def test_unexpected_failure_clears_loading_flag(monkeypatch):
    def broken_build(data_dir):
        raise RuntimeError("boom")

    monkeypatch.setattr(drug_store, "build_tables", broken_build)

    store = DrugStore(str(DATA_DIR))
    with pytest.raises(RuntimeError):
        store.load()

    assert store.is_loading is False
    assert store.is_ready is False


def test_filter_options_ignore_case_duplicates():
    rows = [
        {"Type": "Analgesic", "Brand-Name": "advil", "GenericName": "Ibuprofen", "Manufacturer": "Pfizer"},
        {"Type": "Analgesic", "Brand-Name": "Advil", "GenericName": "ibuprofen ", "Manufacturer": "PFIZER"},
        {"Type": "Analgesic", "Brand-Name": "Motrin", "GenericName": "Ibuprofen", "Manufacturer": "Pfizer"},
    ]
    forward = build_filter_index(parse_rows(rows, DrugDetailRecord, "d"))
    backward = build_filter_index(parse_rows(list(reversed(rows)), DrugDetailRecord, "d"))

    assert forward == backward
    assert forward["analgesic"] == {
        "brandNames": ["Advil", "Motrin"],
        "genericNames": ["Ibuprofen"],
        "manufacturers": ["PFIZER"],
    }
