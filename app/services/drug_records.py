from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# RAW JSON COLUMNS (kept verbatim from the CSV headers)
# -----------------------------------------------------------------------------
COL_DRUG_1 = "Drug 1"
COL_DRUG_2 = "Drug 2"
COL_DESCRIPTION = "Interaction Description"

COL_TYPE = "Type"
COL_BRAND = "Brand-Name"
COL_GENERIC = "GenericName"
COL_MANUFACTURER = "Manufacturer"

FALSE_SENTINEL = "false"


class LoadError(Exception):
    """A dataset file is missing or malformed."""


class InvalidRequest(ValueError):
    """A required query parameter is missing or unusable."""


# -----------------------------------------------------------------------------
# NORMALIZATION
# -----------------------------------------------------------------------------
def fold(s: Any) -> str:
    if s is None:
        return ""
    return str(s).strip().lower()


def clean_value(value: Any) -> Optional[str]:
    """
    Trim a raw CSV value. Empty strings and the CSV "false" sentinel
    both mean "no value" and come back as None.
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s or s.lower() == FALSE_SENTINEL:
        return None
    return s


def clean_folded(value: Any) -> Optional[str]:
    s = clean_value(value)
    return s.lower() if s is not None else None


# -----------------------------------------------------------------------------
# RECORDS
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class InteractionRecord:
    drug_a: Optional[str]
    drug_b: Optional[str]
    description: Optional[str]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "InteractionRecord":
        return cls(
            drug_a=clean_folded(row.get(COL_DRUG_1)),
            drug_b=clean_folded(row.get(COL_DRUG_2)),
            description=clean_value(row.get(COL_DESCRIPTION)),
        )


@dataclass(frozen=True)
class DrugDetailRecord:
    type: Optional[str]
    brand_name: Optional[str]
    generic_name: Optional[str]
    manufacturer: Optional[str]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "DrugDetailRecord":
        return cls(
            type=clean_folded(row.get(COL_TYPE)),
            brand_name=clean_value(row.get(COL_BRAND)),
            generic_name=clean_value(row.get(COL_GENERIC)),
            manufacturer=clean_value(row.get(COL_MANUFACTURER)),
        )

    def to_public(self) -> Dict[str, Optional[str]]:
        return {
            "brandName": self.brand_name,
            "genericName": self.generic_name,
            "manufacturer": self.manufacturer,
        }


@dataclass(frozen=True)
class ContraindicationRecord:
    drug_name: Optional[str]
    contraindications: Optional[str]
    manufacturer: Optional[str]
    indications: Optional[str]
    side_effects: Optional[str]
    warnings: Optional[str]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ContraindicationRecord":
        return cls(
            drug_name=clean_value(row.get("drug_name")),
            contraindications=clean_value(row.get("contraindications")),
            manufacturer=clean_value(row.get("manufacturer")),
            indications=clean_value(row.get("indications")),
            side_effects=clean_value(row.get("side_effects")),
            warnings=clean_value(row.get("warnings")),
        )

    def to_public(self) -> Dict[str, Optional[str]]:
        # contraindications text is intentionally left out
        return {
            "drug_name": self.drug_name,
            "manufacturer": self.manufacturer,
            "indications": self.indications,
            "side_effects": self.side_effects,
            "warnings": self.warnings,
        }


def parse_rows(rows: Any, record_cls, source: str) -> List[Any]:
    if not isinstance(rows, list):
        raise LoadError(f"{source}: expected a JSON array, got {type(rows).__name__}")

    out: List[Any] = []
    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise LoadError(f"{source}: row {i} is not an object")
        out.append(record_cls.from_row(row))
    return out
