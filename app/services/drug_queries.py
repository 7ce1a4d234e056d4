from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from app.services.drug_indexes import empty_filters
from app.services.drug_records import InvalidRequest, fold
from app.services.drug_store import DrugTables

PAGE_SIZE = 20
MAX_SUGGESTIONS = 10

MIN_CONTRA_SEARCH_LEN = 3
MIN_DRUG_SEARCH_LEN = 2
MIN_SUGGEST_LEN = 2


def _prefix_matches(values: Sequence[str], prefix: str, limit: int = MAX_SUGGESTIONS) -> List[str]:
    out: List[str] = []
    for v in values:
        if v.startswith(prefix):
            out.append(v)
            if len(out) >= limit:
                break
    return out


# -----------------------------------------------------------------------------
# INTERACTIONS
# -----------------------------------------------------------------------------
def search_drug_names(tables: DrugTables, term: Optional[str]) -> List[str]:
    t = fold(term)
    if not t:
        return []
    return _prefix_matches(tables.unique_drug_names, t)


def parse_drug_list(raw: Optional[str]) -> List[str]:
    if raw is None or not raw.strip():
        raise InvalidRequest("No drugs provided.")
    return [d for d in (fold(x) for x in raw.split(",")) if d]


def check_interactions(tables: DrugTables, drugs: Sequence[str]) -> List[Dict[str, Any]]:
    """
    Look up every unordered pair of `drugs` against the interaction table.

    A record matches when {drug_a, drug_b} equals the pair as a set, so the
    order of names in the request never matters. Pairs without a known
    interaction are left out of the result.
    """
    names = [d for d in (fold(x) for x in drugs) if d]
    if len(names) < 2:
        raise InvalidRequest("Please provide at least two drugs.")

    found: List[Dict[str, Any]] = []
    for i in range(len(names)):
        for j in range(i + 1, len(names)):
            a, b = names[i], names[j]
            for rec in tables.interactions:
                if (rec.drug_a == a and rec.drug_b == b) or (rec.drug_a == b and rec.drug_b == a):
                    found.append({"drugs": [a, b], "description": rec.description})
                    break
    return found


# -----------------------------------------------------------------------------
# DRUGS BY TYPE
# -----------------------------------------------------------------------------
def filters_for_type(tables: DrugTables, drug_type: Optional[str]) -> Dict[str, List[str]]:
    entry = tables.filter_index.get(fold(drug_type))
    if entry is None:
        return empty_filters()
    return {k: list(v) for k, v in entry.items()}


def _matches_filter(value: Optional[str], wanted: str) -> bool:
    return not wanted or fold(value) == wanted


def drugs_by_type(
    tables: DrugTables,
    drug_type: Optional[str],
    brand_name: Optional[str] = None,
    generic_name: Optional[str] = None,
    manufacturer: Optional[str] = None,
    page: int = 1,
) -> Dict[str, Any]:
    t = fold(drug_type)
    if not t:
        raise InvalidRequest("No drug type provided.")

    brand = fold(brand_name)
    generic = fold(generic_name)
    maker = fold(manufacturer)

    matches = [
        rec
        for rec in tables.drug_details
        if rec.type == t
        and _matches_filter(rec.brand_name, brand)
        and _matches_filter(rec.generic_name, generic)
        and _matches_filter(rec.manufacturer, maker)
    ]

    page = max(1, int(page or 1))
    start = (page - 1) * PAGE_SIZE

    return {
        "drugs": [rec.to_public() for rec in matches[start : start + PAGE_SIZE]],
        "totalMatches": len(matches),
        "currentPage": page,
        "pageSize": PAGE_SIZE,
    }


# -----------------------------------------------------------------------------
# CONTRAINDICATIONS
# -----------------------------------------------------------------------------
def search_contraindications(
    tables: DrugTables,
    contra: Optional[str],
    drug: Optional[str],
) -> List[Dict[str, Optional[str]]]:
    c = fold(contra)
    d = fold(drug)
    if len(c) < MIN_CONTRA_SEARCH_LEN or len(d) < MIN_DRUG_SEARCH_LEN:
        return []

    return [
        rec.to_public()
        for rec in tables.contraindications
        if c in fold(rec.contraindications) and fold(rec.drug_name) == d
    ]


def contraindication_suggestions(tables: DrugTables, term: Optional[str]) -> List[str]:
    t = fold(term)
    if len(t) < MIN_SUGGEST_LEN:
        return []
    return _prefix_matches(tables.contraindication_terms, t)


def drug_suggestions_by_contra(
    tables: DrugTables,
    contra: Optional[str],
    term: Optional[str],
) -> List[str]:
    c = fold(contra)
    t = fold(term)
    if len(c) < MIN_SUGGEST_LEN or len(t) < MIN_SUGGEST_LEN:
        return []

    names: set[str] = set()
    for rec in tables.contraindications:
        if not rec.drug_name:
            continue
        if c in fold(rec.contraindications) and rec.drug_name.lower().startswith(t):
            names.add(rec.drug_name)

    return sorted(names)[:MAX_SUGGESTIONS]
