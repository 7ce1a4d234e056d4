from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional

from app.services.drug_records import (
    FALSE_SENTINEL,
    ContraindicationRecord,
    DrugDetailRecord,
    InteractionRecord,
    fold,
)

MIN_TERM_LEN = 3

_TERM_SPLIT_RE = re.compile(r"[,;]")


def build_unique_drug_names(interactions: Iterable[InteractionRecord]) -> List[str]:
    names: set[str] = set()
    for rec in interactions:
        if rec.drug_a:
            names.add(rec.drug_a)
        if rec.drug_b:
            names.add(rec.drug_b)
    return sorted(names)


def empty_filters() -> Dict[str, List[str]]:
    return {"brandNames": [], "genericNames": [], "manufacturers": []}


def _add_option(options: Dict[str, str], value: Optional[str]) -> None:
    if not value:
        return
    key = fold(value)
    current = options.get(key)
    if current is None or value < current:
        options[key] = value


def build_filter_index(details: Iterable[DrugDetailRecord]) -> Dict[str, Dict[str, List[str]]]:
    """
    type -> {brandNames, genericNames, manufacturers}

    Each list is sorted and unique ignoring case; when spellings differ
    only in case the lowest one is shown. Absent values (None after
    parsing) never show up as filter options.
    """
    buckets: Dict[str, Dict[str, Dict[str, str]]] = {}

    for rec in details:
        if not rec.type:
            continue

        b = buckets.setdefault(
            rec.type,
            {"brandNames": {}, "genericNames": {}, "manufacturers": {}},
        )
        _add_option(b["brandNames"], rec.brand_name)
        _add_option(b["genericNames"], rec.generic_name)
        _add_option(b["manufacturers"], rec.manufacturer)

    return {
        t: {k: sorted(v.values()) for k, v in b.items()}
        for t, b in sorted(buckets.items())
    }


def split_contraindication_terms(text: str) -> List[str]:
    out: List[str] = []
    for part in _TERM_SPLIT_RE.split(text.lower()):
        term = part.strip()
        if len(term) < MIN_TERM_LEN or term == FALSE_SENTINEL:
            continue
        out.append(term)
    return out


def build_contraindication_terms(records: Iterable[ContraindicationRecord]) -> List[str]:
    terms: set[str] = set()
    for rec in records:
        if rec.contraindications:
            terms.update(split_contraindication_terms(rec.contraindications))
    return sorted(terms)
