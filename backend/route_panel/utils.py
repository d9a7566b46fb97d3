from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .constants import COLUMN_KEYWORDS
from .models import ColumnMap


def normalize_header(name: str) -> str:
    s = str(name).lower()
    s = re.sub(r"\([^)]*\)", "", s)
    return re.sub(r"[^a-z0-9]", "", s)


def _pick(pairs: List[tuple], headers: List[str], keywords: List[str], fallback: Optional[int]) -> Optional[str]:
    # First header (in sheet order) containing any keyword wins
    for key, original in pairs:
        for kw in keywords:
            if kw in key:
                return original
    if fallback is not None and fallback < len(headers) and headers[fallback]:
        return headers[fallback]
    return None


def infer_columns(headers: List[str]) -> ColumnMap:
    pairs = [(normalize_header(h), h) for h in headers]
    mapping: Dict[str, Optional[str]] = {}
    for role, (keywords, fallback) in COLUMN_KEYWORDS.items():
        mapping[role] = _pick(pairs, headers, keywords, fallback)
    return ColumnMap(**mapping)


def cell_value(row: Dict[str, Any], column: Optional[str]) -> Any:
    return row.get(column) if column else None


def cell_str(row: Dict[str, Any], column: Optional[str]) -> str:
    v = cell_value(row, column)
    return "" if v is None else str(v).strip()
