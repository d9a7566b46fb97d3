from __future__ import annotations

import io
import logging
import re
from pathlib import PurePath
from typing import Any, Dict, List, NamedTuple

import pandas as pd

logger = logging.getLogger(__name__)

# Plain decimal numbers; leading zeros ("007", zip codes) stay text
_NUMERIC_CELL = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?")


class Table(NamedTuple):
    headers: List[str]
    rows: List[Dict[str, Any]]


def file_extension(filename: str) -> str:
    return PurePath(filename or "").suffix.lower()


def _typed_cell(value: Any) -> Any:
    """Numeric-looking CSV text becomes a number, as a workbook cell would."""
    if not isinstance(value, str):
        return value
    s = value.strip()
    if not _NUMERIC_CELL.fullmatch(s):
        return value
    return float(s) if "." in s else int(s)


def _read_frame(data: bytes, filename: str) -> pd.DataFrame:
    buffer = io.BytesIO(data)
    ext = file_extension(filename)
    if ext == ".csv":
        # Read as text so blanks stay "" and leading zeros survive, then
        # type numeric cells per cell rather than per column
        df = pd.read_csv(buffer, dtype=str, keep_default_na=False)
        return df.apply(lambda col: col.map(_typed_cell)).astype(object)
    engine = "xlrd" if ext == ".xls" else "openpyxl"
    # First sheet only; dtype=object keeps times and day fractions as the
    # workbook stores them
    return pd.read_excel(buffer, sheet_name=0, engine=engine, dtype=object)


def read_table(data: bytes, filename: str) -> Table:
    """Decode the first sheet of a spreadsheet file into header + row records."""
    try:
        df = _read_frame(data, filename)
    except pd.errors.EmptyDataError:
        return Table(headers=[], rows=[])

    headers = [str(c) for c in df.columns]
    df.columns = headers
    df = df.astype(object).where(pd.notna(df), "")
    rows = df.to_dict(orient="records")
    logger.debug("Read %d rows x %d columns from %s", len(rows), len(headers), filename)
    return Table(headers=headers, rows=rows)
