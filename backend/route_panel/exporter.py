from __future__ import annotations

import io
from typing import Dict, List, Literal

import openpyxl
import pandas as pd

from .constants import EXPORT_COLUMNS, EXPORT_SHEET_NAME
from .metrics import avg_minutes, classify, stops_count, worst_minutes
from .models import Mode, Route
from .parsing import format_minutes

ExportFormat = Literal["csv", "xlsx"]

MEDIA_TYPES = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def export_rows(routes: List[Route], mode: Mode) -> List[Dict]:
    """One flat record per route, in the order given."""
    rows = []
    for r in routes:
        score = classify(r, mode).score
        rows.append({
            "RouteId": r.id,
            "StopsTotal": stops_count(r),
            "Score": format_minutes(score) if mode == "time" else score,
            "Worst": format_minutes(worst_minutes(r)),
            "Avg": format_minutes(avg_minutes(r)),
            "Neighborhood": r.neighborhoodSample or "",
            "LocationTypes": ", ".join(r.locationTypes),
            "PlannedAT": r.plannedAtSample or "",
        })
    return rows


def export_filename(mode: Mode, fmt: ExportFormat = "csv") -> str:
    return f"routes_consolidated_{mode}.{fmt}"


def _csv_bytes(rows: List[Dict]) -> io.BytesIO:
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    out = io.BytesIO()
    out.write(df.to_csv(index=False).encode("utf-8"))
    out.seek(0)
    return out


def _xlsx_bytes(rows: List[Dict], sheet_name: str) -> io.BytesIO:
    wb = openpyxl.Workbook()
    ws = wb.active
    if ws is None:
        ws = wb.create_sheet(sheet_name)
    else:
        ws.title = sheet_name
    ws.append(EXPORT_COLUMNS)  # headers
    for row in rows:
        ws.append([row.get(c) for c in EXPORT_COLUMNS])

    # Return as stream
    out = io.BytesIO()
    wb.save(out)
    out.seek(0)
    return out


def write_export(rows: List[Dict], fmt: ExportFormat = "csv", sheet_name: str = EXPORT_SHEET_NAME) -> io.BytesIO:
    if fmt == "xlsx":
        return _xlsx_bytes(rows, sheet_name)
    return _csv_bytes(rows)
