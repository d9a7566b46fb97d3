from __future__ import annotations

import io
import logging
import time
from functools import lru_cache
from typing import Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from .config import get_settings
from .exporter import MEDIA_TYPES, ExportFormat, export_filename, export_rows, write_export
from .importer import RoutePanel
from .models import (
    BandFilter,
    ImportResponse,
    LastImport,
    Mode,
    RouteDetail,
    RoutesResponse,
    SortDir,
    SortKey,
)
from .parsing import time_ago
from .store import build_store
from .view import band_stats, build_view, to_route_detail, to_route_view

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Route Panel API", version="0.1.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip()
                   for o in settings.cors_allowed_origins.split(",")],
    allow_origin_regex=settings.cors_allowed_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_panel() -> RoutePanel:
    panel = RoutePanel(build_store(settings))
    panel.restore()
    return panel


class Health(BaseModel):
    status: str
    env: str


@app.get("/health", response_model=Health)
def health() -> Health:
    return Health(status="ok", env=settings.app_env)


def content_disposition(disposition: str, filename: str) -> str:
    """Header value with an ASCII fallback plus the RFC 5987 UTF-8 name."""
    fallback = filename.encode("ascii", "ignore").decode("ascii")
    fallback = fallback.replace('"', "").replace("\\", "") or "file"
    return f"{disposition}; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


# Sync so decoding and store writes run in the threadpool
@app.post("/import", response_model=ImportResponse)
def import_file(file: UploadFile = File(...), panel: RoutePanel = Depends(get_panel)):
    content: bytes = file.file.read()
    return panel.import_file(file.filename or "", file.content_type, content)


@app.get("/routes", response_model=RoutesResponse)
def list_routes(
    mode: Mode = "time",
    band: BandFilter = "all",
    q: str = "",
    sort: SortKey = "score",
    dir: SortDir = "asc",
    panel: RoutePanel = Depends(get_panel),
):
    routes = build_view(panel.routes, mode, band, q, sort, dir)
    return RoutesResponse(
        mode=mode,
        stats=band_stats(panel.routes, mode),
        routes=[to_route_view(r, mode) for r in routes],
    )


@app.get("/routes/{route_id}", response_model=RouteDetail)
def route_detail(route_id: str, mode: Mode = "time", panel: RoutePanel = Depends(get_panel)):
    r = panel.find(route_id)
    if r is None:
        raise HTTPException(status_code=404, detail=f"Route {route_id} not found")
    return to_route_detail(r, mode)


@app.get("/export")
def export_routes(
    mode: Mode = "time",
    band: BandFilter = "all",
    q: str = "",
    sort: SortKey = "score",
    dir: SortDir = "asc",
    format: ExportFormat = "csv",
    panel: RoutePanel = Depends(get_panel),
) -> StreamingResponse:
    routes = build_view(panel.routes, mode, band, q, sort, dir)
    out = write_export(export_rows(routes, mode), format)
    filename = export_filename(mode, format)
    return StreamingResponse(out, media_type=MEDIA_TYPES[format],
                             headers={"Content-Disposition": content_disposition("attachment", filename)})


@app.get("/import/last", response_model=LastImport)
def last_import(panel: RoutePanel = Depends(get_panel)):
    meta = panel.metadata
    if meta is None:
        raise HTTPException(status_code=404, detail="Nothing imported yet")
    now_ms = int(time.time() * 1000)
    return LastImport(**meta.model_dump(), importedAgo=time_ago(meta.importedAtEpochMs, now_ms))


@app.get("/import/last/file")
def last_import_file(panel: RoutePanel = Depends(get_panel)) -> StreamingResponse:
    raw: Optional[bytes] = panel.raw_file()
    if raw is None or panel.metadata is None:
        raise HTTPException(status_code=404, detail="No cached file")
    meta = panel.metadata
    # PDFs open in the browser, spreadsheets download
    disposition = "inline" if meta.kind == "pdf" else "attachment"
    return StreamingResponse(io.BytesIO(raw), media_type=meta.mimeType or "application/octet-stream",
                             headers={"Content-Disposition": content_disposition(disposition, meta.filename)})


@app.delete("/import/cache")
def clear_cache(panel: RoutePanel = Depends(get_panel)):
    try:
        panel.clear()
    except Exception as e:
        logger.exception("Failed to clear import cache")
        raise HTTPException(status_code=500, detail=str(e))
    return {"ok": True}
