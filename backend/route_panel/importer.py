from __future__ import annotations

import logging
import threading
import time
from typing import List, Optional

from fastapi import HTTPException

from .aggregator import aggregate
from .constants import PDF_EXTENSIONS, PDF_MIME, SHEET_EXTENSIONS
from .models import ColumnMap, ImportKind, ImportMetadata, ImportResponse, Route
from .reader import file_extension, read_table
from .store import ImportStore
from .utils import infer_columns
from .view import band_stats

logger = logging.getLogger(__name__)


def detect_kind(filename: str, content_type: Optional[str]) -> ImportKind:
    ext = file_extension(filename)
    if content_type == PDF_MIME or ext in PDF_EXTENSIONS:
        return "pdf"
    if ext in SHEET_EXTENSIONS:
        return "sheet"
    return "other"


def _now_ms() -> int:
    return int(time.time() * 1000)


class RoutePanel:
    """Holds the current dataset and runs imports against an ImportStore.

    Each import takes a generation number; only the newest one may commit,
    so a slow import finishing after a newer one is discarded.
    """

    def __init__(self, store: ImportStore):
        self.store = store
        self.routes: List[Route] = []
        self.metadata: Optional[ImportMetadata] = None
        self._generation = 0
        self._lock = threading.Lock()

    def restore(self) -> None:
        try:
            routes, metadata = self.store.load()
        except Exception as e:  # noqa: BLE001
            logger.warning("Ignoring unreadable import cache: %s", e)
            routes, metadata = [], None
        self.routes = routes
        self.metadata = metadata

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _reset(self) -> None:
        self.routes = []
        self.metadata = None
        try:
            self.store.clear()
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to clear import cache: %s", e)

    def _commit(self, generation: int, routes: List[Route], metadata: ImportMetadata, raw: bytes) -> None:
        with self._lock:
            if not self._is_current(generation):
                logger.info("Discarding import %d of %s, superseded by %d",
                            generation, metadata.filename, self._generation)
                raise HTTPException(
                    status_code=409, detail="Import superseded by a newer import")
            self.routes = routes
            self.metadata = metadata
        try:
            self.store.save(routes, metadata, raw)
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to persist import %s: %s", metadata.filename, e)

    def _reject(self, generation: int, detail: str) -> HTTPException:
        with self._lock:
            if self._is_current(generation):
                self._reset()
        logger.info("Rejected import: %s", detail)
        return HTTPException(status_code=400, detail=detail)

    def import_file(self, filename: str, content_type: Optional[str], data: bytes) -> ImportResponse:
        kind = detect_kind(filename, content_type)
        if kind == "other":
            raise HTTPException(
                status_code=400, detail="Only .xlsx, .xls, .csv or .pdf files are supported")

        generation = self._next_generation()
        logger.info("Import %d started: %s (%s, %d bytes)", generation, filename, kind, len(data))
        metadata = ImportMetadata(
            filename=filename or "file",
            mimeType=content_type,
            importedAtEpochMs=_now_ms(),
            kind=kind,
        )

        # PDFs are kept as-is for viewing; the dataset is emptied
        if kind == "pdf":
            self._commit(generation, [], metadata, data)
            return ImportResponse(metadata=metadata, routeCount=0, stats=band_stats([], "time"))

        try:
            table = read_table(data, filename)
        except Exception as e:  # noqa: BLE001
            logger.exception("Failed to decode %s", filename)
            raise self._reject(generation, f"Failed to process file: {e}") from e

        if not table.rows:
            raise self._reject(generation, "Spreadsheet is empty or invalid.")

        columns: ColumnMap = infer_columns(table.headers)
        if not columns.RouteId:
            raise self._reject(generation, "Required route id column not found.")

        routes = aggregate(table.rows, columns)
        self._commit(generation, routes, metadata, data)
        logger.info("Import %d committed: %d rows into %d routes", generation, len(table.rows), len(routes))
        return ImportResponse(
            metadata=metadata,
            routeCount=len(routes),
            columns=columns,
            stats=band_stats(routes, "time"),
        )

    def raw_file(self) -> Optional[bytes]:
        if self.metadata is None:
            return None
        return self.store.load_raw_bytes()

    def clear(self) -> None:
        with self._lock:
            # Anything still in flight is now stale
            self._generation += 1
            self.routes = []
            self.metadata = None
        self.store.clear()
        logger.info("Import cache cleared")

    def find(self, route_id: str) -> Optional[Route]:
        for r in self.routes:
            if r.id == route_id:
                return r
        return None
