from __future__ import annotations

import abc
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import boto3
import psycopg
from botocore.exceptions import ClientError
from fastapi import HTTPException
from pydantic import TypeAdapter

from .config import Settings
from .constants import STORE_DATA_KEY, STORE_FILE_KEY, STORE_META_KEY
from .models import ImportMetadata, Route

logger = logging.getLogger(__name__)

_routes_adapter = TypeAdapter(List[Route])


def dump_routes(routes: List[Route]) -> bytes:
    return _routes_adapter.dump_json(routes)


def load_routes(raw: bytes) -> List[Route]:
    return _routes_adapter.validate_json(raw)


class ImportStore(abc.ABC):
    """Persists the last import: dataset, metadata and the raw file bytes.

    The three pieces are always replaced together and cleared together.
    """

    @abc.abstractmethod
    def _put(self, blobs: Dict[str, bytes]) -> None: ...

    @abc.abstractmethod
    def _get(self, key: str) -> Optional[bytes]: ...

    @abc.abstractmethod
    def _delete(self, keys: List[str]) -> None: ...

    def save(self, routes: List[Route], metadata: ImportMetadata, raw: bytes) -> None:
        self._put({
            STORE_DATA_KEY: dump_routes(routes),
            STORE_META_KEY: metadata.model_dump_json().encode("utf-8"),
            STORE_FILE_KEY: raw,
        })

    def load(self) -> Tuple[List[Route], Optional[ImportMetadata]]:
        data = self._get(STORE_DATA_KEY)
        meta = self._get(STORE_META_KEY)
        if data is None or meta is None:
            return [], None
        return load_routes(data), ImportMetadata.model_validate_json(meta)

    def load_raw_bytes(self) -> Optional[bytes]:
        return self._get(STORE_FILE_KEY)

    def clear(self) -> None:
        self._delete([STORE_DATA_KEY, STORE_META_KEY, STORE_FILE_KEY])


class FileImportStore(ImportStore):
    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / key

    def _put(self, blobs: Dict[str, bytes]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        for key, value in blobs.items():
            self._path(key).write_bytes(value)

    def _get(self, key: str) -> Optional[bytes]:
        p = self._path(key)
        if not p.exists():
            return None
        return p.read_bytes()

    def _delete(self, keys: List[str]) -> None:
        for key in keys:
            self._path(key).unlink(missing_ok=True)


class S3ImportStore(ImportStore):
    def __init__(self, bucket: str, prefix: str = "route-panel/", region: str = "us-east-1", client=None):
        self.bucket = bucket
        self.prefix = prefix.rstrip("/")
        self.s3 = client or boto3.client("s3", region_name=region)

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def _put(self, blobs: Dict[str, bytes]) -> None:
        for key, value in blobs.items():
            self.s3.put_object(Bucket=self.bucket, Key=self._key(key), Body=value)

    def _get(self, key: str) -> Optional[bytes]:
        try:
            obj = self.s3.get_object(Bucket=self.bucket, Key=self._key(key))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        return obj["Body"].read()

    def _delete(self, keys: List[str]) -> None:
        for key in keys:
            self.s3.delete_object(Bucket=self.bucket, Key=self._key(key))


_CREATE_TABLE = """
create table if not exists route_panel_cache (
    key text primary key,
    value bytea not null,
    updated_at timestamptz not null default now()
)
"""

_UPSERT = """
insert into route_panel_cache (key, value) values (%s, %s)
on conflict (key) do update set value = excluded.value, updated_at = now()
"""


class PostgresImportStore(ImportStore):
    def __init__(self, dsn: str, connect: Callable = psycopg.connect):
        self.dsn = dsn
        self._connect = connect
        self._table_ready = False

    def _conn(self):
        conn = self._connect(self.dsn, connect_timeout=5)
        if not self._table_ready:
            with conn.cursor() as cur:
                cur.execute(_CREATE_TABLE)
            self._table_ready = True
        return conn

    def _put(self, blobs: Dict[str, bytes]) -> None:
        # One transaction so the three blobs never disagree
        with self._conn() as conn:
            with conn.cursor() as cur:
                for key, value in blobs.items():
                    cur.execute(_UPSERT, (key, value))

    def _get(self, key: str) -> Optional[bytes]:
        with self._conn() as conn:
            with conn.cursor() as cur:
                cur.execute("select value from route_panel_cache where key = %s", (key,))
                row = cur.fetchone()
        return bytes(row[0]) if row else None

    def _delete(self, keys: List[str]) -> None:
        with self._conn() as conn:
            with conn.cursor() as cur:
                cur.execute("delete from route_panel_cache where key = any(%s)", (keys,))


def build_store(settings: Settings) -> ImportStore:
    backend = (settings.import_store_backend or "file").strip().lower()
    if backend == "file":
        return FileImportStore(settings.import_store_dir)
    if backend == "s3":
        if not settings.aws_s3_bucket_uploads:
            raise HTTPException(
                status_code=503, detail="AWS_S3_BUCKET_UPLOADS not configured")
        return S3ImportStore(settings.aws_s3_bucket_uploads, settings.aws_s3_prefix, settings.aws_region)
    if backend == "postgres":
        if not settings.supabase_db_url:
            raise HTTPException(
                status_code=503, detail="SUPABASE_DB_URL not configured")
        return PostgresImportStore(settings.supabase_db_url)
    raise HTTPException(
        status_code=503, detail=f"Unknown IMPORT_STORE_BACKEND: {backend}")
