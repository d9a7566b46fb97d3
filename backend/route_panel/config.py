from __future__ import annotations

import os
from functools import lru_cache
from pydantic import BaseModel
from dotenv import load_dotenv

# Load .env for local development
load_dotenv()


class Settings(BaseModel):
    app_env: str = os.getenv("APP_ENV", "local")
    cors_allowed_origins: str = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    # Optional regex to allow wildcard subdomains (e.g., *.vercel.app)
    cors_allowed_origin_regex: str | None = os.getenv("CORS_ALLOWED_ORIGIN_REGEX")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Where the "last import" cache lives: file | s3 | postgres
    import_store_backend: str = os.getenv("IMPORT_STORE_BACKEND", "file")
    import_store_dir: str = os.getenv("IMPORT_STORE_DIR", ".route_panel_cache")

    # AWS / S3
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    aws_s3_bucket_uploads: str | None = os.getenv("AWS_S3_BUCKET_UPLOADS")
    aws_s3_prefix: str = os.getenv("AWS_S3_PREFIX", "route-panel/")

    # Supabase Postgres
    supabase_db_url: str | None = os.getenv("SUPABASE_DB_URL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
