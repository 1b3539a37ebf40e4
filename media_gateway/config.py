"""Application configuration."""

import os
from pathlib import Path

# Load .env so storage credentials and other vars are available
try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


# Storage: "local", "managed-cloud" (Supabase) or "s3-cdn" (S3-compatible + CDN)
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")

# Local storage path (used when STORAGE_BACKEND=local)
LOCAL_STORAGE_PATH = Path(os.getenv("LOCAL_STORAGE_PATH", "uploads")).resolve()

# Public address of this service; local uploads are served from here
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")

# Supabase (used when STORAGE_BACKEND=managed-cloud)
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_BUCKET = os.getenv("SUPABASE_BUCKET", "design-images")
SUPABASE_PUBLIC_BUCKET = _flag("SUPABASE_PUBLIC_BUCKET")

# S3-compatible object store (used when STORAGE_BACKEND=s3-cdn)
S3_ENDPOINT = os.getenv("S3_ENDPOINT", "https://s3.wasabisys.com").rstrip("/")
S3_REGION = os.getenv("S3_REGION", "us-east-1")
S3_ACCESS_KEY_ID = os.getenv("S3_ACCESS_KEY_ID", "")
S3_SECRET_ACCESS_KEY = os.getenv("S3_SECRET_ACCESS_KEY", "")
S3_BUCKET = os.getenv("S3_BUCKET", "indie-craft-designs")
# CDN hostname (or https://host) fronting the bucket; empty serves from the endpoint
CDN_URL = os.getenv("CDN_URL", "").rstrip("/")
S3_UPLOAD_URL_TTL = int(os.getenv("S3_UPLOAD_URL_TTL", "3600"))

# Read URLs for private objects
SIGNED_URL_TTL = int(os.getenv("SIGNED_URL_TTL", "3600"))

# Per backend call (seconds) and max objects in flight for batch operations
STORAGE_CALL_TIMEOUT = float(os.getenv("STORAGE_CALL_TIMEOUT", "10"))
STORAGE_BATCH_CONCURRENCY = int(os.getenv("STORAGE_BATCH_CONCURRENCY", "8"))

# File size limits for local ingestion (bytes)
MAX_FILE_SIZE_IMAGE = int(os.getenv("MAX_FILE_SIZE_IMAGE", 10 * 1024 * 1024))  # 10 MB
MAX_FILE_SIZE_VIDEO = int(os.getenv("MAX_FILE_SIZE_VIDEO", 50 * 1024 * 1024))  # 50 MB

# JWT (auth); tokens are issued by the catalogue's auth service
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]
