"""
Runtime configuration for the freshman service.

All values are read once from environment variables at import time.
Defaults are suitable for local development against SQLite.
"""

import os

# Database
# Fallback to SQLite for local development when PostgreSQL is not available
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./freshman.db")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "20"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Bearer tokens are issued by the upstream auth service
JWT_SECRET = os.getenv("JWT_SECRET", "change_me_for_prod")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Upper bound on rows returned by approval listing and search
PAGE_SIZE_CAP = int(os.getenv("PAGE_SIZE_CAP", "50"))

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]

# Development server (python -m app.main)
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
