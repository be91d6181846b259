"""
Runtime configuration read from the environment.

All settings are resolved once at import time. Tests and local runs override
them by exporting the variables before the application is imported.
"""

import os

# Database URL. Falls back to a local SQLite file when PostgreSQL is not available.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./course_registry.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Header set by the upstream auth gateway with the authenticated identity id
IDENTITY_HEADER = os.getenv("IDENTITY_HEADER", "X-Identity-Id")

# Shared secret for the auth provider hooks. Empty disables the check.
AUTH_HOOK_SECRET = os.getenv("AUTH_HOOK_SECRET", "")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
