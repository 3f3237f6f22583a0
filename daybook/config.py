"""
Centralized configuration for Daybook.

Everything that varies by deployment belongs here.
Override via environment variables where marked.
"""

import os


def _flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("DAYBOOK_LOG_LEVEL", "INFO")
"""Root log level (DEBUG, INFO, WARNING, ERROR)."""

LOG_JSON: bool | None = _flag("DAYBOOK_LOG_JSON") if "DAYBOOK_LOG_JSON" in os.environ else None
"""Force JSON (true) or human (false) log lines. Unset: JSON when stderr is not a TTY."""

LOG_FILE: str | None = os.environ.get("DAYBOOK_LOG_FILE") or None
"""Optional rotating log file in addition to stderr."""

# ============================================================
# Storage
# ============================================================

TREAT_CORRUPT_AS_EMPTY: bool = _flag("DAYBOOK_TREAT_CORRUPT_AS_EMPTY")
"""Read unparseable day records as empty instead of failing."""

# ============================================================
# API
# ============================================================

API_TOKEN: str | None = os.environ.get("DAYBOOK_API_TOKEN") or None
"""Bearer token required by every API route. Unset: auth disabled (dev mode)."""

PORT: int = int(os.environ.get("PORT", "8080"))
"""Port for `daybook serve`."""

HOST: str = os.environ.get("DAYBOOK_HOST", "127.0.0.1")
"""Bind address for `daybook serve`."""

CORS_ORIGINS: list[str] = [
    o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()
]
"""Allowed CORS origins, comma-separated. "*" allows all."""
