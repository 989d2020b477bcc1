"""
DASHBOARD CONFIGURATION

Purpose:
- Central place for environment-driven settings
- Typed defaults for local development
- Logging bootstrap for the Streamlit entrypoint

Rules:
- Never hardcode API tokens (use os.getenv)
- Currency divisor is NOT configurable (see courier_ops.core.money)
"""

import os
import logging


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid integer for {name}={raw!r}, using default {default}"
        )
        return default


# ==================================================
# COURIER API
# ==================================================

COURIER_API_BASE_URL = os.getenv("COURIER_API_BASE_URL", "http://127.0.0.1:8000/api")
COURIER_API_TOKEN = os.getenv("COURIER_API_TOKEN")
API_TIMEOUT = _env_int("COURIER_API_TIMEOUT", 10)  # seconds

SHIPMENT_FETCH_LIMIT = _env_int("SHIPMENT_FETCH_LIMIT", 1000)


# ==================================================
# DASHBOARD SYNC
# ==================================================

DEBOUNCE_MS = _env_int("DASHBOARD_DEBOUNCE_MS", 500)
POLL_SECONDS = _env_int("DASHBOARD_POLL_SECONDS", 30)


# ==================================================
# LIST VIEWS
# ==================================================

LIST_PAGE_SIZE = _env_int("LIST_PAGE_SIZE", 10)


# ==================================================
# LOGGING
# ==================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_logging_configured = False


def configure_logging() -> None:
    """Install the root handler once per process."""
    global _logging_configured

    if _logging_configured:
        return

    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    _logging_configured = True
