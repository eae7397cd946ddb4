# Configuration from environment variables (.env or host variables).

import os
from dotenv import load_dotenv

load_dotenv()


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_int(key: str, default: int) -> int:
    s = _env(key)
    if not s:
        return default
    try:
        return int(s)
    except ValueError:
        return default


# ============================================================================
# Session storage
# ============================================================================
# json | sqlite | memory
PREFS_STORE_BACKEND = _env("PREFS_STORE_BACKEND", "json").lower()
PREFS_STATE_PATH = _env("PREFS_STATE_PATH", "rl_state.json")
PREFS_SQLITE_PATH = _env("PREFS_SQLITE_PATH", "rl_state.db")
PREFS_SESSION_KEY = _env("PREFS_SESSION_KEY", "default")

# ============================================================================
# Engine
# ============================================================================
PREFS_LEDGER_MAX_EVENTS = max(1, _env_int("PREFS_LEDGER_MAX_EVENTS", 500))
PREFS_EXPORT_DIR = _env("PREFS_EXPORT_DIR", "exports")

# ============================================================================
# Logging
# ============================================================================
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
