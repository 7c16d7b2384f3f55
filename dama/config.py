# dama/config.py
import os
from pathlib import Path

from dotenv import dotenv_values

_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"


def _read_env_file() -> dict[str, str]:
    if not _ENV_PATH.exists():
        return {}
    return {k: v for k, v in dotenv_values(_ENV_PATH).items() if v is not None}


_ENV_FILE_VALUES = _read_env_file()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    if v is not None and str(v).strip() != "":
        return str(v)
    return _ENV_FILE_VALUES.get(name, default)


def _int_env(name: str, default: int) -> int:
    raw = _env(name, str(default)).strip()
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"❌ {name} must be an integer, got {raw!r}.") from None


# ================== RULES ==================
# Capture tie-break policies a game may be configured with. Only the
# maximal-length rule filters captures; the policy is carried along unused.
TIE_BREAK_POLICIES = (
    "free_choice",
    "most_kings",
    "prefer_king_start",
)

TIE_BREAK = _env("DAMA_TIE_BREAK", "free_choice").strip().lower()
if TIE_BREAK not in TIE_BREAK_POLICIES:
    raise RuntimeError(
        f"❌ DAMA_TIE_BREAK={TIE_BREAK!r} is not one of {', '.join(TIE_BREAK_POLICIES)}."
    )

# Consecutive non-capturing actions before a game is drawn. 0 disables.
NO_CAPTURE_LIMIT = _int_env("DAMA_NO_CAPTURE_LIMIT", 50)
if NO_CAPTURE_LIMIT < 0:
    raise RuntimeError("❌ DAMA_NO_CAPTURE_LIMIT must be >= 0.")

# ================== LOGGING ==================
LOG_LEVEL = (_env("LOG_LEVEL", "INFO") or "INFO").upper()
LOG_DIR = _env("LOG_DIR", "logs")
LOG_MAX_MB = _int_env("LOG_MAX_MB", 10)
LOG_BACKUP_COUNT = _int_env("LOG_BACKUP_COUNT", 5)
