import os
from typing import List


VERSION = "v0.3.0"


def _csv_list(raw: str) -> List[str]:
    """Parse a comma-separated string into normalized non-empty values."""
    out: List[str] = []
    for x in str(raw or "").split(","):
        s = str(x or "").strip()
        if s and s not in out:
            out.append(s)
    return out


def _optional_int(raw: str) -> int:
    """Return int value of an env string, 0 when empty or malformed."""
    try:
        return int(str(raw or "").strip() or "0")
    except ValueError:
        return 0


HOST = os.environ.get("LANSHARE_HOST", "0.0.0.0")
PORT = int(os.environ.get("LANSHARE_PORT", "8989"))
ADVERTISE_HOST = str(os.environ.get("LANSHARE_ADVERTISE_HOST", "") or "").strip()

DEBUG = os.environ.get("LANSHARE_DEBUG", "0") == "1"
CONSOLE_LOG = os.environ.get("LANSHARE_CONSOLE", "1") == "1"
LOG_FILE = str(os.environ.get("LANSHARE_LOG_FILE", "") or "").strip()
LOG_ENABLED = CONSOLE_LOG or bool(LOG_FILE)

TRANSFER_PRESET = str(os.environ.get("LANSHARE_TRANSFER_PRESET", "balanced") or "balanced").strip().lower()
TRANSFER_CHUNK = _optional_int(os.environ.get("LANSHARE_TRANSFER_CHUNK", ""))
IN_APP_MARKERS = _csv_list(os.environ.get("LANSHARE_IN_APP_MARKERS", "MicroMessenger"))


def reload_from_env() -> None:
    """Reload runtime configuration from environment variables."""
    global HOST, PORT, ADVERTISE_HOST
    global DEBUG, CONSOLE_LOG, LOG_FILE, LOG_ENABLED
    global TRANSFER_PRESET, TRANSFER_CHUNK, IN_APP_MARKERS

    HOST = os.environ.get("LANSHARE_HOST", HOST)
    PORT = int(os.environ.get("LANSHARE_PORT", str(PORT)))
    ADVERTISE_HOST = str(os.environ.get("LANSHARE_ADVERTISE_HOST", ADVERTISE_HOST) or "").strip()

    DEBUG = os.environ.get("LANSHARE_DEBUG", "0") == "1"
    CONSOLE_LOG = os.environ.get("LANSHARE_CONSOLE", "1") == "1"
    LOG_FILE = str(os.environ.get("LANSHARE_LOG_FILE", LOG_FILE) or "").strip()
    LOG_ENABLED = CONSOLE_LOG or bool(LOG_FILE)

    TRANSFER_PRESET = (
        str(os.environ.get("LANSHARE_TRANSFER_PRESET", TRANSFER_PRESET) or "balanced").strip().lower()
    )
    TRANSFER_CHUNK = _optional_int(os.environ.get("LANSHARE_TRANSFER_CHUNK", str(TRANSFER_CHUNK)))
    IN_APP_MARKERS = _csv_list(os.environ.get("LANSHARE_IN_APP_MARKERS", ",".join(IN_APP_MARKERS)))
