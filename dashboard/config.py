import os


def _int_env(name: str, default: int) -> int:
    raw = str(os.getenv(name, str(default))).strip()
    try:
        return int(raw)
    except Exception:
        return default


def _bool_env(name: str, default: bool = False) -> bool:
    raw = str(os.getenv(name, str(default))).strip().lower()
    return raw in {"true", "1", "yes"}


REGISTRY_BASE_URL = str(os.getenv("REGISTRY_BASE_URL", "http://127.0.0.1:8080")).strip()
REGISTRY_HTTP_TIMEOUT = _int_env("REGISTRY_HTTP_TIMEOUT", 10)

REFRESH_INTERVAL_MS = _int_env("DASHBOARD_REFRESH_INTERVAL_MS", 5000)
NOTIFICATION_DURATION_MS = _int_env("DASHBOARD_NOTIFICATION_MS", 2000)

DASHBOARD_PORT = _int_env("DASHBOARD_PORT", 5000)
DASHBOARD_BIND_HOST = str(os.getenv("DASHBOARD_BIND_HOST", "0.0.0.0")).strip()
DASHBOARD_DEBUG = _bool_env("DASHBOARD_DEBUG")

LOG_LEVEL = str(os.getenv("LOG_LEVEL", "INFO")).strip().upper()
LOG_FILE = os.getenv("DASHBOARD_LOG_FILE") or None
