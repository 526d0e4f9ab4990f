# Configuration from environment variables (.env or deployment variables).

import logging
import os

from dotenv import load_dotenv

load_dotenv()


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_bool(key: str, default: str = "false") -> bool:
    return _env(key, default).lower() in ("1", "true", "yes")


def _env_int(key: str, default: int) -> int:
    try:
        return int(_env(key, str(default)))
    except ValueError:
        return default


def _env_float_list(key: str, default: list) -> list:
    s = _env(key)
    if not s:
        return list(default)
    result = []
    for x in s.split(","):
        x = x.strip()
        if not x:
            continue
        try:
            result.append(float(x))
        except ValueError:
            return list(default)
    return result if len(result) == len(default) else list(default)


def _env_str_list(key: str, default: list) -> list:
    s = _env(key)
    if not s:
        return list(default)
    return [x.strip() for x in s.split(",") if x.strip()]


# ============================================================================
# Database
# ============================================================================
DATABASE_URL_FALLBACK = _env("DATABASE_URL_FALLBACK", "sqlite+aiosqlite:///./local_cemse.db")
CREATE_TABLES = _env_bool("CREATE_TABLES", "true")

# ============================================================================
# Logging
# ============================================================================
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()

# ============================================================================
# Pagination & filters
# ============================================================================
DEFAULT_PAGE_SIZE = _env_int("DEFAULT_PAGE_SIZE", 20)
MAX_PAGE_SIZE = _env_int("MAX_PAGE_SIZE", 100)
# Reject malformed optional filters with 400 instead of dropping them
STRICT_FILTERS = _env_bool("STRICT_FILTERS", "false")

# ============================================================================
# Global search
# ============================================================================
SEARCH_MIN_QUERY_LENGTH = _env_int("SEARCH_MIN_QUERY_LENGTH", 2)
SEARCH_RANKING = _env("SEARCH_RANKING", "priority").lower()  # priority | relevance
SEARCH_FAILURE_POLICY = _env("SEARCH_FAILURE_POLICY", "fail").lower()  # fail | partial

POPULAR_SEARCHES = _env_str_list("POPULAR_SEARCHES", [
    "Desarrollador Frontend",
    "Marketing Digital",
    "Diseño Gráfico",
    "Administración",
    "Ventas",
    "Recursos Humanos",
    "Contabilidad",
    "Ingeniería",
    "Medicina",
    "Educación",
])

# ============================================================================
# Startup discovery
# ============================================================================
TRENDING_WINDOW_DAYS = _env_int("TRENDING_WINDOW_DAYS", 30)
# views, recency, rating
TRENDING_WEIGHTS = _env_float_list("TRENDING_WEIGHTS", [0.4, 0.3, 0.3])
RECENT_ACTIVITY_DAYS = _env_int("RECENT_ACTIVITY_DAYS", 7)

# ============================================================================
# Certificates
# ============================================================================
CERTIFICATE_LOGO_DIR = _env("CERTIFICATE_LOGO_DIR", "assets/logos")


def configure_logging(level: str = None) -> None:
    """Configure root logging for the API process."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
