import logging
import os

logger = logging.getLogger(__name__)


def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _int_setting(env_var: str, default: int, *, minimum: int = 0) -> int:
    raw_value = os.getenv(env_var)
    if raw_value is None or not raw_value.strip():
        return default

    try:
        value = int(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid integer (got %r); defaulting to %d",
            env_var,
            raw_value,
            default,
        )
        return default

    if value < minimum:
        logger.warning(
            "%s must be >= %d (got %d); defaulting to %d",
            env_var,
            minimum,
            value,
            default,
        )
        return default

    return value


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")

# Elo step applied once per finalized match
RATING_K_FACTOR = _int_setting("RATING_K_FACTOR", 32, minimum=1)
DEFAULT_PLAYER_RATING = _int_setting("DEFAULT_PLAYER_RATING", 500)

# Attempts (not retries) for the finalization transaction
FINALIZE_MAX_ATTEMPTS = _int_setting("FINALIZE_MAX_ATTEMPTS", 3, minimum=1)

EVENT_RATE_LIMIT = (os.getenv("EVENT_RATE_LIMIT") or "60/minute").strip()
