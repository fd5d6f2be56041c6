import logging
import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}, using {default}")
        return default


# Target used when a schedule has no fixed window and no explicit daily load
DEFAULT_DAILY_MINUTES = _int_env("DEFAULT_DAILY_MINUTES", 8 * 60)

# Look-back window of the company-wide inconsistency report
REPORT_WINDOW_DAYS = _int_env("REPORT_WINDOW_DAYS", 30)
