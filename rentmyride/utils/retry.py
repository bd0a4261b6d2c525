import logging
import re
import time

from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)

RETRY_ATTEMPTS = 3
RETRY_DELAY = 0.15

TRANSIENT_PATTERN = re.compile(
    r"could not connect|can't reach database|connection refused|connection reset|"
    r"server closed the connection|terminating connection|timeout expired",
    re.IGNORECASE,
)


def is_transient(err: Exception) -> bool:
    if not isinstance(err, OperationalError):
        return False
    return bool(err.connection_invalidated or TRANSIENT_PATTERN.search(str(err)))


def retry_transient(func, db=None, attempts: int = RETRY_ATTEMPTS, delay: float = RETRY_DELAY):
    """
    Call ``func`` and retry it on transient connection errors, with a linear
    back-off of ``delay * attempt`` seconds. ``db`` is rolled back between attempts.
    """
    attempt = 1
    while True:
        try:
            return func()
        except OperationalError as err:
            if attempt >= attempts or not is_transient(err):
                raise
            logger.warning(f"Transient database error (attempt {attempt}/{attempts}): {err.orig}")
            if db is not None:
                db.rollback()
            time.sleep(delay * attempt)
            attempt += 1
