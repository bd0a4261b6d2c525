"""Keyset pagination over ``created_at DESC, id DESC``."""

import base64
import binascii
import json
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import and_, or_

from rentmyride.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        limit = DEFAULT_PAGE_SIZE
    return max(1, min(limit, MAX_PAGE_SIZE))


def encode_cursor(row) -> Optional[str]:
    if row is None:
        return None
    payload = {"c": row.created_at.isoformat(), "i": row.id}
    return base64.urlsafe_b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def decode_cursor(cursor: Optional[str]):
    """Return ``(created_at, id)`` or None when the cursor is absent or malformed."""
    if not cursor:
        return None
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii") + b"=" * (-len(cursor) % 4))
        payload = json.loads(raw.decode("utf-8"))
        return datetime.fromisoformat(payload["c"]), int(payload["i"])
    except (binascii.Error, UnicodeError, ValueError, TypeError, KeyError) as err:
        logger.debug(f"Ignoring malformed cursor {cursor!r}: {err}")
        return None


def paginate(query, model, limit: Optional[int] = None, cursor: Optional[str] = None):
    """
    Apply the cursor to ``query`` and fetch one page.

    Returns ``(items, next_cursor)``; ``next_cursor`` is None on the last page.
    """
    take = clamp_limit(limit)
    position = decode_cursor(cursor)
    if position is not None:
        created_at, row_id = position
        query = query.filter(
            or_(
                model.created_at < created_at,
                and_(model.created_at == created_at, model.id < row_id),
            )
        )
    rows = query.order_by(model.created_at.desc(), model.id.desc()).limit(take + 1).all()
    next_cursor = None
    if len(rows) > take:
        rows = rows[:take]
        next_cursor = encode_cursor(rows[-1])
    return rows, next_cursor
