"""
Message archival job.

Moves messages whose ``updated_at`` is older than ``MESSAGE_ARCHIVE_DAYS``
into ``messages_archive`` and deletes them from ``messages``, in one
transaction. Run once with ``python -m rentmyride.jobs.archive`` or keep it
running with ``--schedule`` to archive every day at ``ARCHIVE_HOUR``:00 UTC.
"""

import argparse
import logging
import sys
import time
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rentmyride.config import ARCHIVE_HOUR, LOG_LEVEL, MESSAGE_ARCHIVE_DAYS
from rentmyride.db import SessionLocal, init_database, load_models
from rentmyride.models.message import Message, MessageArchive
from rentmyride.utils.validation_helpers import utcnow

logger = logging.getLogger(__name__)

load_models()

ARCHIVED_COLUMNS = ("id", "sender_id", "receiver_id", "content", "created_at", "updated_at")


def archive_messages(db: Session, days: int = MESSAGE_ARCHIVE_DAYS, now: Optional[datetime] = None) -> int:
    """Archive eligible messages and return how many were removed from ``messages``."""
    cutoff = (now or utcnow()) - timedelta(days=days)
    eligible = Message.updated_at <= cutoff
    already_archived = select(MessageArchive.id)

    source = select(*(getattr(Message, c) for c in ARCHIVED_COLUMNS)).where(
        eligible, Message.id.not_in(already_archived)
    )
    try:
        copied = db.execute(
            insert(MessageArchive).from_select(list(ARCHIVED_COLUMNS), source)
        ).rowcount
        deleted = db.execute(delete(Message).where(eligible)).rowcount
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info(f"Archived {copied} message(s), removed {deleted} older than {cutoff.isoformat()}")
    return deleted


def run_once() -> int:
    """Run the job with its own session. Returns a process exit code."""
    logger.info("Starting messages archive job")
    db = SessionLocal()
    try:
        archive_messages(db)
    except SQLAlchemyError as err:
        logger.error(f"Archive job failed: {err}")
        return 1
    finally:
        db.close()
    return 0


def seconds_until_next_run(now: datetime, hour: int = ARCHIVE_HOUR) -> float:
    """Seconds from ``now`` to the next ``hour``:00; a run exactly at ``now`` waits a full day."""
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


def schedule_forever(hour: int = ARCHIVE_HOUR):
    logger.info(f"Archive scheduler started, daily at {hour:02d}:00 UTC")
    while True:
        time.sleep(seconds_until_next_run(utcnow(), hour))
        if run_once() != 0:
            logger.error("Scheduled archive run failed; will retry at the next slot")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Archive old messages.")
    parser.add_argument("--schedule", action="store_true", help="run daily instead of once")
    parser.add_argument("--hour", type=int, default=ARCHIVE_HOUR, help="UTC hour for scheduled runs")
    args = parser.parse_args(argv)

    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    init_database()
    if args.schedule:
        schedule_forever(args.hour)
    return run_once()


if __name__ == "__main__":
    sys.exit(main())
