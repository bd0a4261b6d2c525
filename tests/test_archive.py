from datetime import datetime, timedelta

from rentmyride.jobs.archive import archive_messages, seconds_until_next_run
from rentmyride.models.booking import Booking, BookingStatus
from rentmyride.models.message import Message, MessageArchive
from rentmyride.models.vehicle import Vehicle
from rentmyride.seed import seed
from rentmyride.utils.validation_helpers import utcnow
from tests.conf_tests import (
    clear_db,
    test_db,
    customer,
    owner,
)


def add_message(db, sender, receiver, content, age_days):
    stamp = utcnow() - timedelta(days=age_days)
    message = Message(
        sender_id=sender.id,
        receiver_id=receiver.id,
        content=content,
        created_at=stamp,
        updated_at=stamp,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def test_archive_moves_old_messages(test_db, customer, owner):
    old = add_message(test_db, customer, owner, "old", 20)
    fresh = add_message(test_db, owner, customer, "fresh", 2)
    old_id, fresh_id = old.id, fresh.id

    moved = archive_messages(test_db, days=15)
    assert moved == 1

    test_db.expire_all()
    assert [m.id for m in test_db.query(Message).all()] == [fresh_id]
    archived = test_db.query(MessageArchive).all()
    assert [(a.id, a.content, a.sender_id) for a in archived] == [(old_id, "old", customer.id)]


def test_archive_is_idempotent(test_db, customer, owner):
    add_message(test_db, customer, owner, "old", 30)

    assert archive_messages(test_db, days=15) == 1
    assert archive_messages(test_db, days=15) == 0
    assert test_db.query(MessageArchive).count() == 1


def test_archive_cutoff_uses_now(test_db, customer, owner):
    add_message(test_db, customer, owner, "ten days", 10)

    assert archive_messages(test_db, days=15) == 0
    assert archive_messages(test_db, days=15, now=utcnow() + timedelta(days=6)) == 1


def test_seconds_until_next_run():
    assert seconds_until_next_run(datetime(2026, 5, 1, 1, 0), hour=2) == 3600
    assert seconds_until_next_run(datetime(2026, 5, 1, 3, 0), hour=2) == 23 * 3600
    assert seconds_until_next_run(datetime(2026, 5, 1, 2, 0), hour=2) == 24 * 3600


def test_seed_is_idempotent(test_db):
    first = seed(test_db)
    second = seed(test_db)

    assert first["owner"].id == second["owner"].id
    assert first["booking"].id == second["booking"].id
    assert test_db.query(Vehicle).count() == 2
    assert test_db.query(Booking).count() == 1
    assert second["booking"].status == BookingStatus.CONFIRMED
    assert second["booking"].vehicle.owner_id == second["owner"].id
