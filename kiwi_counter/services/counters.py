from typing import NamedTuple

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from kiwi_counter.core.database import storage_errors
from kiwi_counter.core.errors import NotFound
from kiwi_counter.models import User

COUNTER_COLORS = ("green", "yellow")


class Counts(NamedTuple):
    green: int
    yellow: int


def _increment(db: Session, user_id: str, field: str) -> int:
    column = getattr(User, field)
    with storage_errors(db, f"increment {field}"):
        result = db.execute(
            update(User)
            .where(User.id == user_id)
            .values({field: column + 1})
        )
        if result.rowcount == 0:
            db.rollback()
            raise NotFound()
        # still inside the writing transaction, so this is our own value
        new_value = db.execute(
            select(column).where(User.id == user_id)
        ).scalar_one()
        db.commit()
    return new_value


def increment_green(db: Session, user_id: str) -> int:
    return _increment(db, user_id, "green_count")


def increment_yellow(db: Session, user_id: str) -> int:
    return _increment(db, user_id, "yellow_count")


def increment_counter(db: Session, user_id: str, color: str) -> int:
    if color == "green":
        return increment_green(db, user_id)
    if color == "yellow":
        return increment_yellow(db, user_id)
    raise NotFound(f"Unknown counter: {color}")


def reset_counters(db: Session, user_id: str) -> None:
    with storage_errors(db, "reset"):
        result = db.execute(
            update(User)
            .where(User.id == user_id)
            .values(green_count=0, yellow_count=0)
        )
        if result.rowcount == 0:
            db.rollback()
            raise NotFound()
        db.commit()


def get_counts(db: Session, user_id: str) -> Counts:
    with storage_errors(db, "get_counts"):
        row = db.execute(
            select(User.green_count, User.yellow_count)
            .where(User.id == user_id)
        ).one_or_none()
    if row is None:
        raise NotFound()
    return Counts(green=row.green_count, yellow=row.yellow_count)
