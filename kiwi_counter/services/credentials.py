import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kiwi_counter.core.database import storage_errors
from kiwi_counter.core.errors import DuplicateUsername, NotFound
from kiwi_counter.models import User

logger = logging.getLogger(__name__)


def create_user(db: Session, username: str, password_hash: str) -> str:
    """Insert a new account and return its id.

    Uniqueness is left to the ``users.username`` constraint: two racing
    inserts of the same name cannot both commit, and the loser gets
    DuplicateUsername.
    """
    user = User(username=username, password_hash=password_hash)
    with storage_errors(db, "create_user"):
        db.add(user)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise DuplicateUsername() from exc
    return user.id


def find_user_by_username(db: Session, username: str) -> User:
    with storage_errors(db, "find_user_by_username"):
        user = db.execute(
            select(User).where(User.username == username)
        ).scalar_one_or_none()
    if user is None:
        raise NotFound()
    return user


def find_user_by_id(db: Session, user_id: str) -> User:
    with storage_errors(db, "find_user_by_id"):
        user = db.get(User, user_id)
    if user is None:
        raise NotFound()
    return user
