import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from kiwi_counter.core.config import SESSION_MAX_AGE_SECONDS
from kiwi_counter.core.database import storage_errors
from kiwi_counter.core.security import hash_session_token, new_session_token
from kiwi_counter.core.time import utc_now
from kiwi_counter.models import LoginSession, User

logger = logging.getLogger(__name__)

MAX_TOKEN_LENGTH = 256


def establish_session(
    db: Session,
    user_id: str,
    max_age_seconds: int = SESSION_MAX_AGE_SECONDS,
) -> str:
    token = new_session_token()
    now = utc_now()
    with storage_errors(db, "establish_session"):
        db.add(
            LoginSession(
                token_hash=hash_session_token(token),
                user_id=user_id,
                created_at=now,
                expires_at=now + timedelta(seconds=max_age_seconds),
            )
        )
        db.commit()
    return token


def resolve_session(db: Session, token: Optional[str]) -> Optional[str]:
    """Return the user id bound to token, or None when it is not valid.

    Unknown, malformed and expired tokens are all invalid, as is a token
    whose user row is gone.
    """
    if not isinstance(token, str) or not token or len(token) > MAX_TOKEN_LENGTH:
        return None
    token_hash = hash_session_token(token)
    with storage_errors(db, "resolve_session"):
        row = db.execute(
            select(LoginSession.user_id, LoginSession.expires_at)
            .join(User, User.id == LoginSession.user_id)
            .where(LoginSession.token_hash == token_hash)
        ).one_or_none()
        if row is None:
            return None
        if row.expires_at <= utc_now():
            db.execute(
                delete(LoginSession).where(
                    LoginSession.token_hash == token_hash
                )
            )
            db.commit()
            return None
    return row.user_id


def revoke_session(db: Session, token: Optional[str]) -> None:
    if not isinstance(token, str) or not token or len(token) > MAX_TOKEN_LENGTH:
        return
    with storage_errors(db, "revoke_session"):
        db.execute(
            delete(LoginSession).where(
                LoginSession.token_hash == hash_session_token(token)
            )
        )
        db.commit()


def purge_expired_sessions(db: Session) -> int:
    with storage_errors(db, "purge_expired_sessions"):
        result = db.execute(
            delete(LoginSession).where(LoginSession.expires_at <= utc_now())
        )
        db.commit()
    if result.rowcount:
        logger.info("Purged %d expired sessions", result.rowcount)
    return result.rowcount
