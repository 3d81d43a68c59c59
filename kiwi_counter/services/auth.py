import logging
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from kiwi_counter.core.config import PASSWORD_MAX_LENGTH, USERNAME_MAX_LENGTH
from kiwi_counter.core.errors import (InvalidCredentials, InvalidInput,
                                      NotFound, Unauthorized)
from kiwi_counter.core.security import (dummy_verify, hash_password,
                                        validate_password, verify_password)
from kiwi_counter.services.credentials import (create_user,
                                               find_user_by_username)
from kiwi_counter.services.sessions import resolve_session

logger = logging.getLogger(__name__)

SESSION_KEY = "session_token"


def normalize_username(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    return cleaned.lower()


def register_user(
    db: Session, username: Optional[str], password: Optional[str]
) -> str:
    normalized = normalize_username(username)
    if not normalized:
        raise InvalidInput()
    if len(normalized) > USERNAME_MAX_LENGTH:
        raise InvalidInput(
            f"Username must be at most {USERNAME_MAX_LENGTH} characters"
        )
    password_error = validate_password(password)
    if password_error:
        raise InvalidInput(password_error)
    user_id = create_user(db, normalized, hash_password(password))
    logger.info("Registered user %s", normalized)
    return user_id


def login_user(
    db: Session, username: Optional[str], password: Optional[str]
) -> str:
    """Check credentials and return the user id.

    A missing account and a wrong password raise the same error after the
    same amount of hashing work.
    """
    normalized = normalize_username(username)
    if not password or len(password) > PASSWORD_MAX_LENGTH:
        # nothing this long was ever registered, and the hasher refuses it
        dummy_verify()
        logger.info("Rejected login attempt")
        raise InvalidCredentials()
    user = None
    if normalized:
        try:
            user = find_user_by_username(db, normalized)
        except NotFound:
            user = None
    if user is None:
        dummy_verify()
        logger.info("Rejected login attempt")
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash):
        logger.info("Rejected login attempt")
        raise InvalidCredentials()
    logger.info("User %s logged in", user.username)
    return user.id


def request_tokens(request: Request) -> list[str]:
    """Session tokens presented by the request, cookie first, then bearer."""
    tokens = []
    cookie_token = request.session.get(SESSION_KEY)
    if cookie_token:
        tokens.append(cookie_token)
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        tokens.append(credentials.strip())
    return tokens


def authorize(request: Request, db: Session) -> str:
    for token in request_tokens(request):
        user_id = resolve_session(db, token)
        if user_id:
            return user_id
    raise Unauthorized()
