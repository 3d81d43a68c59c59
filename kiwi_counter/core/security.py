import hashlib
import secrets
from typing import Optional

from passlib.context import CryptContext

from kiwi_counter.core.config import PASSWORD_MAX_LENGTH

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def validate_password(password: Optional[str]) -> Optional[str]:
    if not password or not password.strip():
        return "Missing fields"
    if len(password) > PASSWORD_MAX_LENGTH:
        return f"Password must be at most {PASSWORD_MAX_LENGTH} characters"
    return None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def dummy_verify() -> None:
    # Spends one hash computation so a miss costs the same as a mismatch.
    pwd_context.dummy_verify()


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def hash_session_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
