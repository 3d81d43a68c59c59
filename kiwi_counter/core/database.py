import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from kiwi_counter.core.config import DATABASE_TIMEOUT, DATABASE_URL
from kiwi_counter.core.errors import StorageUnavailable

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _ensure_sqlite_dir(database_url: str) -> None:
    if not database_url.startswith("sqlite:///"):
        return
    path = database_url.replace("sqlite:///", "", 1)
    if path.startswith("./"):
        path = path[2:]
    if not path or path == ":memory:":
        return
    dir_path = Path(path).parent
    if str(dir_path) and str(dir_path) != ".":
        dir_path.mkdir(parents=True, exist_ok=True)


def create_db_engine(database_url: Optional[str] = None) -> Engine:
    url = database_url or DATABASE_URL
    _ensure_sqlite_dir(url)
    connect_args = {
        "check_same_thread": False,
        "timeout": DATABASE_TIMEOUT,
    } if url.startswith("sqlite") else {}
    engine = create_engine(url, connect_args=connect_args)
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


def init_db(engine: Engine) -> None:
    import kiwi_counter.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def storage_errors(db: Session, action: str) -> Iterator[None]:
    """Roll back and re-raise infrastructure failures as StorageUnavailable.

    Domain errors raised inside the block pass through untouched, so
    callers can still tell a missing row apart from a broken database.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            "Storage failure during %s: %s", action, exc.__class__.__name__
        )
        raise StorageUnavailable() from exc
