import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.middleware.sessions import SessionMiddleware

from kiwi_counter.core.config import (HTTPS_ONLY, LOG_DIR, LOG_LEVEL,
                                      SESSION_COOKIE, SESSION_MAX_AGE_SECONDS,
                                      SESSION_SECRET)
from kiwi_counter.core.database import (create_db_engine,
                                        create_session_factory, init_db)
from kiwi_counter.core.errors import StorageUnavailable
from kiwi_counter.core.logging import setup_logging
from kiwi_counter.routers import api, auth, counters
from kiwi_counter.services.sessions import purge_expired_sessions

logger = logging.getLogger(__name__)


def storage_unavailable_handler(
    request: Request, exc: StorageUnavailable
) -> Response:
    if request.url.path.startswith("/api/"):
        return JSONResponse(
            {"ok": False, "message": exc.message, "code": exc.code},
            status_code=exc.status_code,
        )
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_app(
    database_url: Optional[str] = None,
    session_secret: Optional[str] = None,
    https_only: Optional[bool] = None,
    configure_logging: bool = True,
    log_dir: Optional[str] = None,
) -> FastAPI:
    if configure_logging:
        setup_logging(log_dir=log_dir or LOG_DIR, level=LOG_LEVEL)
    engine = create_db_engine(database_url)
    init_db(engine)
    session_factory = create_session_factory(engine)

    app = FastAPI(title="Kiwi Sales Counter")
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret or SESSION_SECRET,
        session_cookie=SESSION_COOKIE,
        max_age=SESSION_MAX_AGE_SECONDS,
        same_site="lax",
        https_only=HTTPS_ONLY if https_only is None else https_only,
    )
    app.add_exception_handler(StorageUnavailable, storage_unavailable_handler)

    app.include_router(auth.router)
    app.include_router(counters.router)
    app.include_router(api.router)

    @app.on_event("startup")
    def on_startup() -> None:
        with session_factory() as db:
            purge_expired_sessions(db)
        logger.info("Kiwi Sales Counter ready")

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        engine.dispose()

    return app
