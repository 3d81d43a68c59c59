from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from kiwi_counter.core.database import get_db
from kiwi_counter.core.errors import (DuplicateUsername, InvalidCredentials,
                                      InvalidInput, NotFound, Unauthorized)
from kiwi_counter.schemas.auth import CredentialsRequest
from kiwi_counter.services.auth import (SESSION_KEY, authorize, login_user,
                                        register_user, request_tokens)
from kiwi_counter.services.counters import (COUNTER_COLORS, get_counts,
                                            increment_counter, reset_counters)
from kiwi_counter.services.sessions import establish_session, revoke_session

router = APIRouter(prefix="/api")


def error_response(
    message: str,
    status_code: int = 400,
    code: Optional[str] = None,
    **extra,
) -> JSONResponse:
    payload = {"ok": False, "message": message}
    if code:
        payload["code"] = code
    payload.update(extra)
    return JSONResponse(payload, status_code=status_code)


def unauthorized_response(request: Request) -> JSONResponse:
    request.session.clear()
    exc = Unauthorized()
    return error_response(
        exc.message, exc.status_code, exc.code, redirect="/login"
    )


@router.post("/register")
def register(payload: CredentialsRequest, db: Session = Depends(get_db)) -> JSONResponse:
    try:
        user_id = register_user(db, payload.username, payload.password)
    except (InvalidInput, DuplicateUsername) as exc:
        return error_response(exc.message, exc.status_code, exc.code)
    return JSONResponse({"ok": True, "user_id": user_id}, status_code=201)


@router.post("/login")
def login(
    request: Request,
    payload: CredentialsRequest,
    db: Session = Depends(get_db),
) -> JSONResponse:
    try:
        user_id = login_user(db, payload.username, payload.password)
    except InvalidCredentials as exc:
        return error_response(exc.message, exc.status_code, exc.code)
    revoke_session(db, request.session.get(SESSION_KEY))
    request.session.clear()
    token = establish_session(db, user_id)
    request.session[SESSION_KEY] = token
    return JSONResponse(
        {"ok": True, "token": token},
        headers={"Cache-Control": "no-store"},
    )


@router.post("/logout")
def logout(request: Request, db: Session = Depends(get_db)) -> JSONResponse:
    for token in request_tokens(request):
        revoke_session(db, token)
    request.session.clear()
    return JSONResponse({"ok": True})


@router.get("/counters")
def counters(request: Request, db: Session = Depends(get_db)) -> JSONResponse:
    try:
        counts = get_counts(db, authorize(request, db))
    except (Unauthorized, NotFound):
        return unauthorized_response(request)
    return JSONResponse({"ok": True, "green": counts.green, "yellow": counts.yellow})


@router.post("/counters/reset")
def reset(request: Request, db: Session = Depends(get_db)) -> JSONResponse:
    try:
        reset_counters(db, authorize(request, db))
    except (Unauthorized, NotFound):
        return unauthorized_response(request)
    return JSONResponse({"ok": True, "green": 0, "yellow": 0})


@router.post("/counters/{color}")
def increment(color: str, request: Request, db: Session = Depends(get_db)) -> JSONResponse:
    if color not in COUNTER_COLORS:
        return error_response(f"Unknown counter: {color}", status_code=404, code="not-found")
    try:
        value = increment_counter(db, authorize(request, db), color)
    except (Unauthorized, NotFound):
        return unauthorized_response(request)
    return JSONResponse({"ok": True, color: value})
