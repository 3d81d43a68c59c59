from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from kiwi_counter.core.database import get_db
from kiwi_counter.core.errors import (DuplicateUsername, InvalidCredentials,
                                      InvalidInput)
from kiwi_counter.core.templates import templates
from kiwi_counter.services.auth import (SESSION_KEY, login_user,
                                        register_user, request_tokens)
from kiwi_counter.services.sessions import (establish_session,
                                            resolve_session, revoke_session)

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def root(request: Request, db: Session = Depends(get_db)) -> HTMLResponse:
    if resolve_session(db, request.session.get(SESSION_KEY)):
        return RedirectResponse("/app", status_code=303)
    return templates.TemplateResponse(request, "index.html", {})


@router.get("/register", response_class=HTMLResponse)
def register_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "register.html", {})


@router.post("/register")
def register(
    request: Request,
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    try:
        register_user(db, username, password)
    except (InvalidInput, DuplicateUsername) as exc:
        return templates.TemplateResponse(
            request,
            "register.html",
            {"error": exc.message, "code": exc.code},
            status_code=exc.status_code,
        )
    return RedirectResponse("/login", status_code=303)


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "login.html", {})


@router.post("/login")
def login(
    request: Request,
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    try:
        user_id = login_user(db, username, password)
    except InvalidCredentials as exc:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"error": exc.message},
            status_code=exc.status_code,
        )
    revoke_session(db, request.session.get(SESSION_KEY))
    request.session.clear()
    request.session[SESSION_KEY] = establish_session(db, user_id)
    return RedirectResponse("/app", status_code=303)


@router.post("/logout")
def logout(request: Request, db: Session = Depends(get_db)) -> RedirectResponse:
    for token in request_tokens(request):
        revoke_session(db, token)
    request.session.clear()
    return RedirectResponse("/", status_code=303)
