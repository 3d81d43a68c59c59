from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from kiwi_counter.core.database import get_db
from kiwi_counter.core.errors import NotFound, Unauthorized
from kiwi_counter.core.templates import templates
from kiwi_counter.services.auth import authorize
from kiwi_counter.services.counters import (COUNTER_COLORS, increment_counter,
                                            reset_counters)
from kiwi_counter.services.credentials import find_user_by_id

router = APIRouter()


def _to_login(request: Request) -> RedirectResponse:
    request.session.clear()
    return RedirectResponse("/login", status_code=303)


@router.get("/app", response_class=HTMLResponse)
def counters_page(request: Request, db: Session = Depends(get_db)) -> HTMLResponse:
    try:
        user = find_user_by_id(db, authorize(request, db))
    except (Unauthorized, NotFound):
        return _to_login(request)
    return templates.TemplateResponse(
        request,
        "counters.html",
        {
            "username": user.username,
            "green": user.green_count,
            "yellow": user.yellow_count,
        },
    )


@router.post("/increment/{color}")
def increment(
    color: str,
    request: Request,
    db: Session = Depends(get_db),
) -> RedirectResponse:
    if color not in COUNTER_COLORS:
        raise HTTPException(status_code=404)
    try:
        increment_counter(db, authorize(request, db), color)
    except (Unauthorized, NotFound):
        return _to_login(request)
    return RedirectResponse("/app", status_code=303)


@router.post("/reset")
def reset(request: Request, db: Session = Depends(get_db)) -> RedirectResponse:
    try:
        reset_counters(db, authorize(request, db))
    except (Unauthorized, NotFound):
        return _to_login(request)
    return RedirectResponse("/app", status_code=303)
