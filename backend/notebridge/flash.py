"""
NoteBridge Backend - Flash Messages
=====================================

What:  Transient status strings attached to a redirect and shown once by the
       next page load.
How:   Stored in the Starlette session (signed cookie, SessionMiddleware)
       under "flash", keyed by level. `pop_flash` consumes them.
"""

from typing import Dict, Optional

from starlette.requests import Request
from starlette.responses import RedirectResponse

from notebridge.schemas.note import FlashMessages

FLASH_KEY = "flash"
NOTES_PAGE = "/notes"


def flash(request: Request, level: str, message: str) -> None:
    messages: Dict[str, str] = dict(request.session.get(FLASH_KEY) or {})
    messages[level] = message
    request.session[FLASH_KEY] = messages


def pop_flash(request: Request) -> FlashMessages:
    messages = request.session.pop(FLASH_KEY, None) or {}
    return FlashMessages(**messages)


def redirect_to_notes(
    request: Request, level: Optional[str] = None, message: Optional[str] = None
) -> RedirectResponse:
    """303 to the notes page, optionally flashing a message."""
    if level and message:
        flash(request, level, message)
    return RedirectResponse(url=NOTES_PAGE, status_code=303)


def redirect_back(request: Request, message: str) -> RedirectResponse:
    """303 to the Referer (or the notes page) with an error flash."""
    flash(request, "error", message)
    target = request.headers.get("referer") or NOTES_PAGE
    return RedirectResponse(url=target, status_code=303)


def wants_json(request: Request) -> bool:
    """True for programmatic callers (fetch/XHR) rather than page navigations."""
    accept = request.headers.get("accept", "")
    requested_with = request.headers.get("x-requested-with", "")
    return "application/json" in accept or requested_with.lower() == "xmlhttprequest"
