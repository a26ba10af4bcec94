import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from pixsoul.config import Settings
from pixsoul.core.exceptions import PixSoulError, Unauthenticated
from pixsoul.core.mailer import Mailer
from pixsoul.core.session_store import SessionStore
from pixsoul.core.storage import UploadStorage
from pixsoul.database import Database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings: Settings = app.state.settings
    database = Database(settings)
    if settings.auto_create_tables:
        logger.info("Creating database tables")
        await database.create_all()
    app.state.database = database
    app.state.session_store = SessionStore(
        ttl=settings.session_ttl_seconds,
        maxsize=settings.session_max_entries,
    )
    app.state.mailer = Mailer(settings)
    if app.state.mailer.dev_mode:
        logger.info("Development mode - OTP mail will be logged, not sent")
    logger.info("PixSoul services initialized")

    yield

    # Shutdown
    await database.dispose()
    logger.info("PixSoul services stopped")


async def pixsoul_error_handler(request: Request, exc: PixSoulError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_storage(request: Request) -> UploadStorage:
    return request.app.state.storage


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(get_settings(request).session_cookie_name)


def set_session_cookie(response: Response, sid: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=sid,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=settings.session_cookie_name)


def ensure_session(request: Request, response: Response) -> str:
    """Return the caller's live session id, opening an anonymous one if needed."""
    store = get_session_store(request)
    sid = get_session_id(request)
    if store.get(sid) is not None:
        return sid
    sid = store.create()
    set_session_cookie(response, sid, get_settings(request))
    return sid


# Dependency to get current user from the session cookie
async def get_current_user(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> dict:
    session = store.get(get_session_id(request))
    user = session.get("user") if session else None
    if not user:
        raise Unauthenticated()
    return {
        "uid": user["id"],
        "username": user["username"],
        "email": user["email"],
    }
