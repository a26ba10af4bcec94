import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from pixsoul.common import (
    clear_session_cookie,
    ensure_session,
    get_mailer,
    get_session_id,
    get_session_store,
    get_settings,
    get_storage,
    set_session_cookie,
)
from pixsoul.config import Settings
from pixsoul.core.exceptions import PixSoulError, StorageError
from pixsoul.core.mailer import Mailer
from pixsoul.core.session_store import SessionStore
from pixsoul.core.storage import UploadStorage
from pixsoul.init_db import get_db
from pixsoul.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    SuccessResponse,
)
from pixsoul.services.auth_service import authenticate_user, end_session, signup_user, start_session
from pixsoul.services.password_reset_service import (
    RESET_REQUESTED_MESSAGE,
    request_password_reset,
    reset_password,
)

# Configure logging for auth-related operations
logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=SuccessResponse)
async def signup_api(
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    profileImage: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_storage),
):
    """
    Create an account from a multipart form with an optional profile image.
    """
    try:
        await signup_user(db, storage, username, email, password, profileImage)
    except PixSoulError:
        raise
    except Exception:
        logger.exception("DB error (signup)")
        raise StorageError("Database error")
    return SuccessResponse(message="Signup successful")


@router.post("/login", response_model=LoginResponse)
async def login_api(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    """
    Check credentials and open a one-hour session carried by an HttpOnly cookie.
    """
    try:
        user = await authenticate_user(db, body.email, body.password)
    except PixSoulError:
        raise
    except Exception:
        logger.exception("DB error (login)")
        raise StorageError()

    sid = start_session(store, user, previous_sid=get_session_id(request))
    set_session_cookie(response, sid, settings)
    return LoginResponse(redirect="/home.html")


@router.get("/logout")
async def logout_api(
    request: Request,
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    end_session(store, get_session_id(request))
    response = RedirectResponse(url="/index.html", status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(response, settings)
    return response


@router.post("/forgot-password", response_model=SuccessResponse)
async def forgot_password_api(
    body: ForgotPasswordRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    """
    Mail a 6-digit reset code. The answer is the same whether or not the
    email belongs to an account.
    """
    sid = ensure_session(request, response)
    try:
        await request_password_reset(db, mailer, store, sid, body.email, settings.otp_ttl_seconds)
    except PixSoulError:
        raise
    except Exception:
        logger.exception("Error handling password reset request")
        raise StorageError()
    return SuccessResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password", response_model=SuccessResponse)
async def reset_password_api(
    body: ResetPasswordRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    try:
        await reset_password(db, store, get_session_id(request), body.email, body.otp, body.newPassword)
    except PixSoulError:
        raise
    except Exception:
        logger.exception("DB error (reset password)")
        raise StorageError()
    return SuccessResponse(message="Password reset successfully")
