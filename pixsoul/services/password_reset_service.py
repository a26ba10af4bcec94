import hmac
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pixsoul.core.exceptions import InvalidOrExpiredOtp, MailDeliveryError, StorageError
from pixsoul.core.mailer import Mailer
from pixsoul.core.security import generate_otp, hash_password, is_valid_email, validate_password
from pixsoul.core.session_store import SessionStore
from pixsoul.models import User
from pixsoul.utils import time_utils

logger = logging.getLogger(__name__)

RESET_OTP_KEY = "reset_otp"
RESET_REQUESTED_MESSAGE = "If the email exists, an OTP has been sent."


async def request_password_reset(
    db: AsyncSession,
    mailer: Mailer,
    store: SessionStore,
    sid: str,
    email: str,
    otp_ttl_seconds: int,
) -> None:
    """
    Issue a one-time code for ``email`` and bind it to the caller's session.

    Returns silently for malformed or unknown addresses so callers cannot
    probe which accounts exist.

    Raises:
        StorageError: If the code could not be mailed
    """
    email = (email or "").strip()
    if not is_valid_email(email):
        return

    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is None:
        logger.info("Password reset requested for unknown email")
        return

    code = generate_otp()
    session = store.get(sid) or {}
    session[RESET_OTP_KEY] = {
        "code": code,
        "email": email,
        "expires_at": time_utils.expires_in(otp_ttl_seconds),
    }
    store.update(sid, session)

    minutes = max(otp_ttl_seconds // 60, 1)
    try:
        await mailer.send(
            email,
            "PixSoul Password Reset OTP",
            f"Your OTP is {code}. It expires in {minutes} minutes.",
        )
    except MailDeliveryError:
        logger.exception(f"Failed to send password reset OTP to {email}")
        _clear_otp(store, sid, session)
        raise StorageError("Error sending OTP")
    logger.info(f"Password reset OTP issued for {email}")


def _clear_otp(store: SessionStore, sid: str, session: dict) -> None:
    session.pop(RESET_OTP_KEY, None)
    store.update(sid, session)


async def reset_password(
    db: AsyncSession,
    store: SessionStore,
    sid: str,
    email: str,
    otp: str,
    new_password: str,
) -> None:
    """
    Consume the session's OTP and set a new password.

    Raises:
        InvalidOrExpiredOtp: No code, wrong email, wrong code, or expired
        WeakPassword: If the new password fails the complexity policy
    """
    session = store.get(sid) or {}
    stored = session.get(RESET_OTP_KEY)
    if not stored:
        raise InvalidOrExpiredOtp()
    if time_utils.is_expired(stored["expires_at"]):
        _clear_otp(store, sid, session)
        raise InvalidOrExpiredOtp()
    if stored["email"] != (email or "").strip() or not hmac.compare_digest(stored["code"].encode(), str(otp or "").encode()):
        raise InvalidOrExpiredOtp()

    validate_password(new_password)

    result = await db.execute(select(User).where(User.email == stored["email"]))
    user = result.scalar_one_or_none()
    if user is None:
        _clear_otp(store, sid, session)
        raise InvalidOrExpiredOtp()

    user.password = hash_password(new_password)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    _clear_otp(store, sid, session)
    logger.info(f"Password reset for user {user.id}")
