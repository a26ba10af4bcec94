"""
Error taxonomy for PixSoul.

Every error carries its HTTP status and a client-safe message. The
application handler in ``pixsoul.common`` renders them as
``{"success": false, "message": ...}``.
"""
from fastapi import HTTPException, status


class PixSoulError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)


class ValidationError(PixSoulError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid data"


class WeakPassword(ValidationError):
    default_message = "Password must contain letters, numbers, and special chars"


class EmptyComment(ValidationError):
    default_message = "Comment cannot be empty."


class InvalidOrExpiredOtp(PixSoulError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid or expired OTP"


class InvalidCredentials(PixSoulError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class Unauthenticated(PixSoulError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class Forbidden(PixSoulError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not allowed"


class NotFound(PixSoulError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(PixSoulError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Email or username already exists"


class StorageError(PixSoulError):
    """Database, disk or mail failure. Details go to the log, not the client."""


class MailDeliveryError(Exception):
    """Raised by the mail transport when a message could not be handed off."""
