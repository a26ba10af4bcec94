from pydantic import BaseModel
from typing import Optional

class LoginRequest(BaseModel):
    email: str
    password: str

class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None

class ResetPasswordRequest(BaseModel):
    email: str
    otp: str
    newPassword: str

class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None

class LoginResponse(BaseModel):
    success: bool = True
    redirect: str
