from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    employee_id: str = Field(min_length=1)
    position: Optional[str] = None
    avatar_url: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    employee_id: str
    position: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(Token):
    user: UserResponse


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class PasswordResetRequest(BaseModel):
    email: EmailStr
    code: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


class OTPGenerateRequest(BaseModel):
    email: EmailStr


class OTPGenerateResponse(BaseModel):
    success: bool = True
    message: str = "OTP sent"
    debug_otp: Optional[str] = None


class OTPVerifyRequest(BaseModel):
    email: EmailStr
    code: str


class OTPVerifyResponse(BaseModel):
    success: bool = True
    valid: bool = True
