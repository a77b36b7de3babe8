from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from payroll_app.core.config import settings
from payroll_app.core.database import get_db
from payroll_app.core.otp_store import OTPStore, get_otp_store
from payroll_app.core.security import verify_token
from payroll_app.core.dependencies import get_current_user
from payroll_app.core.exceptions import InvalidTokenError
from payroll_app.notifications.email import EmailSender, get_email_sender
from payroll_app.auth.schemas import (
    UserCreate,
    UserLogin,
    UserResponse,
    Token,
    LoginResponse,
    RefreshTokenRequest,
    PasswordResetRequest,
    OTPGenerateRequest,
    OTPGenerateResponse,
    OTPVerifyRequest,
    OTPVerifyResponse
)
from payroll_app.auth.service import AuthService, OTPService

router = APIRouter(prefix="/auth", tags=["authentication"])


def get_otp_service(
    store: OTPStore = Depends(get_otp_store),
    email_sender: EmailSender = Depends(get_email_sender)
) -> OTPService:
    return OTPService(store, email_sender)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user. ADMIN-prefixed employee IDs get the admin role."""
    auth_service = AuthService(db)
    return auth_service.create_user(user_data)


@router.post("/login", response_model=LoginResponse)
async def login_user(login_data: UserLogin, db: Session = Depends(get_db)):
    """Login user and return JWT tokens with the user profile."""
    auth_service = AuthService(db)
    user = auth_service.authenticate_user(login_data)
    tokens = auth_service.create_tokens(user)
    return {**tokens, "user": UserResponse.model_validate(user)}


@router.post("/refresh", response_model=Token)
async def refresh_token(request: RefreshTokenRequest, db: Session = Depends(get_db)):
    """Refresh access token using refresh token."""
    payload = verify_token(request.refresh_token, "refresh")

    auth_service = AuthService(db)
    user = auth_service.get_user_by_id(payload.get("sub"))
    if not user:
        raise InvalidTokenError("User not found for refresh token")

    return auth_service.create_tokens(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user=Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.post("/reset-password")
async def reset_password(
    request: PasswordResetRequest,
    db: Session = Depends(get_db),
    otp_service: OTPService = Depends(get_otp_service)
):
    """Set a new password; needs a code from otp/generate, which it consumes."""
    auth_service = AuthService(db)
    auth_service.reset_password(request.email, request.code, request.new_password, otp_service)
    return {"success": True}


@router.post("/otp/generate", response_model=OTPGenerateResponse)
async def generate_otp(
    request: OTPGenerateRequest,
    otp_service: OTPService = Depends(get_otp_service)
):
    """Issue a six-digit verification code and email it."""
    code = otp_service.issue(request.email)
    # Echo the code only in debug so developers can sign in without email delivery
    return OTPGenerateResponse(debug_otp=code if settings.debug else None)


@router.post("/otp/verify", response_model=OTPVerifyResponse)
async def verify_otp(
    request: OTPVerifyRequest,
    otp_service: OTPService = Depends(get_otp_service)
):
    """Check a verification code; a valid code is consumed."""
    otp_service.verify(request.email, request.code)
    return OTPVerifyResponse()
