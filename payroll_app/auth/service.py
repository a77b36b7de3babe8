import secrets
from typing import Optional
from urllib.parse import quote
from sqlalchemy.orm import Session
from payroll_app.auth.models import User, UserRole
from payroll_app.auth.schemas import UserCreate, UserLogin
from payroll_app.core.config import settings
from payroll_app.core.otp_store import OTPStore
from payroll_app.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    create_refresh_token
)
from payroll_app.core.service_base import BaseService
from payroll_app.core.exceptions import (
    AuthenticationError,
    InvalidOTPError,
    ResourceNotFoundError
)
from payroll_app.notifications.email import EmailSender

ADMIN_EMPLOYEE_PREFIX = "ADMIN"
DEFAULT_POSITION = "Staff Member"


def avatar_url_for(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=random&color=fff"


def role_for_employee_id(employee_id: str) -> UserRole:
    """Admin accounts are identified by an ADMIN-prefixed employee ID while
    ``allow_admin_self_registration`` is on."""
    if settings.allow_admin_self_registration and employee_id.upper().startswith(ADMIN_EMPLOYEE_PREFIX):
        return UserRole.ADMIN
    return UserRole.EMPLOYEE


class AuthService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def create_user(self, user_data: UserCreate) -> User:
        """Create a new user with hashed password."""
        self.validate_required_fields(
            {"name": user_data.name, "email": user_data.email, "password": user_data.password,
             "employee_id": user_data.employee_id},
            ["name", "email", "password", "employee_id"]
        )

        employee_id = user_data.employee_id.strip().upper()
        self.check_unique_constraint(User, "email", user_data.email, "User")
        self.check_unique_constraint(User, "employee_id", employee_id, "User")

        db_user = User(
            name=user_data.name.strip(),
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            role=role_for_employee_id(employee_id).value,
            employee_id=employee_id,
            position=user_data.position or DEFAULT_POSITION,
            avatar_url=user_data.avatar_url or avatar_url_for(user_data.name.strip())
        )

        self.db.add(db_user)
        self.safe_commit("Error creating user")
        self.db.refresh(db_user)

        self.log_service_action("create_user", "User", db_user.id, extra_data={"role": db_user.role})
        return db_user

    def authenticate_user(self, login_data: UserLogin) -> User:
        """Authenticate user with email and password."""
        user = self.get_user_by_email(login_data.email)

        if not user:
            self.log_service_action("failed_login_attempt", extra_data={"email": login_data.email, "reason": "user_not_found"})
            raise AuthenticationError("Invalid credentials")

        if not verify_password(login_data.password, user.password_hash):
            self.log_service_action("failed_login_attempt", extra_data={"email": login_data.email, "reason": "invalid_password"})
            raise AuthenticationError("Invalid credentials")

        self.log_service_action("successful_login", "User", user.id)
        return user

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def reset_password(self, email: str, code: str, new_password: str, otp_service: "OTPService") -> User:
        """Set a new password once the emailed verification code checks out."""
        otp_service.verify(email, code)

        user = self.get_user_by_email(email)
        if not user:
            raise ResourceNotFoundError("User", error_data={"email": email})

        user.password_hash = get_password_hash(new_password)
        self.safe_commit("Error resetting password")
        self.log_service_action("reset_password", "User", user.id)
        return user

    def create_tokens(self, user: User) -> dict:
        """Create access and refresh tokens for user."""
        access_token = create_access_token(data={"sub": str(user.id), "role": user.role})
        refresh_token = create_refresh_token(data={"sub": str(user.id)})

        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer"
        }


class OTPService:
    """Issues and checks six-digit email verification codes."""

    def __init__(self, store: OTPStore, email_sender: EmailSender, ttl_seconds: int = None):
        self.store = store
        self.email_sender = email_sender
        self.ttl_seconds = ttl_seconds or settings.otp_ttl_seconds

    @staticmethod
    def generate_code() -> str:
        return str(100000 + secrets.randbelow(900000))

    def issue(self, email: str) -> str:
        code = self.generate_code()
        self.store.put(email, code, self.ttl_seconds)
        self.email_sender.send(
            email,
            "Twin Hill Verification Code",
            f"Your One-Time Password (OTP) is: {code}"
        )
        return code

    def verify(self, email: str, code: str) -> bool:
        stored = self.store.get(email)
        if stored is None or not secrets.compare_digest(stored.encode(), code.strip().encode()):
            raise InvalidOTPError()

        # Codes are single use
        self.store.delete(email)
        return True
