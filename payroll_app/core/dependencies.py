from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from payroll_app.core.database import get_db
from payroll_app.core.security import get_user_id_from_token
from payroll_app.core.exceptions import (
    AuthenticationError,
    InsufficientPermissionsError
)
from payroll_app.auth.models import User, UserRole

# Security scheme
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    user_id = get_user_id_from_token(credentials.credentials)

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationError("Could not validate credentials")

    return user


def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    """Get current authenticated admin user."""
    if current_user.role != UserRole.ADMIN.value:
        raise InsufficientPermissionsError("Not enough permissions")
    return current_user
