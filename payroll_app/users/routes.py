from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from payroll_app.core.database import get_db
from payroll_app.core.dependencies import get_current_admin_user
from payroll_app.core.route_decorators import log_route_access
from payroll_app.auth.models import User, UserRole
from payroll_app.auth.schemas import UserResponse
from payroll_app.users.service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=List[UserResponse])
async def list_users(
    role: Optional[UserRole] = Query(None),
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """List all user accounts."""
    return UserService(db).list_users(role)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Get a user account by ID."""
    return UserService(db).get_user(user_id)


@router.delete("/{user_id}", response_model=List[UserResponse])
@log_route_access
async def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Delete a user account and return the remaining users."""
    user_service = UserService(db)
    user_service.delete_user(user_id)
    return user_service.list_users()
