from typing import List, Optional
from sqlalchemy.orm import Session
from payroll_app.auth.models import User, UserRole
from payroll_app.core.service_base import BaseService


class UserService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def list_users(self, role: Optional[UserRole] = None) -> List[User]:
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == UserRole(role).value)
        return query.order_by(User.name).all()

    def get_user(self, user_id: str) -> User:
        return self.get_or_404(User, user_id, "User")

    def delete_user(self, user_id: str):
        user = self.get_user(user_id)
        self.db.delete(user)
        self.safe_commit("Error deleting user")
        self.log_service_action("delete_user", "User", user_id)
