import enum
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func
from payroll_app.core.database import Base, generate_uuid


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.EMPLOYEE.value)  # ADMIN, EMPLOYEE
    employee_id = Column(String(50), unique=True, nullable=False, index=True)
    position = Column(String(100), default="Staff Member")
    avatar_url = Column(String(500))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
