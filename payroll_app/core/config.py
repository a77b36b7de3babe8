from pydantic_settings import BaseSettings
from typing import Optional
from decimal import Decimal


class Settings(BaseSettings):
    # Database Configuration
    database_url: str = "sqlite:///./twinhill_payroll.db"

    # JWT Configuration
    secret_key: str = "your-super-secret-jwt-key-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7

    # Application Configuration
    app_name: str = "Twin Hill Payroll Service"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 5000
    client_url: str = "*"

    # Bootstrap policy: self-registered ADMIN-prefixed employee IDs become admins.
    # Turn off once the first admin account exists.
    allow_admin_self_registration: bool = True

    # Payroll Upload Configuration
    payroll_upload_max_size: int = 10 * 1024 * 1024  # 10MB max PDF size
    payroll_upload_formats: list = ["application/pdf"]

    # Defaults used when no extraction service is configured
    default_basic_salary: Decimal = Decimal("5000")
    default_allowances: Decimal = Decimal("0")
    default_department: str = "General Staff"
    default_position: str = "Staff"
    default_employee_id: str = "EMP-UNK"

    # Document Extraction Service
    extraction_service_url: Optional[str] = None
    extraction_api_key: Optional[str] = None
    extraction_timeout: int = 30

    # OTP Configuration
    otp_ttl_seconds: int = 300  # 5 minutes
    otp_backend: str = "memory"  # memory, redis
    redis_url: str = "redis://localhost:6379/0"
    redis_password: Optional[str] = None
    redis_socket_timeout: int = 5

    # Email Configuration (Formspree)
    formspree_url: str = "https://formspree.io/f/mpqqzybe"
    email_subject_prefix: str = "Twin Hill Security"
    email_timeout: int = 10

    # Rate Limiting
    enable_rate_limiting: bool = False
    rate_limit_requests: int = 300
    rate_limit_window_seconds: int = 900  # 15 minutes
    max_request_size: int = 12 * 1024 * 1024

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = "logs/payroll_service.log"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Create settings instance
settings = Settings()
