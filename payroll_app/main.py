from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from payroll_app.core.config import settings
from payroll_app.core.database import engine, Base
from payroll_app.core.logging_config import setup_logging
from payroll_app.core.error_handlers import register_error_handlers
from payroll_app.core.middleware import add_middleware
from payroll_app.auth.routes import router as auth_router
from payroll_app.users.routes import router as users_router
from payroll_app.payrolls.routes import router as payrolls_router

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Payroll management API with GRA PAYE and SSNIT calculations",
    version="1.0.0",
    debug=settings.debug
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.client_url.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
add_middleware(app)

app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(payrolls_router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    """Configure logging and create database tables."""
    setup_logging(log_level=settings.log_level, log_file=settings.log_file)
    if settings.debug:
        logger.warning("DEBUG is on: OTP codes are echoed and rate limiting is off unless enabled; set DEBUG=false in .env")

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error during startup: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutting down...")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Twin Hill Payroll Service API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "auth": "/api/v1/auth",
            "users": "/api/v1/users",
            "payroll": "/api/v1/payroll"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "message": "API is running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "payroll_app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
