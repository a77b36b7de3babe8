#!/usr/bin/env python3
"""
Simple script to run the Twin Hill Payroll Service
"""

import uvicorn
from payroll_app.core.config import settings

if __name__ == "__main__":
    print("🚀 Starting Twin Hill Payroll Service...")
    print(f"📱 App: {settings.app_name}")
    print(f"🌐 Host: {settings.host}")
    print(f"🔌 Port: {settings.port}")
    print(f"🔧 Debug: {settings.debug}")
    if settings.debug:
        print("⚠️  Debug mode: rate limiting is off unless ENABLE_RATE_LIMITING=true and OTP codes are echoed in responses.")
        print("⚠️  Set DEBUG=false in .env for production.")
    if settings.allow_admin_self_registration:
        print("⚠️  ADMIN-prefixed employee IDs self-register as admins; set ALLOW_ADMIN_SELF_REGISTRATION=false in .env once bootstrapped.")
    print(f"📚 API Documentation: http://localhost:{settings.port}/docs")
    print(f"🔍 Health Check: http://localhost:{settings.port}/health")
    print("-" * 50)

    uvicorn.run(
        "payroll_app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info"
    )
