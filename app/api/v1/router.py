# app/api/v1/router.py
import time
import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import settings
from app.api.v1.auth import router as auth_router
from app.modules.users import router as users_router, addresses_router
from app.modules.shipments import router as shipments_router, user_shipments_router
from app.modules.tracking import router as tracking_router
from app.modules.drivers import router as drivers_router, vehicles_router
from app.modules.payments import router as payments_router
from app.modules.pricing import router as pricing_router
from app.modules.support import router as support_router
from app.modules.analytics import router as analytics_router
from app.shared.services.cloudinary_service import cloudinary_service

logger = logging.getLogger(__name__)

STARTED_AT = time.time()

# Main router of the API v1
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(
    users_router,
    prefix="/users",
    tags=["Users"]
)

api_router.include_router(
    user_shipments_router,
    prefix="/users",
    tags=["Users"]
)

api_router.include_router(
    addresses_router,
    prefix="/addresses",
    tags=["Addresses"]
)

api_router.include_router(
    shipments_router,
    prefix="/shipments",
    tags=["Shipments"]
)

api_router.include_router(
    tracking_router,
    prefix="/tracking",
    tags=["Tracking"]
)

api_router.include_router(
    drivers_router,
    prefix="/drivers",
    tags=["Drivers"]
)

api_router.include_router(
    vehicles_router,
    prefix="/vehicles",
    tags=["Vehicles"]
)

api_router.include_router(
    payments_router,
    prefix="/payments",
    tags=["Payments"]
)

api_router.include_router(
    pricing_router,
    prefix="/pricing",
    tags=["Pricing"]
)

api_router.include_router(
    support_router,
    prefix="/support",
    tags=["Support"]
)

api_router.include_router(
    analytics_router,
    prefix="/analytics",
    tags=["Analytics"]
)

@api_router.get("/")
async def api_root():
    """Root endpoint of the API"""
    return {
        "message": "Blyne Logistics API v1",
        "version": settings.version,
        "status": "active",
        "docs": "/docs",
        "available_endpoints": {
            "authentication": "/api/v1/auth",
            "users": "/api/v1/users",
            "addresses": "/api/v1/addresses",
            "shipments": "/api/v1/shipments",
            "tracking": "/api/v1/tracking",
            "drivers": "/api/v1/drivers",
            "vehicles": "/api/v1/vehicles",
            "payments": "/api/v1/payments",
            "pricing": "/api/v1/pricing",
            "support": "/api/v1/support",
            "analytics": "/api/v1/analytics"
        }
    }

@api_router.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Readiness check

    Runs a database round trip and reports its latency; answers 503 when the
    database is unreachable.
    """
    start = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"❌ Health check database error: {str(e)}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "version": settings.version,
                "environment": settings.environment,
                "database": {"status": "unreachable"}
            }
        )
    latency_ms = round((time.perf_counter() - start) * 1000, 2)

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "uptime_seconds": round(time.time() - STARTED_AT, 1),
        "database": {"status": "connected", "latency_ms": latency_ms},
        "services": {
            "stripe": bool(settings.stripe_secret_key),
            "paystack": bool(settings.paystack_secret_key),
            "cloudinary": cloudinary_service.configured
        }
    }
