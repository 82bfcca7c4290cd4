# app/main.py
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from app.config.settings import settings
from app.core.middleware import setup_middleware
from app.api.v1.router import api_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("🚀 Blyne Logistics API Starting...")
    logger.info(f"📍 Version: {settings.version}")
    logger.info(f"🌍 Environment: {settings.environment}")
    logger.info(f"🔐 JWT Algorithm: {settings.algorithm}")
    logger.info(f"⏰ Token Expire: {settings.access_token_expire_minutes} minutes")
    logger.info(f"🗄️  Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else 'local'}")
    logger.info(f"💳 Stripe: {'configured' if settings.stripe_secret_key else 'not configured'}")
    logger.info(f"💳 Paystack: {'configured' if settings.paystack_secret_key else 'not configured'}")

    yield

    # Shutdown
    logger.info("🛑 Blyne Logistics API Shutting down...")

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Logistics API: shipments, tracking, drivers, payments and support",
    docs_url="/docs",
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Setup middleware
setup_middleware(app)

# Include routers
app.include_router(api_router, prefix="/api/v1")

# Root endpoint
@app.get("/")
async def root():
    return {
        "message": "🚚 Blyne Logistics API",
        "version": settings.version,
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
        "api": "/api/v1"
    }

# Liveness probe for the hosting platform
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.version,
        "app": settings.app_name,
        "environment": settings.environment
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
