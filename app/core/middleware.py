# app/core/middleware.py
from collections import OrderedDict
from typing import Optional, Tuple
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
import time
import logging

from app.config.settings import settings

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"

class RateLimiter:
    """
    Fixed-window request counter keyed by client

    State lives in process memory, so every worker counts on its own.
    """

    def __init__(self, limit: int, window_seconds: int):
        self.limit = limit
        self.window_seconds = window_seconds
        # Ordered by window start, so expired windows sit at the front
        self._windows: "OrderedDict[str, Tuple[float, int]]" = OrderedDict()

    def touch(self, key: str, now: Optional[float] = None) -> bool:
        """Count one request; False once the window's limit is exceeded"""
        now = time.monotonic() if now is None else now
        self._evict_expired(now)

        window_start, count = self._windows.get(key, (now, 0))
        self._windows[key] = (window_start, count + 1)
        return count + 1 <= self.limit

    def _evict_expired(self, now: float) -> None:
        while self._windows:
            window_start, _ = next(iter(self._windows.values()))
            if now - window_start < self.window_seconds:
                break
            self._windows.popitem(last=False)

    def __len__(self) -> int:
        return len(self._windows)

    def retry_after(self, key: str, now: Optional[float] = None) -> int:
        now = time.monotonic() if now is None else now
        window_start, _ = self._windows.get(key, (now, 0))
        return max(int(self.window_seconds - (now - window_start)), 0)

    def reset(self) -> None:
        self._windows.clear()

api_limiter = RateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)
auth_limiter = RateLimiter(settings.auth_rate_limit_requests, settings.auth_rate_limit_window_seconds)

def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"

def setup_middleware(app: FastAPI):
    """Configure all middleware and exception handlers for the application"""

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.frontend_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        path = request.url.path
        if not settings.rate_limit_enabled or not path.startswith("/api/"):
            return await call_next(request)

        key = _client_ip(request)
        limiter = auth_limiter if path.startswith("/api/v1/auth/") else api_limiter
        if not limiter.touch(key):
            logger.warning(f"🚦 Rate limit exceeded for {key} on {path}")
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests, please try again later."},
                headers={"Retry-After": str(limiter.retry_after(key))}
            )
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        return response

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        if getattr(exc.orig, "pgcode", None) == FOREIGN_KEY_VIOLATION:
            return JSONResponse(status_code=400, content={"detail": "Referenced resource does not exist"})

        logger.warning(f"⚠️ Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return JSONResponse(status_code=409, content={"detail": "Resource already exists"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {str(exc)}")
        detail = str(exc) if settings.debug else "Internal server error"
        return JSONResponse(status_code=500, content={"detail": detail})
