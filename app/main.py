"""CodeClarity API - FastAPI app entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.logging_config import configure_logging, log_provider_status
from app.core.middleware import FixedWindowRateLimiter, RateLimitMiddleware, SecurityHeadersMiddleware
from app.db.base import Base
from app.db.session import engine
from app.routers import api, auth

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    log_provider_status(logger, settings)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("CodeClarity API ready (environment=%s, port=%s)", settings.environment, settings.port)
    yield
    await engine.dispose()


app = FastAPI(
    title=f"{settings.app_name} API",
    description="AI-assisted code analysis, debugging and translation",
    lifespan=lifespan,
)

rate_limiter = FixedWindowRateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)

# added first so CORS wraps the 429 responses too
app.add_middleware(RateLimitMiddleware, limiter=rate_limiter, enabled=settings.rate_limit_enabled)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"success": False, "message": "Invalid request body"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if settings.is_development else "Internal server error"
    return JSONResponse(status_code=500, content={"success": False, "message": message})


app.include_router(auth.router)
app.include_router(api.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port, reload=settings.is_development)
