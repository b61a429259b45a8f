"""FlipDeck — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flipdeck.api.v1.analytics import router as analytics_router
from flipdeck.api.v1.auth import router as auth_router
from flipdeck.api.v1.billing import router as billing_router
from flipdeck.api.v1.flipbooks import router as flipbooks_router
from flipdeck.api.v1.payments import router as payments_router
from flipdeck.api.v1.storage import public_router as public_storage_router
from flipdeck.api.v1.storage import router as storage_router
from flipdeck.billing.razorpay_client import PaymentError
from flipdeck.config import settings

# Configure root logger so all flipdeck.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

FUNCTIONS_PREFIX = "/functions/"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    settings.storage_root.mkdir(parents=True, exist_ok=True)
    yield
    # Shutdown — dispose engine connections
    from flipdeck.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Turn PDFs into shareable interactive flipbooks.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PaymentError)
async def payment_error_handler(request: Request, exc: PaymentError) -> JSONResponse:
    logger.error("Error in %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Payment functions answer malformed input with their own 400 body
    if request.url.path.startswith(FUNCTIONS_PREFIX):
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})
    return await request_validation_exception_handler(request, exc)


# Routers
app.include_router(auth_router)
app.include_router(billing_router)
app.include_router(flipbooks_router)
app.include_router(analytics_router)
app.include_router(storage_router)
app.include_router(public_storage_router)
app.include_router(payments_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
