# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the BoxCurate API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    BoxCurateException,
    boxcurate_exception_handler,
    validation_exception_handler,
)
from app.routers import health, catalog, package, curations, orders
from app.auth import routes as auth_routes
from app.websocket import websocket_manager
from app.websocket import routes as websocket_routes
from core.services.package_service import PackageSessionService

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: hook live selection pushes into the package service
    - Shutdown: unhook them
    """
    logger.info(f"Starting BoxCurate API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Local store: {settings.LOCAL_STORE_DIR}")

    PackageSessionService.add_listener(websocket_manager.notify_selection_changed)

    yield

    logger.info("Shutting down BoxCurate API")
    PackageSessionService.remove_listener(websocket_manager.notify_selection_changed)


# Create FastAPI application
app = FastAPI(
    title="BoxCurate API",
    description="""
## Curated Box Storefront API

Build a custom gift package or a curated box, keep it within budget, save
drafts and check out with a WhatsApp confirmation.

### How It Works

1. **Start a Package** - name, optional budget (packaging fee included), optional referral code
2. **Pick Items** - toggle single items, increment/decrement quantifiable ones
3. **Save a Draft** - come back to it later; prices follow the current catalog
4. **Checkout** - the order is saved and a pre-filled WhatsApp message is returned
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Current user and token checks"},
        {"name": "Catalog", "description": "Browse categories and items"},
        {"name": "Package", "description": "Package form, selection and totals"},
        {"name": "Curations", "description": "Saved drafts"},
        {"name": "Orders", "description": "Checkout, cart, payments and purchases"},
        {"name": "WebSocket", "description": "Live selection updates"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(BoxCurateException)
async def handle_boxcurate_exception(request: Request, exc: BoxCurateException):
    """Handle custom BoxCurate exceptions."""
    logger.info(f"{exc.code}: {exc.message}")
    return await boxcurate_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request body/query validation errors."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(catalog.router, prefix="/api/v1/catalog", tags=["Catalog"])
app.include_router(package.router, prefix="/api/v1/package", tags=["Package"])
app.include_router(curations.router, prefix="/api/v1/curations", tags=["Curations"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])
app.include_router(websocket_routes.router, tags=["WebSocket"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - returns API info."""
    return {
        "name": "BoxCurate API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
