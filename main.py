"""
Wardig UMKM Catalog — Main Application

FastAPI application entry point.
"""

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from contextlib import asynccontextmanager
import structlog
from datetime import datetime

from config import settings, check_connection
from exceptions import AppError, AuthenticationError

logging.basicConfig(format="%(message)s", level=settings.log_level)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Check database connection
    Shutdown: Clean up resources
    """
    # Startup
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug
    )

    # Check database connection
    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info(
            "database_connected",
            products=db_status["products_count"],
            umkm=db_status["umkm_count"]
        )
    else:
        logger.error(
            "database_connection_failed",
            error=db_status.get("error")
        )

    yield

    # Shutdown
    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Wardig UMKM Catalog",
    description="Product catalog, QR codes and customer reviews for small businesses",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Basic health status and database connection state
    """
    db_status = check_connection()

    return {
        "status": "healthy" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
        "database": db_status
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Wardig UMKM Catalog API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "login": "/auth/login",
            "logout": "/auth/logout",
            "dashboard": "/api/admin/dashboard",
            "products": "/api/admin/products",
            "umkm": "/api/admin/umkm",
            "reviews": "/api/admin/reviews",
            "public_product": "/product/{unique_code}"
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(AuthenticationError)
async def authentication_exception_handler(request: Request, exc: AuthenticationError):
    """
    Missing or invalid admin session.

    Browsers are sent to the login screen; API clients get 401 JSON.
    """
    logger.info("admin_session_required", path=request.url.path, code=exc.code)

    if "text/html" in request.headers.get("accept", ""):
        redirect = RedirectResponse(url=exc.login_path or settings.login_path, status_code=303)
        redirect.delete_cookie(settings.session_cookie_name, path="/")
        return redirect

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(AppError)
async def app_exception_handler(request: Request, exc: AppError):
    """Application errors raised outside a route's own error handling."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.utcnow().isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.auth import router as auth_router, require_session
from routes.public import router as public_router
from routes.dashboard import router as dashboard_router
from routes.products import router as products_router
from routes.umkm import router as umkm_router
from routes.reviews import router as reviews_router

admin = [Depends(require_session)]

app.include_router(auth_router, tags=["Auth"])
app.include_router(public_router, prefix="/product", tags=["Public"])
app.include_router(dashboard_router, prefix="/api/admin/dashboard", tags=["Dashboard"], dependencies=admin)
app.include_router(products_router, prefix="/api/admin/products", tags=["Products"], dependencies=admin)
app.include_router(umkm_router, prefix="/api/admin/umkm", tags=["UMKM"], dependencies=admin)
app.include_router(reviews_router, prefix="/api/admin/reviews", tags=["Reviews"], dependencies=admin)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
