"""
FastAPI Application

Main entry point for the Storefront API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import structlog

from storefront.config import get_settings
from storefront.config.logging import configure_logging
from storefront.database.connection import init_database, close_database
from storefront.errors import StorefrontError
from storefront.serving.api.middleware import RequestLoggingMiddleware
from storefront.serving.api.routes import (
    auth_router,
    cart_router,
    health_router,
    orders_router,
    products_router,
)

settings = get_settings()
logger = structlog.get_logger(__name__)

GENERIC_ERROR = "An internal server error occurred"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the connection pool on startup and drain it on shutdown."""
    configure_logging()
    logger.info("Starting Storefront API", environment=settings.app_env)

    await init_database()

    yield

    logger.info("Shutting down...")
    await close_database()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Storefront API",
        description="Catalog, cart and checkout API for the kids shop",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        logger.info(
            "Request rejected",
            error_type=type(exc).__name__,
            status_code=exc.status_code,
            error=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error", error=str(exc), error_type=type(exc).__name__)
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(products_router, prefix="/api/v1/products", tags=["Products"])
    app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
    app.include_router(cart_router, prefix="/api/v1/cart", tags=["Cart"])
    app.include_router(orders_router, prefix="/api/v1/orders", tags=["Orders"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Storefront API",
            "version": settings.version,
            "environment": settings.app_env,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
