import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.error_handlers import register_exception_handlers
from storefront.core.config import Settings, get_settings, load_env_file
from storefront.core.logging import configure_logging, get_logger, set_correlation_id
from storefront.services.catalog_service import CatalogService


# Load environment variables and configure logging early
load_env_file()
configure_logging()
logger = get_logger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    catalog_service: Optional[CatalogService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the cached environment settings
        catalog_service: Prebuilt catalog service; built from settings on
            startup when omitted

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up Storefront Catalog Service")
        if getattr(app.state, "catalog_service", None) is None:
            app.state.catalog_service = CatalogService.from_settings(settings)
        yield
        logger.info("Shutting down Storefront Catalog Service")
        await app.state.catalog_service.aclose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.catalog_service = catalog_service

    configure_middleware(app, settings)
    register_exception_handlers(app)
    register_routers(app, settings)

    return app


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configure middleware components for the FastAPI application.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next: Callable):
        correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID") or str(uuid.uuid4()))
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {str(e)}",
                extra={
                    "request_path": request.url.path,
                    "method": request.method,
                    "process_time_ms": round((time.time() - start_time) * 1000, 2),
                },
                exc_info=True
            )
            raise

        response.headers["X-Correlation-ID"] = correlation_id
        logger.info(
            "Request completed",
            extra={
                "request_path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "process_time_ms": round((time.time() - start_time) * 1000, 2)
            }
        )
        return response


def register_routers(app: FastAPI, settings: Settings) -> None:
    """
    Register API routers with the FastAPI application.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    # Import routers here to avoid circular imports
    from storefront.api.routes.categories import categories_router
    from storefront.api.routes.health import health_router
    from storefront.api.routes.products import products_router
    from storefront.api.routes.storefront import cart_router, storefront_router

    app.include_router(health_router, prefix=f"{settings.API_V1_STR}/health", tags=["Health"])
    app.include_router(products_router, prefix=f"{settings.API_V1_STR}/products", tags=["Products"])
    app.include_router(categories_router, prefix=f"{settings.API_V1_STR}/categories", tags=["Categories"])
    app.include_router(storefront_router, prefix=f"{settings.API_V1_STR}/storefront", tags=["Storefront"])
    app.include_router(cart_router, prefix=f"{settings.API_V1_STR}/cart", tags=["Cart"])


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8000, reload=True)
