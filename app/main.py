"""
FastAPI application for business hours and appointment booking
"""
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from app.api.router import api_router
from app.config.settings import get_settings
from app.core.context import AppContext, build_context
from app.core.exceptions import register_exception_handlers
from app.core.middleware import correlation_id_middleware, request_logging_middleware
from app.core.monitoring import health_router
from app.utils.my_logging import setup_logging

logger = logging.getLogger(__name__)


def log_routes(app: FastAPI) -> None:
    """Log the registered route table grouped by tag"""
    routes_list = []
    for route in app.routes:
        if isinstance(route, APIRoute):
            for method in route.methods:
                routes_list.append((method, route.path, route.name, route.tags))

    routes_list.sort(key=lambda x: (x[1], x[0]))

    routes_by_tag = defaultdict(list)
    for method, path, name, tags in routes_list:
        tag = tags[0] if tags else "other"
        routes_by_tag[tag].append((method, path, name))

    for tag, routes in sorted(routes_by_tag.items()):
        logger.info(f"[{tag.upper()}]")
        for method, path, name in routes:
            logger.info(f"  {method:8} {path:50} ({name})")

    logger.info(f"Total routes registered: {len(routes_list)}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    context: AppContext = app.state.context
    setup_logging(context.settings, verbose=context.settings.DEBUG)
    logger.info(f"{context.settings.APP_NAME} starting up...")
    log_routes(app)

    yield

    logger.info(f"{context.settings.APP_NAME} shutting down...")


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    if context is None:
        context = build_context(get_settings())
    settings = context.settings

    app = FastAPI(
        title=settings.APP_NAME,
        description="Operating hours, free slots and calendar-synced appointment booking",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )
    app.state.context = context

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Add custom middleware
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_router)

    @app.get("/")
    def root():
        return {
            "success": True,
            "data": {
                "service": settings.APP_NAME,
                "version": "0.1.0",
                "status": "running",
                "docs": "/docs" if settings.DEBUG else "disabled",
            },
            "message": "Yeah, you're home!",
        }

    return app


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(build_context(settings)),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
