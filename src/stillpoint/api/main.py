"""
FastAPI Application Factory

Assembles the control API:
- Session routes under /api/v1/session
- WebSocket event stream at /ws/session
- Exception handlers (ErrorResponse format)
- CORS for a local web frontend

Called from main_asyncio.py and from the tests.
"""

from typing import Optional

from fastapi import Depends, FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stillpoint.api.dependencies import get_service_container
from stillpoint.api.middleware.error_handler import register_exception_handlers
from stillpoint.api.routes import session
from stillpoint.api.websocket import websocket_session_endpoint
from stillpoint.models.enums import LogCategory
from stillpoint.services.service_container import ServiceContainer
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.API)


def create_app(
    title: str = "Stillpoint",
    description: str = "Control API for the guided meditation timer",
    version: str = "1.0.0",
    docs_enabled: bool = True,
    cors_origins: Optional[list[str]] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        title: API title (shown in docs)
        description: API description
        version: API version
        docs_enabled: Enable /docs and /redoc
        cors_origins: CORS allowed origins (default: local dev servers)
    """
    app = FastAPI(
        title=title,
        description=description,
        version=version,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None
    )

    if cors_origins is None:
        cors_origins = [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(session.router, prefix="/api/v1")

    @app.get("/api/health", tags=["System"], summary="Health check")
    async def health_check(services: ServiceContainer = Depends(get_service_container)):
        return {
            "status": "healthy",
            "service": "stillpoint-api",
            "version": version,
            "timer_available": services.session_controller.timer_available,
        }

    @app.get("/", include_in_schema=False)
    async def root():
        return JSONResponse({
            "message": "Stillpoint API",
            "docs": "/docs",
            "health": "/api/health"
        })

    @app.websocket("/ws/session")
    async def websocket_session(
        websocket: WebSocket,
        services: ServiceContainer = Depends(get_service_container)
    ):
        await websocket_session_endpoint(websocket, services)

    log.info(f"FastAPI app created: {title} v{version}")
    return app
