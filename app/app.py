import random
from datetime import datetime, timezone
from pathlib import Path
from contextlib import asynccontextmanager
from typing import Optional

from app.core.logging_config import get_logger
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import router as api_router
from app.api.routes.websocket import reject_unknown_websocket
from app.core.config import settings
from app.core.security import AuthenticationError
from app.graphql.schema import create_graphql_router
from app.middleware.rate_limit import RateLimitMiddleware
from app.services.metrics.scheduler import UpdateScheduler
from app.services.metrics.store import MetricsStore, format_timestamp
from app.services.websocket.manager import ConnectionManager

logger = get_logger("app")


def build_store() -> MetricsStore:
    """Construct the metrics store from settings."""
    rng = random.Random(settings.RANDOM_SEED) if settings.RANDOM_SEED is not None else None
    return MetricsStore(
        protocol_id=settings.PROTOCOL_ID,
        capacity=settings.HISTORY_CAPACITY,
        seed_points=settings.SEED_POINTS,
        rng=rng,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    store: MetricsStore = app.state.metrics_store
    store.seed()

    scheduler = UpdateScheduler(
        store,
        app.state.connection_manager,
        interval=app.state.update_interval,
    )
    app.state.scheduler = scheduler
    scheduler.start()
    logger.info(f"{settings.PROJECT_NAME} started, tracking '{store.protocol_id}'")

    yield

    # Shutdown
    scheduler.stop()
    app.state.connection_manager.reset_active_connections()


def create_app(
    store: Optional[MetricsStore] = None,
    update_interval: Optional[float] = None,
    static_dir: Optional[str] = None,
) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Real-time DeFi protocol TVL metrics",
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.metrics_store = store if store is not None else build_store()
    app.state.connection_manager = ConnectionManager()
    app.state.update_interval = update_interval if update_interval is not None else settings.UPDATE_INTERVAL_S

    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.RATE_LIMIT_MAX,
        window_s=settings.RATE_LIMIT_WINDOW_S,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    app.include_router(create_graphql_router(), prefix="/graphql")
    app.add_api_websocket_route("/{path:path}", reject_unknown_websocket)

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        return JSONResponse({"error": str(exc)}, status_code=401)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            {
                "error": str(exc) or "Internal server error",
                "timestamp": format_timestamp(datetime.now(timezone.utc)),
            },
            status_code=500,
        )

    # Serve the SPA (and assets) at root.
    # Keep this mount LAST so API routes (e.g. /api, /graphql, /ws) take precedence.
    static_path = Path(static_dir if static_dir is not None else settings.STATIC_DIR)
    if static_path.is_dir():
        app.mount("/", StaticFiles(directory=str(static_path), html=True), name="spa")

        @app.exception_handler(StarletteHTTPException)
        async def spa_fallback_handler(request: Request, exc: StarletteHTTPException):
            if exc.status_code == 404:
                # Unknown non-API paths get the SPA index.html
                if not request.url.path.startswith("/api/") and not request.url.path.startswith("/graphql"):
                    index_path = static_path / "index.html"
                    if index_path.exists():
                        return FileResponse(index_path)

            # Otherwise, fall back to standard JSON response
            return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))
    else:
        logger.warning(f"Static directory not found at {static_path}")

    return app


app = create_app()
