"""
LlamaFlow API Server

Real-time TVL metrics for a single DeFi protocol, served over GraphQL and
pushed to browsers over a websocket channel.

Environment Variables:
    HOST: Server host address (default: 0.0.0.0)
    PORT: Server port (default: 3000)
    DEBUG: Enable debug mode with auto-reload (default: false)
    PROTOCOL_ID: Tracked protocol identifier (default: llamaflow)
    UPDATE_INTERVAL_S: Seconds between TVL updates (default: 5)
    RANDOM_SEED: Seed the synthetic series for reproducible runs (default: unset)
    JWT_SECRET: Secret for bearer tokens on protected routes

CLI Usage:
    python main.py

    # Faster updates with a reproducible series
    UPDATE_INTERVAL_S=1 RANDOM_SEED=42 python main.py
"""

import uvicorn

from app.core.config import settings
from app.core.logging_config import get_logger

logger = get_logger("main")

if __name__ == "__main__":
    port = settings.PORT
    host = settings.HOST

    logger.info(f"Starting {settings.PROJECT_NAME} on {host}:{port}")
    logger.info(f"Tracking protocol '{settings.PROTOCOL_ID}', update every {settings.UPDATE_INTERVAL_S}s")

    # If reload is enabled, restrict watch scope to backend code only.
    reload_enabled = bool(settings.DEBUG)
    reload_dirs = ["app"] if reload_enabled else None

    uvicorn.run(
        "app.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
        reload_dirs=reload_dirs,
    )
