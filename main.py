"""
Slack app installer — application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI

from api.middleware import register_middleware
from config.settings import config
from connectors.encryption import get_token_cipher
from connectors.routes import router as install_router
from database.session import init_models

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3", "aiosqlite"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Slack App Installer",
        version="1.0.0",
        description="OAuth install flow for a Slack app.",
    )

    register_middleware(app)

    app.include_router(install_router)

    @app.on_event("startup")
    async def on_startup():
        app_config = config.slack_app_config()
        if not (app_config.client_id and app_config.client_secret.get_secret_value()):
            logger.warning("SLACK_CLIENT_ID / SLACK_CLIENT_SECRET not set — /install will fail")
        if not config.oauth_state_secret.get_secret_value():
            logger.info("OAUTH_STATE_SECRET not set — signing state with the client secret")

        get_token_cipher()

        logger.info("Creating tables…")
        await init_models()

        logger.info("Application ready to accept requests.")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
