"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from anime_relay.api.admin import router as admin_router
from anime_relay.api.telegram_models import TelegramUpdate
from anime_relay.app_logging import configure_logging
from anime_relay.containers import AppContainer
from anime_relay.telegram_commands import telegram_commands


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.telegram_client.set_my_commands(telegram_commands())
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        yield
        await state_container.orchestrator.wait_idle()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates.

        Always acknowledges the update so Telegram does not redeliver it;
        conversions run in the background after admission.
        """
        state_container: AppContainer = request.app.state.container
        try:
            await state_container.update_handler.handle(update)
        except Exception:
            logger.exception(
                "Failed to handle update", extra={"update_id": update.update_id}
            )
        return {"status": "ok"}

    return app
