"""Routing of inbound Telegram updates."""

import logging
from dataclasses import dataclass

from anime_relay.adapters.telegram_client import TelegramClient
from anime_relay.api.telegram_models import TelegramPhotoSize, TelegramUpdate
from anime_relay.domain.jobs import UserJob
from anime_relay.services.commands import GREETING_TEXT, StartCommandHandler
from anime_relay.services.jobs import JobOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class UpdateHandler:
    """Turn Telegram updates into commands and conversion jobs."""

    telegram_client: TelegramClient
    start_command_handler: StartCommandHandler
    orchestrator: JobOrchestrator

    async def handle(self, update: TelegramUpdate) -> None:
        """Handle a single update; photos are dispatched as jobs."""
        message = update.message
        if message is None or message.from_user is None:
            return
        user_id = message.from_user.id
        chat_id = message.chat.id
        if message.photo:
            logger.info("Received photo from %s", user_id)
            photo = _select_largest_photo(message.photo)
            await self.orchestrator.dispatch(
                UserJob(user_id=user_id, source_ref=photo.file_id, chat_id=chat_id)
            )
            return

        if message.text and message.text.startswith("/start"):
            await self.start_command_handler.handle(chat_id=chat_id)
            return

        await self.telegram_client.send_message(chat_id=chat_id, text=GREETING_TEXT)


def _select_largest_photo(photos: list[TelegramPhotoSize]) -> TelegramPhotoSize:
    """Select the largest photo size from the Telegram payload."""
    return max(photos, key=lambda photo: (photo.width * photo.height))
