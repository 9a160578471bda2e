"""Command handlers for Telegram updates."""

from dataclasses import dataclass

from anime_relay.adapters.telegram_client import TelegramClient

GREETING_TEXT = "Send me the picture you want to convert"


@dataclass
class StartCommandHandler:
    """Handle the /start Telegram command."""

    telegram_client: TelegramClient

    async def handle(self, chat_id: int) -> None:
        """Send the greeting message."""
        await self.telegram_client.send_message(chat_id=chat_id, text=GREETING_TEXT)
