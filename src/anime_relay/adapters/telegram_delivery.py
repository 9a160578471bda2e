"""Delivery of job progress and results through Telegram."""

from dataclasses import dataclass

from anime_relay.adapters.telegram_client import TelegramClient
from anime_relay.adapters.telegram_file_client import TelegramFileClient
from anime_relay.services.jobs import Delivery


@dataclass
class TelegramDelivery(Delivery):
    """Delivery collaborator addressing users by Telegram chat id."""

    telegram_client: TelegramClient
    file_client: TelegramFileClient

    async def send_text(self, handle: int, text: str) -> None:
        await self.telegram_client.send_message(chat_id=handle, text=text)

    async def send_image(self, handle: int, data: bytes) -> None:
        await self.telegram_client.send_photo(chat_id=handle, photo=data)

    async def send_video(self, handle: int, data: bytes) -> None:
        await self.telegram_client.send_video(chat_id=handle, video=data)

    async def resolve_source_url(self, source_ref: str) -> str:
        return await self.file_client.resolve_file_url(source_ref)
