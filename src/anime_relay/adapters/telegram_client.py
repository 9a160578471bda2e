"""Telegram API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class TelegramClient(Protocol):
    """Interface for Telegram API interactions."""

    async def send_message(self, chat_id: int, text: str) -> None:
        """Send a text message to a Telegram chat."""

    async def send_photo(self, chat_id: int, photo: bytes) -> None:
        """Upload a photo to a Telegram chat."""

    async def send_video(self, chat_id: int, video: bytes) -> None:
        """Upload a video to a Telegram chat."""

    async def get_updates(
        self, offset: int | None = None, timeout: int = 30
    ) -> list[dict[str, object]]:
        """Long-poll pending updates."""

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""


@dataclass
class HttpxTelegramClient:
    """Telegram client implemented with httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramClient":
        """Create a Telegram client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    def _method_url(self, method: str) -> str:
        return f"https://api.telegram.org/bot{self.bot_token}/{method}"

    async def send_message(self, chat_id: int, text: str) -> None:
        """Send a message using Telegram's sendMessage API."""
        payload: dict[str, object] = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        response = await self.http_client.post(
            self._method_url("sendMessage"), json=payload, timeout=10
        )
        response.raise_for_status()

    async def send_photo(self, chat_id: int, photo: bytes) -> None:
        """Upload photo bytes using Telegram's sendPhoto API."""
        response = await self.http_client.post(
            self._method_url("sendPhoto"),
            data={"chat_id": str(chat_id)},
            files={"photo": ("result.jpg", photo, "image/jpeg")},
            timeout=60,
        )
        response.raise_for_status()

    async def send_video(self, chat_id: int, video: bytes) -> None:
        """Upload video bytes using Telegram's sendVideo API."""
        response = await self.http_client.post(
            self._method_url("sendVideo"),
            data={"chat_id": str(chat_id)},
            files={"video": ("result.mp4", video, "video/mp4")},
            timeout=120,
        )
        response.raise_for_status()

    async def get_updates(
        self, offset: int | None = None, timeout: int = 30
    ) -> list[dict[str, object]]:
        """Fetch updates using Telegram's getUpdates long polling."""
        params: dict[str, object] = {
            "timeout": timeout,
            "allowed_updates": '["message"]',
        }
        if offset is not None:
            params["offset"] = offset
        response = await self.http_client.get(
            self._method_url("getUpdates"), params=params, timeout=timeout + 10
        )
        response.raise_for_status()
        payload = response.json()
        if not payload.get("ok"):
            raise RuntimeError("Telegram getUpdates failed")
        return payload["result"]

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""
        payload: dict[str, object] = {"commands": commands}
        response = await self.http_client.post(
            self._method_url("setMyCommands"), json=payload, timeout=10
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
