"""Shared test fixtures."""

import json
from dataclasses import dataclass, field

import pytest

from anime_relay.adapters.asset_fetcher import AssetFetcher
from anime_relay.adapters.telegram_client import TelegramClient
from anime_relay.adapters.telegram_delivery import TelegramDelivery
from anime_relay.adapters.transform_client import TransformClient
from anime_relay.config import Settings
from anime_relay.containers import AppContainer
from anime_relay.domain.errors import DownloadError
from anime_relay.services.commands import StartCommandHandler
from anime_relay.services.jobs import Delivery, JobOrchestrator
from anime_relay.services.sessions import SessionRegistry
from anime_relay.services.transform import TransformService
from anime_relay.services.updates import UpdateHandler

RATE_LIMITED = {"code": 2114, "msg": "VOLUMN_LIMIT"}
ILLEGAL = {"code": 2111, "msg": "IMG_ILLEGAL"}
NO_FACE = {"code": 1001, "msg": "NO_FACE"}
UNRECOGNIZED = {"code": -1, "msg": "SERVER_BUSY"}


def success_payload(
    video_urls: list[str] | None = None, img_urls: list[str] | None = None
) -> dict[str, object]:
    """Build a successful transform response body."""
    extra = {
        "video_urls": video_urls if video_urls is not None else ["v.mp4"],
        "img_urls": img_urls if img_urls is not None else ["ignored", "out.jpg"],
    }
    return {"code": 0, "msg": "", "extra": json.dumps(extra)}


async def no_sleep(delay: float) -> None:
    return None


@dataclass
class ScriptedTransformClient(TransformClient):
    """Transform client replaying scripted responses.

    Each entry is a payload, `None`, or an exception to raise. The last
    entry repeats once the script runs out.
    """

    script: list[object] = field(default_factory=lambda: [success_payload()])
    calls: int = 0
    bodies: list[dict[str, object]] = field(default_factory=list)

    async def process(
        self, body: dict[str, object], timeout: float
    ) -> dict[str, object] | None:
        self.bodies.append(body)
        index = min(self.calls, len(self.script) - 1)
        self.calls += 1
        entry = self.script[index]
        if isinstance(entry, Exception):
            raise entry
        return entry  # type: ignore[return-value]


@dataclass
class FakeAssetFetcher(AssetFetcher):
    """Asset fetcher serving bytes from an in-memory map."""

    assets: dict[str, bytes] = field(default_factory=dict)
    failing: set[str] = field(default_factory=set)
    fetched: list[str] = field(default_factory=list)

    async def fetch(self, url: str) -> bytes:
        self.fetched.append(url)
        if url in self.failing or url not in self.assets:
            raise DownloadError(url, 1)
        return self.assets[url]


@dataclass
class RecordingDelivery(Delivery):
    """Delivery collaborator that records everything sent."""

    texts: list[tuple[int, str]] = field(default_factory=list)
    images: list[tuple[int, bytes]] = field(default_factory=list)
    videos: list[tuple[int, bytes]] = field(default_factory=list)
    fail_texts: bool = False

    async def send_text(self, handle: int, text: str) -> None:
        if self.fail_texts:
            raise RuntimeError("chat unavailable")
        self.texts.append((handle, text))

    async def send_image(self, handle: int, data: bytes) -> None:
        self.images.append((handle, data))

    async def send_video(self, handle: int, data: bytes) -> None:
        self.videos.append((handle, data))

    async def resolve_source_url(self, source_ref: str) -> str:
        return f"https://files.test/{source_ref}"


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    photos: list[tuple[int, bytes]] = field(default_factory=list)
    videos: list[tuple[int, bytes]] = field(default_factory=list)
    updates: list[list[dict[str, object]]] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None

    async def send_message(self, chat_id: int, text: str) -> None:
        self.messages.append((chat_id, text))

    async def send_photo(self, chat_id: int, photo: bytes) -> None:
        self.photos.append((chat_id, photo))

    async def send_video(self, chat_id: int, video: bytes) -> None:
        self.videos.append((chat_id, video))

    async def get_updates(
        self, offset: int | None = None, timeout: int = 30
    ) -> list[dict[str, object]]:
        if self.updates:
            return self.updates.pop(0)
        return []

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands


@dataclass
class FakeTelegramFileClient:
    """Fake Telegram file client resolving ids to test URLs."""

    async def resolve_file_url(self, file_id: str) -> str:
        return f"https://files.test/{file_id}"


def build_orchestrator(
    script: list[object] | None = None,
    assets: dict[str, bytes] | None = None,
    delivery: Delivery | None = None,
    max_attempts: int = 100,
) -> JobOrchestrator:
    """Wire an orchestrator from in-memory fakes."""
    client = ScriptedTransformClient(script=script or [success_payload()])
    return JobOrchestrator(
        registry=SessionRegistry(),
        delivery=delivery or RecordingDelivery(),
        fetcher=FakeAssetFetcher(assets=dict(assets or {})),
        transform_service=TransformService(
            client=client, max_attempts=max_attempts, sleep=no_sleep
        ),
    )


def photo_update(
    update_id: int, user_id: int, chat_id: int, file_id: str = "large"
) -> dict[str, object]:
    """Build a Telegram update carrying a photo."""
    return {
        "update_id": update_id,
        "message": {
            "message_id": update_id * 10,
            "date": 1700000000,
            "chat": {"id": chat_id, "type": "private"},
            "from": {"id": user_id, "is_bot": False, "first_name": "Test"},
            "photo": [
                {
                    "file_id": "small",
                    "file_unique_id": "small-unique",
                    "width": 64,
                    "height": 64,
                },
                {
                    "file_id": file_id,
                    "file_unique_id": f"{file_id}-unique",
                    "width": 512,
                    "height": 512,
                },
            ],
        },
    }


def text_update(update_id: int, user_id: int, chat_id: int, text: str) -> dict:
    """Build a Telegram update carrying a text message."""
    return {
        "update_id": update_id,
        "message": {
            "message_id": update_id * 10,
            "date": 1700000000,
            "chat": {"id": chat_id, "type": "private"},
            "from": {"id": user_id, "is_bot": False, "first_name": "Test"},
            "text": text,
        },
    }


DEFAULT_ASSETS = {
    "https://files.test/large": b"source-bytes",
    "v.mp4": b"video-bytes",
    "out.jpg": b"image-bytes",
}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        admin_token="admin-token",
        keep_files=False,
        environment="test",
    )


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def transform_client() -> ScriptedTransformClient:
    return ScriptedTransformClient()


@pytest.fixture
def asset_fetcher() -> FakeAssetFetcher:
    return FakeAssetFetcher(assets=dict(DEFAULT_ASSETS))


@pytest.fixture
def container(
    settings: Settings,
    telegram_client: FakeTelegramClient,
    transform_client: ScriptedTransformClient,
    asset_fetcher: FakeAssetFetcher,
) -> AppContainer:
    telegram_file_client = FakeTelegramFileClient()
    session_registry = SessionRegistry()
    orchestrator = JobOrchestrator(
        registry=session_registry,
        delivery=TelegramDelivery(
            telegram_client=telegram_client, file_client=telegram_file_client
        ),
        fetcher=asset_fetcher,
        transform_service=TransformService(client=transform_client, sleep=no_sleep),
    )
    update_handler = UpdateHandler(
        telegram_client=telegram_client,
        start_command_handler=StartCommandHandler(telegram_client),
        orchestrator=orchestrator,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        session_registry=session_registry,
        orchestrator=orchestrator,
        update_handler=update_handler,
        close_resources=close_resources,
    )
