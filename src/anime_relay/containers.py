"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from anime_relay.adapters.asset_fetcher import HttpxAssetFetcher
from anime_relay.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from anime_relay.adapters.telegram_delivery import TelegramDelivery
from anime_relay.adapters.telegram_file_client import (
    HttpxTelegramFileClient,
    TelegramFileClient,
)
from anime_relay.adapters.transform_client import HttpxTransformClient
from anime_relay.config import Settings
from anime_relay.services.artifacts import ArtifactArchive
from anime_relay.services.commands import StartCommandHandler
from anime_relay.services.jobs import JobOrchestrator
from anime_relay.services.sessions import SessionRegistry
from anime_relay.services.transform import TransformService
from anime_relay.services.updates import UpdateHandler


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    telegram_file_client: TelegramFileClient
    session_registry: SessionRegistry
    orchestrator: JobOrchestrator
    update_handler: UpdateHandler
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    telegram_file_client = HttpxTelegramFileClient.create(
        resolved_settings.telegram_bot_token
    )
    transform_client = HttpxTransformClient.create(resolved_settings.transform_url)
    fetcher = HttpxAssetFetcher.create(
        max_attempts=resolved_settings.download_max_attempts,
        timeout=resolved_settings.download_timeout_seconds,
    )
    transform_service = TransformService(
        client=transform_client,
        busi_id=resolved_settings.transform_busi_id,
        max_attempts=resolved_settings.transform_max_attempts,
        timeout=resolved_settings.transform_timeout_seconds,
        rate_limit_delay=resolved_settings.rate_limit_delay_seconds,
    )
    session_registry = SessionRegistry()
    orchestrator = JobOrchestrator(
        registry=session_registry,
        delivery=TelegramDelivery(
            telegram_client=telegram_client, file_client=telegram_file_client
        ),
        fetcher=fetcher,
        transform_service=transform_service,
        archive=ArtifactArchive(
            enabled=resolved_settings.keep_files,
            directory=Path(resolved_settings.files_dir),
        ),
        debug_errors=resolved_settings.environment == "local",
    )
    update_handler = UpdateHandler(
        telegram_client=telegram_client,
        start_command_handler=StartCommandHandler(telegram_client),
        orchestrator=orchestrator,
    )

    async def close_resources() -> None:
        await telegram_client.close()
        await telegram_file_client.close()
        await transform_client.close()
        await fetcher.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        telegram_file_client=telegram_file_client,
        session_registry=session_registry,
        orchestrator=orchestrator,
        update_handler=update_handler,
        close_resources=close_resources,
    )
