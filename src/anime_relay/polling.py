"""Long-polling transport for Telegram updates."""

import asyncio
import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from anime_relay.adapters.telegram_client import TelegramClient
from anime_relay.api.telegram_models import TelegramUpdate
from anime_relay.services.updates import UpdateHandler

logger = logging.getLogger(__name__)


@dataclass
class UpdatePoller:
    """Fetch updates with getUpdates and hand them to the update handler.

    `stop` is one-shot: the first call records the reason and ends the poll
    loop, later calls are ignored. Jobs already dispatched keep running.
    """

    telegram_client: TelegramClient
    update_handler: UpdateHandler
    timeout: int = 30
    error_delay: float = 1.0
    stop_reason: str | None = None
    _stopped: asyncio.Event = field(default_factory=asyncio.Event, repr=False)
    _offset: int | None = None

    def stop(self, reason: str) -> None:
        """Request shutdown of the poll loop."""
        if self._stopped.is_set():
            return
        self.stop_reason = reason
        self._stopped.set()
        logger.info("Stopping update polling: %s", reason)

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    async def run(self) -> None:
        """Poll until `stop` is called."""
        logger.info("Update polling started")
        while not self._stopped.is_set():
            updates = await self._next_batch()
            if updates is None:
                continue
            for raw in updates:
                await self._handle_raw(raw)
        logger.info("Update polling stopped")

    async def _next_batch(self) -> list[dict[str, object]] | None:
        poll = asyncio.ensure_future(
            self.telegram_client.get_updates(offset=self._offset, timeout=self.timeout)
        )
        stop = asyncio.ensure_future(self._stopped.wait())
        done, _ = await asyncio.wait({poll, stop}, return_when=asyncio.FIRST_COMPLETED)
        if poll not in done:
            poll.cancel()
            await asyncio.gather(poll, return_exceptions=True)
            return None
        stop.cancel()
        try:
            return poll.result()
        except Exception:
            logger.exception("Failed to fetch updates")
            await asyncio.sleep(self.error_delay)
            return None

    async def _handle_raw(self, raw: dict[str, object]) -> None:
        update_id = raw.get("update_id")
        if isinstance(update_id, int):
            self._offset = update_id + 1
        try:
            update = TelegramUpdate.model_validate(raw)
        except ValidationError:
            logger.warning("Skipping malformed update", extra={"update_id": update_id})
            return
        try:
            await self.update_handler.handle(update)
        except Exception:
            logger.exception("Failed to handle update", extra={"update_id": update_id})
