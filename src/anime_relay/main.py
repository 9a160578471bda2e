"""Long-polling entrypoint for running the bot as a process."""

import asyncio
import logging
import signal
from contextlib import suppress

from anime_relay.app_logging import configure_logging
from anime_relay.containers import AppContainer, build_container
from anime_relay.polling import UpdatePoller
from anime_relay.telegram_commands import telegram_commands

logger = logging.getLogger(__name__)


async def serve(container: AppContainer, poller: UpdatePoller | None = None) -> None:
    """Poll for updates until a shutdown trigger, then drain running jobs."""
    if poller is None:
        poller = UpdatePoller(
            telegram_client=container.telegram_client,
            update_handler=container.update_handler,
            timeout=container.settings.poll_timeout_seconds,
        )
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, poller.stop, sig.name)

    def handle_exception(
        loop: asyncio.AbstractEventLoop, context: dict[str, object]
    ) -> None:
        loop.default_exception_handler(context)
        poller.stop("unhandled exception")

    loop.set_exception_handler(handle_exception)

    try:
        await container.telegram_client.set_my_commands(telegram_commands())
    except Exception:
        logger.exception("Failed to sync Telegram bot commands")

    try:
        await poller.run()
    finally:
        poller.stop("poll loop exited")
        if container.orchestrator.in_flight:
            logger.info(
                "Waiting for %d running jobs to finish",
                container.orchestrator.in_flight,
            )
        await container.orchestrator.wait_idle()
        await container.close_resources()


def main() -> None:
    """Run the bot with long polling."""
    configure_logging()
    asyncio.run(serve(build_container()))


if __name__ == "__main__":
    main()
