"""End-to-end processing of a user's photo conversion."""

import asyncio
import base64
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, TypeVar

from anime_relay.adapters.asset_fetcher import AssetFetcher
from anime_relay.domain.errors import JobError
from anime_relay.domain.jobs import UserJob
from anime_relay.services.artifacts import ArtifactArchive
from anime_relay.services.sessions import SessionRegistry
from anime_relay.services.transform import TransformService

logger = logging.getLogger(__name__)

T = TypeVar("T")

ALREADY_QUEUED_TEXT = "You are already in the queue, please wait"
UPLOADING_TEXT = "Photo has been received, uploading it for processing"
DOWNLOADING_TEXT = "Downloading the result"
DONE_TEXT = "Done."
GENERIC_ERROR_TEXT = "Some nasty error has occurred"


class Delivery(Protocol):
    """Outbound channel to the user who submitted a job."""

    async def send_text(self, handle: int, text: str) -> None:
        """Send a text notice."""

    async def send_image(self, handle: int, data: bytes) -> None:
        """Send image bytes."""

    async def send_video(self, handle: int, data: bytes) -> None:
        """Send video bytes."""

    async def resolve_source_url(self, source_ref: str) -> str:
        """Return a fetchable URL for the submitted photo."""


class JobPhase(Enum):
    """Phases a job moves through, in order."""

    RECEIVED = "received"
    UPLOADING = "uploading"
    DOWNLOADING = "downloading"
    DELIVERING = "delivering"
    DONE = "done"


@dataclass
class JobOrchestrator:
    """Drive a job from the submitted photo to delivered artifacts."""

    registry: SessionRegistry
    delivery: Delivery
    fetcher: AssetFetcher
    transform_service: TransformService
    archive: ArtifactArchive | None = None
    debug_errors: bool = False
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, repr=False)

    async def dispatch(self, job: UserJob) -> asyncio.Task[None] | None:
        """Admit the job and schedule its run, or tell the user to wait."""
        if not self.registry.try_admit(job.user_id, job):
            logger.info("Rejected duplicate job", extra={"user_id": job.user_id})
            try:
                await self.delivery.send_text(job.chat_id, ALREADY_QUEUED_TEXT)
            except Exception:
                logger.exception(
                    "Failed to send queue notice", extra={"user_id": job.user_id}
                )
            return None
        task = asyncio.create_task(self.run(job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(self, job: UserJob) -> None:
        """Process an admitted job; the session is released on every exit."""
        try:
            await self._process(job)
        except Exception as exc:
            logger.exception(
                "Job failed for user %s", job.user_id, extra={"user_id": job.user_id}
            )
            await self._notify_failure(job, exc)
        finally:
            self.registry.release(job.user_id)

    async def wait_idle(self) -> None:
        """Wait for every scheduled run to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def _process(self, job: UserJob) -> None:
        _log_phase(job, JobPhase.RECEIVED)
        source_url = await self.delivery.resolve_source_url(job.source_ref)
        source = await self.fetcher.fetch(source_url)
        await self._archive(job, "input", source)

        _log_phase(job, JobPhase.UPLOADING)
        await self.delivery.send_text(job.chat_id, UPLOADING_TEXT)
        result = await self.transform_service.submit(
            base64.b64encode(source).decode("ascii")
        )
        logger.info(
            "Transform succeeded for user %s after %d attempts (%d rate limited)",
            job.user_id,
            result.attempts_used,
            result.rate_limited,
        )

        _log_phase(job, JobPhase.DOWNLOADING)
        await self.delivery.send_text(job.chat_id, DOWNLOADING_TEXT)
        video, image = await _all_or_cancel(
            self.fetcher.fetch(result.video_url),
            self.fetcher.fetch(result.image_url),
        )
        await self._archive(job, "output_img", image)

        _log_phase(job, JobPhase.DELIVERING)
        await _all_or_cancel(
            self.delivery.send_image(job.chat_id, image),
            self.delivery.send_video(job.chat_id, video),
        )
        await self.delivery.send_text(job.chat_id, DONE_TEXT)
        _log_phase(job, JobPhase.DONE)

    async def _notify_failure(self, job: UserJob, exc: Exception) -> None:
        try:
            await self.delivery.send_text(job.chat_id, self._format_error(exc))
        except Exception:
            logger.exception(
                "Failed to send error notice", extra={"user_id": job.user_id}
            )

    def _format_error(self, exc: Exception) -> str:
        """Return a user-facing error message, with debug info if enabled."""
        fallback = exc.user_message if isinstance(exc, JobError) else GENERIC_ERROR_TEXT
        if self.debug_errors:
            detail = f"{type(exc).__name__}: {exc}".strip()
            if detail:
                return f"{fallback} (debug: {detail})"
        return fallback

    async def _archive(self, job: UserJob, label: str, data: bytes) -> None:
        if self.archive is not None:
            await self.archive.save(job.user_id, label, data)


def _log_phase(job: UserJob, phase: JobPhase) -> None:
    logger.info("Job for user %s: %s", job.user_id, phase.value)


async def _all_or_cancel(*coros: Coroutine[object, object, T]) -> list[T]:
    """Run awaitables concurrently; the first failure cancels the rest."""
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coro) for coro in coros]
    except ExceptionGroup as exc:
        raise exc.exceptions[0] from None
    return [task.result() for task in tasks]
