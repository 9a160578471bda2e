"""Submission of images to the remote transform service."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from uuid import uuid4

import httpx
from pydantic import ValidationError

from anime_relay.adapters.transform_client import TransformClient
from anime_relay.domain.errors import (
    ContentRejectedError,
    NoFaceError,
    ServiceUnavailableError,
)
from anime_relay.domain.jobs import (
    OutcomeKind,
    ProcessingResult,
    RemoteOutcome,
    ResultExtra,
)

logger = logging.getLogger(__name__)

MSG_ILLEGAL_CONTENT = "IMG_ILLEGAL"
MSG_RATE_LIMITED = "VOLUMN_LIMIT"
CODE_NO_FACE = 1001

# Position of each artifact within the URL lists of the `extra` envelope.
VIDEO_URL_INDEX = 0
IMAGE_URL_INDEX = 1


@dataclass
class TransformService:
    """Submit an image and retry until the service accepts or rejects it.

    Rate-limited responses are retried after `rate_limit_delay` without
    consuming an attempt, so only genuine failures (network errors and
    unrecognized payloads) count against `max_attempts`.
    """

    client: TransformClient
    busi_id: str = "ai_painting_anime_entry"
    max_attempts: int = 100
    timeout: float = 30.0
    rate_limit_delay: float = 3.0
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    async def submit(self, image_b64: str) -> ProcessingResult:
        """Return artifact URLs for a base64-encoded image."""
        body = build_request_body(image_b64, self.busi_id, trace_id=str(uuid4()))
        attempts = 0
        rate_limited = 0
        payload: dict[str, object] | None = None
        while attempts < self.max_attempts:
            try:
                payload = await self.client.process(body, timeout=self.timeout)
            except httpx.HTTPError as exc:
                attempts += 1
                payload = None
                logger.warning(
                    "Transform request failed: %s", exc, extra={"attempt": attempts}
                )
                continue

            outcome = classify_payload(payload)
            if outcome.kind is OutcomeKind.RATE_LIMITED:
                rate_limited += 1
                logger.info("Transform service rate limit caught")
                await self.sleep(self.rate_limit_delay)
                continue

            attempts += 1
            if outcome.kind is OutcomeKind.CONTENT_REJECTED:
                raise ContentRejectedError()
            if outcome.kind is OutcomeKind.NO_FACE:
                raise NoFaceError()
            if outcome.kind is OutcomeKind.SUCCESS and outcome.result is not None:
                return ProcessingResult(
                    image_url=outcome.result.image_url,
                    video_url=outcome.result.video_url,
                    attempts_used=attempts,
                    rate_limited=rate_limited,
                )
        raise ServiceUnavailableError(payload, attempts)


def build_request_body(image_b64: str, busi_id: str, trace_id: str) -> dict[str, object]:
    """Build the processing request body for a single image."""
    extra = {
        "face_rects": [],
        "version": 2,
        "platform": "web",
        "data_report": {
            "parent_trace_id": trace_id,
            "root_channel": "",
            "level": 0,
        },
    }
    return {
        "busiId": busi_id,
        "extra": json.dumps(extra),
        "images": [image_b64],
    }


def classify_payload(payload: dict[str, object] | None) -> RemoteOutcome:
    """Map a raw response body to exactly one outcome."""
    if payload is None:
        return RemoteOutcome(kind=OutcomeKind.UNRECOGNIZED)
    msg = payload.get("msg")
    if msg == MSG_ILLEGAL_CONTENT:
        return RemoteOutcome(kind=OutcomeKind.CONTENT_REJECTED, payload=payload)
    if msg == MSG_RATE_LIMITED:
        return RemoteOutcome(kind=OutcomeKind.RATE_LIMITED, payload=payload)
    if payload.get("code") == CODE_NO_FACE:
        return RemoteOutcome(kind=OutcomeKind.NO_FACE, payload=payload)
    result = _parse_result(payload.get("extra"))
    if result is not None:
        return RemoteOutcome(kind=OutcomeKind.SUCCESS, result=result, payload=payload)
    return RemoteOutcome(kind=OutcomeKind.UNRECOGNIZED, payload=payload)


def _parse_result(raw_extra: object) -> ProcessingResult | None:
    """Decode the JSON-encoded `extra` field into artifact URLs."""
    if not raw_extra or not isinstance(raw_extra, str):
        return None
    try:
        extra = ResultExtra.model_validate_json(raw_extra)
    except ValidationError:
        return None
    if len(extra.video_urls) <= VIDEO_URL_INDEX:
        return None
    if len(extra.img_urls) <= IMAGE_URL_INDEX:
        return None
    return ProcessingResult(
        image_url=extra.img_urls[IMAGE_URL_INDEX],
        video_url=extra.video_urls[VIDEO_URL_INDEX],
    )
