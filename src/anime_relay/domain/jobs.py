"""Domain models for conversion jobs."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class UserJob:
    """A single photo conversion requested by a Telegram user."""

    user_id: int
    source_ref: str
    chat_id: int


@dataclass(frozen=True)
class ProcessingResult:
    """Ephemeral artifact URLs returned by the transform service."""

    image_url: str
    video_url: str
    attempts_used: int = 1
    rate_limited: int = 0


class OutcomeKind(Enum):
    """Classification of a single transform service response."""

    SUCCESS = "success"
    CONTENT_REJECTED = "content_rejected"
    NO_FACE = "no_face"
    RATE_LIMITED = "rate_limited"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class RemoteOutcome:
    """Outcome of one submission attempt."""

    kind: OutcomeKind
    result: ProcessingResult | None = None
    payload: dict[str, object] | None = None


class ResultExtra(BaseModel):
    """Decoded `extra` envelope of a successful transform response."""

    video_urls: list[str] = Field(default_factory=list)
    img_urls: list[str] = Field(default_factory=list)
