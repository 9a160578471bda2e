"""Errors raised while processing a conversion job."""

import json


class JobError(Exception):
    """Base error for a failed job, carrying a user-facing message."""

    user_message = "Some nasty error has occurred"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


class ContentRejectedError(JobError):
    """The transform service refused the image on moderation grounds."""

    user_message = "Couldn't pass the censorship. Try another photo."


class NoFaceError(JobError):
    """The transform service found no usable face in the image."""

    user_message = "No face was found in the image. Try another photo."


class ServiceUnavailableError(JobError):
    """The transform service never produced a usable response."""

    user_message = "The conversion service is not responding, please try again later."

    def __init__(self, last_payload: dict[str, object] | None, attempts: int) -> None:
        self.last_payload = last_payload
        self.attempts = attempts
        super().__init__(
            f"No usable response after {attempts} attempts: "
            f"{json.dumps(last_payload, ensure_ascii=False, default=str)}"
        )


class DownloadError(JobError):
    """A binary asset could not be downloaded."""

    user_message = "Couldn't load the photo, please try again."

    def __init__(self, url: str, attempts: int) -> None:
        self.url = url
        self.attempts = attempts
        super().__init__(f"Failed to download {url} after {attempts} attempts")
