"""HTTP transport for the remote image transform service."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class TransformClient(Protocol):
    """Interface for a single transform service round trip."""

    async def process(
        self, body: dict[str, object], timeout: float
    ) -> dict[str, object] | None:
        """Post a processing request and return the decoded response body."""


@dataclass
class HttpxTransformClient(TransformClient):
    """Transform client implemented with httpx."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxTransformClient":
        """Create a transform client with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def process(
        self, body: dict[str, object], timeout: float
    ) -> dict[str, object] | None:
        """Post the request body as JSON.

        Error statuses are not raised: the service reports rate limiting and
        moderation results in the body regardless of status, so the body is
        returned whenever it decodes to a JSON object.
        """
        response = await self.http_client.post(self.url, json=body, timeout=timeout)
        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
