"""Resilient binary downloads over HTTP(S)."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from anime_relay.domain.errors import DownloadError

logger = logging.getLogger(__name__)


class AssetFetcher(Protocol):
    """Interface for downloading binary assets."""

    async def fetch(self, url: str) -> bytes:
        """Download the asset at `url` and return its bytes."""


@dataclass
class HttpxAssetFetcher(AssetFetcher):
    """Asset fetcher that retries until a non-empty body arrives."""

    http_client: httpx.AsyncClient
    max_attempts: int = 100
    timeout: float = 10.0

    @classmethod
    def create(
        cls, max_attempts: int = 100, timeout: float = 10.0
    ) -> "HttpxAssetFetcher":
        """Create an asset fetcher with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True),
            max_attempts=max_attempts,
            timeout=timeout,
        )

    async def fetch(self, url: str) -> bytes:
        """Return the first non-empty body, retrying errors and empty bodies."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await self.http_client.get(url, timeout=self.timeout)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.warning(
                    "Asset download failed: %s",
                    exc,
                    extra={"url": url, "attempt": attempt},
                )
                continue
            if response.content:
                return response.content
            logger.warning(
                "Asset download returned an empty body",
                extra={"url": url, "attempt": attempt},
            )
        raise DownloadError(url, self.max_attempts)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
