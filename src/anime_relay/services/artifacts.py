"""Optional on-disk archive of job inputs and outputs for debugging."""

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ArtifactArchive:
    """Write job artifacts to a local directory when enabled."""

    enabled: bool
    directory: Path

    async def save(self, user_id: int, label: str, data: bytes) -> Path | None:
        """Persist `data` off the event loop and return the written path.

        Failures are logged and never propagate to the caller.
        """
        if not self.enabled:
            return None
        path = self.directory / f"{int(time.time() * 1000)}_{user_id}_{label}.jpg"
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError:
            logger.exception("Failed to archive artifact", extra={"path": str(path)})
            return None
        return path

    def _write(self, path: Path, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
