"""
Download the package index snapshot from the blob store.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import aiofiles
import httpx

from pkgsearch.core.config import Settings
from pkgsearch.domain.errors import FetchError

logger = logging.getLogger(__name__)


class SnapshotFetcher:
    """
    Copies one object (bucket + key) from the blob store to the local
    snapshot path, fully replacing whatever was there before.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.transport = transport
        self.fetch_count = 0

    @property
    def target_path(self) -> Path:
        return self.settings.index_path

    async def fetch(self) -> Path:
        """
        Download the snapshot and move it into place.

        The bytes are streamed into a temporary sibling file first so that a
        failed download never leaves a truncated snapshot at the target path.

        Raises:
            FetchError: the object is unreachable or missing, or the local
                write failed.
        """
        self.fetch_count += 1
        url = self.settings.object_url
        target = self.target_path
        tmp_path = target.with_name(f"{target.name}.tmp")

        logger.info(f"Fetching index snapshot {url} -> {target}")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if tmp_path.exists():
                tmp_path.unlink()

            downloaded = 0
            async with httpx.AsyncClient(
                transport=self.transport,
                follow_redirects=True,
                timeout=self.settings.fetch_timeout_seconds,
            ) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    async with aiofiles.open(tmp_path, "wb") as f:
                        async for chunk in response.aiter_bytes():
                            await f.write(chunk)
                            downloaded += len(chunk)

            tmp_path.replace(target)
        except httpx.HTTPStatusError as e:
            self._discard(tmp_path)
            logger.error(f"Blob store answered {e.response.status_code} for {url}")
            raise FetchError(
                f"failed to fetch index snapshot: remote returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            self._discard(tmp_path)
            logger.error(f"Failed to download index snapshot from {url}: {e}", exc_info=True)
            raise FetchError("failed to fetch index snapshot: remote unreachable") from e
        except OSError as e:
            self._discard(tmp_path)
            logger.error(f"Failed to write index snapshot to {target}: {e}", exc_info=True)
            raise FetchError("failed to fetch index snapshot: local write failed") from e

        logger.info(f"Index snapshot written to {target} ({downloaded} bytes)")
        return target

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial snapshot {path}: {e}")


if __name__ == "__main__":
    import asyncio
    import sys

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    settings = Settings()
    if len(sys.argv) > 1:
        settings = settings.model_copy(update={"index_path": Path(sys.argv[1])})

    if not settings.fetch_enabled:
        print("PKGSEARCH_BUCKET is not set; nothing to fetch.")
        sys.exit(1)

    try:
        path = asyncio.run(SnapshotFetcher(settings).fetch())
        print(f"Index snapshot available at: {path}")
    except FetchError as e:
        print(f"Error: {e}")
        sys.exit(1)
