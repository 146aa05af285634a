"""
Lazy, process-wide initialization of the package index.

The first search fetches the snapshot (when a bucket is configured) and opens
it. Concurrent first requests share a single attempt. A failed attempt is not
remembered as final: the next request tries again.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool

from pkgsearch.core.config import Settings
from pkgsearch.domain.errors import FetchError, OpenError
from pkgsearch.domain.models import IndexState
from pkgsearch.services.snapshot_fetcher import SnapshotFetcher
from pkgsearch.storage.index_handle import IndexHandle

logger = logging.getLogger(__name__)


class IndexProvider:
    """
    Owns the IndexHandle and its lifecycle:

        uninitialized -> initializing -> ready
                                      -> failed -> (next request) initializing
    """

    def __init__(self, settings: Settings, fetcher: Optional[SnapshotFetcher] = None):
        self.settings = settings
        self.fetcher = fetcher or SnapshotFetcher(settings)
        self.state = IndexState.UNINITIALIZED
        self.last_error: Optional[str] = None
        self._handle: Optional[IndexHandle] = None
        self._lock = asyncio.Lock()

    async def get(self) -> IndexHandle:
        """
        Return the ready handle, initializing it first if needed.

        Raises:
            FetchError: the snapshot could not be downloaded.
            OpenError: the snapshot could not be opened.
        """
        if self.state is IndexState.READY and self._handle is not None:
            return self._handle

        async with self._lock:
            # Another request may have finished initialization while we waited.
            if self.state is IndexState.READY and self._handle is not None:
                return self._handle
            return await self._initialize()

    async def _initialize(self) -> IndexHandle:
        previous = self.state
        self.state = IndexState.INITIALIZING
        logger.info(f"Initializing package index (previous state: {previous.value})")

        try:
            if self.settings.fetch_enabled:
                await self.fetcher.fetch()
            else:
                logger.info("No bucket configured; using local snapshot as-is")
            handle = await run_in_threadpool(
                IndexHandle.open,
                self.settings.index_path,
                self.settings.lock_timeout_seconds,
            )
        except (FetchError, OpenError) as e:
            self.state = IndexState.FAILED
            self.last_error = e.reason
            logger.error(f"Package index initialization failed: {e.reason}")
            raise
        except Exception:
            self.state = IndexState.FAILED
            self.last_error = "unexpected initialization error"
            logger.error("Package index initialization failed unexpectedly", exc_info=True)
            raise

        self._handle = handle
        self.last_error = None
        self.state = IndexState.READY
        logger.info("Package index ready")
        return handle

    async def warm_up(self) -> None:
        """Initialize at startup; failures are logged and left for the next search to retry."""
        try:
            await self.get()
        except (FetchError, OpenError):
            logger.warning("Eager index initialization failed; will retry on first search")

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        self.state = IndexState.UNINITIALIZED
