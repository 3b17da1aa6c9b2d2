"""ImportService: what the import and progress dialogs talk to."""

import asyncio
import logging
from collections.abc import Iterable

from ddbimporter.importer.progress import ProgressTracker
from ddbimporter.importer.queue import (
    AlreadyRunningError,
    ContentSelection,
    EmptySelectionError,
    ImportQueue,
    ImportQueueProcessor,
    ProcessResult,
)
from ddbimporter.models import ContentReference, ContentSet
from ddbimporter.notifications import NotificationCenter
from ddbimporter.provider.auth import SessionValidator
from ddbimporter.provider.client import AuthError, FetchError
from ddbimporter.provider.content import ContentLister

logger = logging.getLogger(__name__)


class ImportService:
    def __init__(
        self,
        validator: SessionValidator,
        lister: ContentLister,
        processor: ImportQueueProcessor,
        notifier: NotificationCenter,
    ) -> None:
        self._validator = validator
        self._lister = lister
        self._processor = processor
        self._notifier = notifier
        self._tracker = ProgressTracker()
        self._processor.add_listener(self._tracker)
        self._queue: ImportQueue | None = None
        self._run: asyncio.Task[ProcessResult] | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def open_import(self) -> ContentSet:
        """Owned content for the selection dialog."""
        self._require_session()
        try:
            return await self._lister.list_content(self._validator.session)
        except FetchError:
            self._notifier.error("Failed to fetch content from D&D Beyond. See logs for details.")
            raise

    async def fetch_characters(self) -> list[ContentReference]:
        self._require_session()
        try:
            return await self._lister.list_characters(self._validator.session)
        except FetchError:
            self._notifier.error("Failed to fetch characters from D&D Beyond.")
            raise

    def submit(
        self,
        selections: Iterable[ContentSelection | tuple[str, str]],
        overwrite: bool,
    ) -> ImportQueue:
        """Queue the selection and drain it in the background.

        Rejects synchronously (EmptySelectionError, AlreadyRunningError)
        before any state changes.
        """
        try:
            queue = self._processor.enqueue(selections, overwrite)
        except EmptySelectionError:
            self._notifier.warn("No content selected for import.")
            raise
        try:
            run = self._processor.begin(queue)
        except AlreadyRunningError:
            self._notifier.warn("An import is already in progress.")
            raise

        self._queue = queue
        self._tracker.reset()
        self._run = asyncio.create_task(self._processor.drain(queue, run))
        self._run.add_done_callback(self._on_run_done)
        return queue

    def cancel(self) -> bool:
        if self._queue is None:
            return False
        return self._processor.cancel(self._queue)

    def status(self) -> ProcessResult | None:
        if self._queue is None:
            return None
        return self._processor.result(self._queue)

    @property
    def tracker(self) -> ProgressTracker:
        return self._tracker

    @property
    def is_running(self) -> bool:
        return self._processor.is_running

    async def wait(self) -> ProcessResult | None:
        """Await the background run, if one was started."""
        if self._run is None:
            return None
        return await self._run

    async def shutdown(self) -> None:
        if self._run is not None and not self._run.done():
            self._run.cancel()
            try:
                await self._run
            except asyncio.CancelledError:
                pass

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require_session(self) -> None:
        if not self._validator.is_authenticated:
            self._notifier.error(
                "You must authenticate with D&D Beyond first. "
                "Please enter your Cobalt cookie in the module settings."
            )
            raise AuthError("Not authenticated with D&D Beyond")

    @staticmethod
    def _on_run_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Import run crashed", exc_info=exc)
