"""Import queue: task lifecycle, sequential drain, progress and cancellation.

A run takes the tasks of one queue strictly in selection order and awaits
each handler before starting the next. A failing task is recorded and the
run moves on; the run itself never fails. Cancellation is cooperative: it
fails whatever is processing, leaves pending tasks alone, and the drain loop
stops at the next check. An in-flight handler call is never interrupted.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel

from ddbimporter.importer.registry import HandlerRegistry, UnknownContentKindError
from ddbimporter.models import CONTENT_KINDS, kind_label
from ddbimporter.notifications import NotificationCenter
from ddbimporter.settings.store import SettingsStore

logger = logging.getLogger(__name__)

TaskStatus = Literal["pending", "processing", "completed", "failed"]

CANCELLED_ERROR = "Import cancelled"

_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"processing"},
    "processing": {"completed", "failed"},
    "completed": set(),
    "failed": set(),
}


# ---------------------------------------------------------------------------
# Tasks and queues
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContentSelection:
    id: str
    kind: str


class ImportTask:
    """One selected item. id, kind and overwrite never change after creation."""

    def __init__(self, id: str, kind: str, overwrite: bool) -> None:
        self._id = id
        self._kind = kind
        self._overwrite = overwrite
        self._status: TaskStatus = "pending"
        self._error: str | None = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def overwrite(self) -> bool:
        return self._overwrite

    @property
    def status(self) -> TaskStatus:
        return self._status

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def label(self) -> str:
        return kind_label(self._kind)

    @property
    def is_terminal(self) -> bool:
        return self._status in ("completed", "failed")

    def start(self) -> None:
        self._transition("processing")

    def complete(self) -> None:
        self._transition("completed")

    def fail(self, error: str) -> None:
        self._transition("failed")
        self._error = error

    def _transition(self, new_status: TaskStatus) -> None:
        if new_status not in _TRANSITIONS[self._status]:
            raise InvalidTransitionError(self._id, self._status, new_status)
        self._status = new_status

    def snapshot(self) -> "TaskSnapshot":
        return TaskSnapshot(
            id=self._id,
            kind=self._kind,
            overwrite=self._overwrite,
            status=self._status,
            error=self._error,
        )

    def __repr__(self) -> str:
        return f"ImportTask(id={self._id!r}, kind={self._kind!r}, status={self._status!r})"


@dataclass
class ImportQueue:
    tasks: list[ImportTask]
    queue_id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    cancelled: bool = False

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[ImportTask]:
        return iter(self.tasks)

    def count(self, status: TaskStatus) -> int:
        return sum(1 for t in self.tasks if t.status == status)


# ---------------------------------------------------------------------------
# Progress and results
# ---------------------------------------------------------------------------


class TaskSnapshot(BaseModel):
    id: str
    kind: str
    overwrite: bool
    status: TaskStatus
    error: str | None = None


class ProgressEvent(BaseModel):
    queue_id: str
    percent: int  # 0..100, what the progress bar shows
    fraction: float  # (completed + failed) / total
    total: int
    completed: int
    failed: int
    message: str
    task_id: str | None = None
    kind: str | None = None
    status: TaskStatus | None = None


class ProcessResult(BaseModel):
    queue_id: str
    tasks: list[TaskSnapshot]
    total: int
    completed: int
    failed: int
    pending: int
    cancelled: bool


ProgressCallback = Callable[[ProgressEvent], Awaitable[None] | None]


# ---------------------------------------------------------------------------
# Run guard
# ---------------------------------------------------------------------------


class ImportRun:
    """One begin() of a queue.

    Cancellation and guard ownership belong to the run, not the queue: a
    queue restarted after a cancel gets a new run, and the old drain keeps
    seeing its own run as cancelled.
    """

    def __init__(self, queue: ImportQueue) -> None:
        self.run_id = str(uuid4())
        self.queue = queue
        self.cancelled = False
        self.draining = False

    def __repr__(self) -> str:
        return f"ImportRun(run_id={self.run_id!r}, queue_id={self.queue.queue_id!r})"


class RunGuard:
    """The running flag. Owned by exactly one run while an import is active.

    `dispatch` serializes handler calls across runs: a run started right after
    a cancel waits for the cancelled run's in-flight handler to return.
    """

    def __init__(self) -> None:
        self._current: ImportRun | None = None
        self.dispatch = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._current is not None

    @property
    def current(self) -> ImportRun | None:
        return self._current

    def holds(self, queue: ImportQueue) -> bool:
        return self._current is not None and self._current.queue is queue

    def acquire(self, queue: ImportQueue) -> ImportRun:
        if self._current is not None:
            raise AlreadyRunningError()
        if not self.dispatch.locked():
            # a fresh lock per quiet period keeps it bound to the current loop
            self.dispatch = asyncio.Lock()
        self._current = ImportRun(queue)
        return self._current

    def release(self, run: ImportRun) -> bool:
        """Clear the flag if `run` owns it. Returns whether it did."""
        if self._current is run:
            self._current = None
            return True
        return False


# Shared by every processor that is not handed its own guard: one import at a
# time across the whole process.
PROCESS_GUARD = RunGuard()


# ---------------------------------------------------------------------------
# Processor
# ---------------------------------------------------------------------------


class ImportQueueProcessor:
    """Builds queues from selections and drains them through the handlers."""

    def __init__(
        self,
        registry: HandlerRegistry,
        *,
        settings: SettingsStore | None = None,
        notifier: NotificationCenter | None = None,
        guard: RunGuard | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings
        self._notifier = notifier or NotificationCenter()
        self._guard = guard or PROCESS_GUARD
        self._listeners: list[ProgressCallback] = []
        self._background: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._guard.running

    def add_listener(self, callback: ProgressCallback) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: ProgressCallback) -> None:
        self._listeners.remove(callback)

    def enqueue(
        self,
        selections: Iterable[ContentSelection | tuple[str, str]],
        overwrite: bool,
    ) -> ImportQueue:
        """One pending task per selection, in selection order."""
        normalized = [
            s if isinstance(s, ContentSelection) else ContentSelection(str(s[0]), s[1])
            for s in selections
        ]
        if not normalized:
            raise EmptySelectionError()
        for selection in normalized:
            if selection.kind not in CONTENT_KINDS:
                raise UnknownContentKindError(selection.kind)
        return ImportQueue(
            tasks=[ImportTask(s.id, s.kind, overwrite) for s in normalized]
        )

    async def start(self, queue: ImportQueue) -> ProcessResult:
        """Claim the running flag and drain `queue`."""
        self.begin(queue)
        return await self.drain(queue)

    def begin(self, queue: ImportQueue) -> ImportRun:
        """Claim the running flag. Raises AlreadyRunningError, touching nothing."""
        run = self._guard.acquire(queue)
        queue.cancelled = False
        logger.info(
            "Import %s started with %d tasks (run %s)", queue.queue_id, len(queue), run.run_id
        )
        return run

    async def drain(self, queue: ImportQueue, run: ImportRun | None = None) -> ProcessResult:
        """Process every pending task in order. Requires begin(), once per run.

        Pass the run begin() returned when draining later, from a task: the
        run may have been cancelled in between.
        """
        run = run or self._guard.current
        if run is None or run.queue is not queue:
            raise RuntimeError("drain() called without begin()")
        if run.draining:
            raise RuntimeError("run is already being drained")
        run.draining = True

        try:
            for task in queue.tasks:
                if run.cancelled:
                    break
                if task.status != "pending":
                    continue
                await self._process(run, task)
        finally:
            # also covers task cancellation (CancelledError) mid-run
            released = self._guard.release(run)

        if run.cancelled:
            logger.info("Import %s run %s stopped after cancellation", queue.queue_id, run.run_id)
            return self.result(queue, cancelled=True)

        if released:
            if self._settings is not None:
                await self._settings.set("lastImport", datetime.now(UTC).isoformat())
            await self._emit(self.snapshot(queue, "Import completed!", percent=100))
            self._notifier.info(
                f"Import completed: {queue.count('completed')} imported, "
                f"{queue.count('failed')} failed."
            )
        logger.info(
            "Import %s finished: %d completed, %d failed",
            queue.queue_id, queue.count("completed"), queue.count("failed"),
        )
        return self.result(queue)

    def cancel(self, queue: ImportQueue | None = None) -> bool:
        """Cancel the run of `queue` (default: the current one).

        No-op returning False if that queue is not running.
        """
        run = self._guard.current
        if run is None or (queue is not None and run.queue is not queue):
            return False
        queue = run.queue

        run.cancelled = True
        queue.cancelled = True
        for task in queue.tasks:
            if task.status == "processing":
                task.fail(CANCELLED_ERROR)
        self._guard.release(run)

        self._notifier.info("Import cancelled.")
        self._emit_nowait(self.snapshot(queue, "Import cancelled."))
        return True

    def snapshot(
        self,
        queue: ImportQueue,
        message: str = "",
        *,
        task: ImportTask | None = None,
        percent: int | None = None,
    ) -> ProgressEvent:
        """Progress figures for `queue` as of now."""
        total = len(queue)
        completed = queue.count("completed")
        failed = queue.count("failed")
        done = completed + failed
        return ProgressEvent(
            queue_id=queue.queue_id,
            percent=percent if percent is not None else (done * 100 // total if total else 100),
            fraction=done / total if total else 1.0,
            total=total,
            completed=completed,
            failed=failed,
            message=message,
            task_id=task.id if task else None,
            kind=task.kind if task else None,
            status=task.status if task else None,
        )

    @staticmethod
    def result(queue: ImportQueue, *, cancelled: bool | None = None) -> ProcessResult:
        return ProcessResult(
            queue_id=queue.queue_id,
            tasks=[t.snapshot() for t in queue.tasks],
            total=len(queue),
            completed=queue.count("completed"),
            failed=queue.count("failed"),
            pending=queue.count("pending"),
            cancelled=queue.cancelled if cancelled is None else cancelled,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _process(self, run: ImportRun, task: ImportTask) -> None:
        queue = run.queue
        task.start()
        await self._emit(
            self.snapshot(queue, f"Importing {task.label} (ID: {task.id})...", task=task)
        )
        if run.cancelled:
            return

        try:
            async with self._guard.dispatch:
                if run.cancelled:
                    return
                handler = self._registry.get(task.kind)
                await handler.import_content(task.id, task.overwrite)
        except Exception as e:
            if task.is_terminal:
                logger.info("%s %s finished after cancellation: %s", task.label, task.id, e)
                return
            logger.error("Error importing %s (ID: %s): %s", task.kind, task.id, e)
            task.fail(str(e) or type(e).__name__)
            await self._emit(self.snapshot(
                queue,
                f"Failed to import {task.label} (ID: {task.id}): {task.error}",
                task=task,
            ))
            return

        if task.is_terminal:
            logger.info("%s %s finished after cancellation", task.label, task.id)
            return
        task.complete()
        await self._emit(self.snapshot(
            queue, f"Successfully imported {task.label} (ID: {task.id})", task=task
        ))

    async def _emit(self, event: ProgressEvent) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Progress listener failed")

    def _emit_nowait(self, event: ProgressEvent) -> None:
        """Deliver from synchronous code; async listeners run as tasks."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for listener in list(self._listeners):
            try:
                result = listener(event)
            except Exception:
                logger.exception("Progress listener failed")
                continue
            if not inspect.isawaitable(result):
                continue
            if loop is None:
                logger.warning("No running event loop; dropping async progress listener")
                if inspect.iscoroutine(result):
                    result.close()
                continue
            background = asyncio.ensure_future(result)
            self._background.add(background)
            background.add_done_callback(self._background.discard)


class EmptySelectionError(Exception):
    def __init__(self) -> None:
        super().__init__("No content selected for import")


class AlreadyRunningError(Exception):
    def __init__(self) -> None:
        super().__init__("An import is already in progress")


class InvalidTransitionError(Exception):
    def __init__(self, task_id: str, current: str, requested: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id}: cannot go from {current} to {requested}")
