"""Progress tracker: what the progress dialog shows for the current run."""

from collections import deque

from ddbimporter.importer.queue import ProgressEvent


class ProgressTracker:
    """Keeps the latest event and a newest-first log of messages.

    Registered as a processor listener; reset() at the start of each run.
    """

    def __init__(self, max_log: int = 200) -> None:
        self._latest: ProgressEvent | None = None
        self._log: deque[str] = deque(maxlen=max_log)

    def __call__(self, event: ProgressEvent) -> None:
        self._latest = event
        if event.message:
            self._log.appendleft(event.message)

    @property
    def latest(self) -> ProgressEvent | None:
        return self._latest

    @property
    def log(self) -> list[str]:
        return list(self._log)

    def reset(self) -> None:
        self._latest = None
        self._log.clear()
        self._log.append("Preparing to import...")
