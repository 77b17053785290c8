"""Upload workers for large files.

Sealed chunks travel from the writer to a fixed set of worker threads through
a :class:`Handoff`. Parts of one large file are addressed by number, so the
workers may finish them in any order.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field

from .errors import PartUploadError, UploadCancelledError
from .types import PartEndpoint

logger = logging.getLogger(__name__)

# How often blocked callers look at an external cancellation event.
CANCEL_POLL_INTERVAL = 0.05


@dataclass
class Chunk:
    id: int
    size: int
    sha1: str
    data: bytes = field(repr=False)
    attempt: int = 0


class Handoff:
    """Unbuffered rendezvous between one producer and many workers.

    :meth:`put` blocks until a worker has taken that chunk. Chunks pushed
    back with :meth:`requeue` are served before new ones and never block.
    """

    def __init__(self, cancel: threading.Event | None = None) -> None:
        self._cond = threading.Condition()
        self._offered: Chunk | None = None
        self._requeued: deque[Chunk] = deque()
        self._closed = False
        self._aborted = False
        self._cancel = cancel

    def _stopped(self) -> bool:
        return self._aborted or (self._cancel is not None and self._cancel.is_set())

    def put(self, chunk: Chunk) -> None:
        with self._cond:
            if self._closed:
                raise RuntimeError("put on closed handoff")
            self._offered = chunk
            self._cond.notify_all()
            while self._offered is chunk:
                if self._stopped():
                    self._offered = None
                    raise UploadCancelledError()
                self._cond.wait(CANCEL_POLL_INTERVAL)

    def requeue(self, chunk: Chunk) -> None:
        with self._cond:
            self._requeued.append(chunk)
            self._cond.notify_all()

    def get(self) -> Chunk | None:
        """Next chunk to upload, or None once closed and drained or stopped."""
        with self._cond:
            while True:
                if self._stopped():
                    return None
                if self._requeued:
                    return self._requeued.popleft()
                if self._offered is not None:
                    chunk, self._offered = self._offered, None
                    self._cond.notify_all()
                    return chunk
                if self._closed:
                    return None
                self._cond.wait(CANCEL_POLL_INTERVAL)

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def abort(self) -> None:
        with self._cond:
            self._aborted = True
            self._cond.notify_all()


class WorkerPool:
    """One thread per part endpoint, all draining the same handoff."""

    def __init__(
        self,
        endpoints: list[PartEndpoint],
        handoff: Handoff,
        *,
        total_retries: int,
        cancel: threading.Event | None = None,
        name: str = "",
    ) -> None:
        self._handoff = handoff
        self._total_retries = total_retries
        self._cancel = cancel
        self._name = name
        self._lock = threading.Lock()
        self._error: PartUploadError | None = None
        self._attempts: dict[int, int] = {}
        self._retries = 0
        self._threads = [
            threading.Thread(
                target=self._run,
                args=(endpoint,),
                name=f"blazer-upload-{i}",
                daemon=True,
            )
            for i, endpoint in enumerate(endpoints)
        ]

    def __len__(self) -> int:
        return len(self._threads)

    @property
    def error(self) -> PartUploadError | None:
        with self._lock:
            return self._error

    @property
    def uploaded(self) -> int:
        with self._lock:
            return len(self._attempts)

    @property
    def retries(self) -> int:
        with self._lock:
            return self._retries

    def attempts(self) -> dict[int, int]:
        """Failed attempts per acknowledged part number."""
        with self._lock:
            return dict(self._attempts)

    def start(self) -> None:
        logger.debug("starting %d upload workers for %s", len(self._threads), self._name)
        for thread in self._threads:
            thread.start()

    def wait(self) -> None:
        for thread in self._threads:
            thread.join()

    def _fail(self, error: PartUploadError) -> None:
        with self._lock:
            if self._error is None:
                self._error = error
        self._handoff.abort()

    def _run(self, endpoint: PartEndpoint) -> None:
        while True:
            chunk = self._handoff.get()
            if chunk is None:
                return
            try:
                endpoint.upload_part(
                    chunk.data, chunk.sha1, chunk.size, chunk.id, cancel=self._cancel
                )
            except UploadCancelledError:
                return
            except Exception as exc:
                chunk.attempt += 1
                if chunk.attempt > self._total_retries:
                    logger.error(
                        "%s: giving up on part %d after %d attempts: %s",
                        self._name,
                        chunk.id,
                        chunk.attempt,
                        exc,
                    )
                    error = PartUploadError(chunk.id, chunk.attempt)
                    error.__cause__ = exc
                    self._fail(error)
                    return
                logger.warning(
                    "%s: part %d failed (attempt %d), requeuing: %s",
                    self._name,
                    chunk.id,
                    chunk.attempt,
                    exc,
                )
                with self._lock:
                    self._retries += 1
                self._handoff.requeue(chunk)
                continue
            with self._lock:
                self._attempts[chunk.id] = chunk.attempt
