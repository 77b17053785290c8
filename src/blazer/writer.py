"""Streaming writer that picks between simple and large-file uploads.

Bytes are buffered up to the part size. If the object never grows past it,
``close`` sends the whole thing in one request. The first time it does, the
writer starts a large file, launches its upload workers and from then on
hands every full buffer to them as a numbered part.
"""

from __future__ import annotations

import logging
import threading
from types import TracebackType
from typing import Any

from .buffer import DigestBuffer
from .errors import UploadCancelledError, WriterClosedError
from .pool import Chunk, Handoff, WorkerPool
from .types import LargeFileSession, UploadTarget, WriterStatus
from .utils import DEFAULT_CONTENT_TYPE, MAX_PART_SIZE, get_total_retries

logger = logging.getLogger(__name__)


class Writer:
    """Writes data into a B2 bucket.

    It switches to the large file API once the data exceeds ``chunk_size``
    (1e8 bytes by default), so each writer may hold a full part in memory,
    plus one more per upload worker.

    Calls on a single writer must not be made from several threads at once.
    """

    def __init__(
        self,
        bucket: UploadTarget,
        name: str,
        content_type: str = DEFAULT_CONTENT_TYPE,
        info: dict[str, str] | None = None,
        *,
        concurrent_uploads: int = 1,
        total_retries: int | None = None,
        cancel: threading.Event | None = None,
        chunk_size: int = MAX_PART_SIZE,
    ) -> None:
        if not 0 < chunk_size <= MAX_PART_SIZE:
            raise ValueError(f"chunk_size must be between 1 and {MAX_PART_SIZE}")
        # Number of threads sending parts concurrently. Each hits its own
        # upload endpoint. Values below 1 are treated as 1.
        self.concurrent_uploads = concurrent_uploads
        # Times a failed part is retried before the upload fails.
        self.total_retries = get_total_retries() if total_retries is None else total_retries

        self.name = name
        self.content_type = content_type
        self.info = dict(info or {})
        self._bucket = bucket
        self._chunk_size = chunk_size
        self._cancel = cancel

        self._buffer = DigestBuffer()
        self._next_id = 1
        self._error: BaseException | None = None

        self._start_lock = threading.Lock()
        self._started = False
        self._done_lock = threading.Lock()
        self._done = False
        self._aborted = False

        self._file: LargeFileSession | None = None
        self._handoff: Handoff | None = None
        self._pool: WorkerPool | None = None

    def __repr__(self) -> str:
        return f"Writer(bucket={self.bucket_name!r}, name={self.name!r})"

    @property
    def bucket_name(self) -> str:
        return getattr(self._bucket, "name", "")

    @property
    def key(self) -> str:
        return f"{self.bucket_name}/{self.name}"

    @property
    def closed(self) -> bool:
        return self._done

    @property
    def worker_count(self) -> int:
        return len(self._pool) if self._pool is not None else 0

    def write(self, data: bytes | bytearray | memoryview) -> int:
        if self._done:
            raise WriterClosedError(self.name)
        if self._error is None and self._pool is not None and self._pool.error is not None:
            self._error = self._pool.error
        if self._error is not None:
            raise self._error
        view = memoryview(data).cast("B")
        total = len(view)
        offset = 0
        while total - offset > self._chunk_size - len(self._buffer):
            room = self._chunk_size - len(self._buffer)
            self._buffer.write(view[offset : offset + room])
            offset += room
            self._send_chunk()
        self._buffer.write(view[offset:])
        return total

    def _start_large_file(self) -> None:
        with self._start_lock:
            if self._started:
                return
            self._started = True
        workers = max(1, self.concurrent_uploads)
        logger.debug("%s: switching to large file upload with %d workers", self.key, workers)
        self._file = self._bucket.start_large_file(
            self.name, self.content_type, self.info, cancel=self._cancel
        )
        endpoints = [
            self._file.get_upload_part_url(cancel=self._cancel) for _ in range(workers)
        ]
        self._handoff = Handoff(self._cancel)
        self._pool = WorkerPool(
            endpoints,
            self._handoff,
            total_retries=self.total_retries,
            cancel=self._cancel,
            name=self.key,
        )
        self._pool.start()

    def _send_chunk(self) -> None:
        try:
            self._start_large_file()
            assert self._handoff is not None
            size, sha1 = len(self._buffer), self._buffer.hexdigest()
            chunk = Chunk(id=self._next_id, size=size, sha1=sha1, data=self._buffer.take())
            self._handoff.put(chunk)
        except UploadCancelledError as exc:
            failure = self._pool.error if self._pool is not None else None
            self._error = failure or exc
            raise self._error
        except Exception as exc:
            self._error = exc
            raise
        self._next_id += 1

    def _simple_write_file(self) -> Any:
        endpoint = self._bucket.get_upload_url(cancel=self._cancel)
        size, sha1 = len(self._buffer), self._buffer.hexdigest()
        return endpoint.upload_file(
            self._buffer.take(),
            size,
            self.name,
            self.content_type,
            sha1,
            self.info,
            cancel=self._cancel,
        )

    def _finish(self) -> Any:
        if self._error is not None:
            raise self._error
        if not self._started:
            return self._simple_write_file()
        if len(self._buffer) > 0:
            self._send_chunk()
        assert self._handoff is not None and self._pool is not None and self._file is not None
        self._handoff.close()
        self._pool.wait()
        if self._pool.error is not None:
            raise self._pool.error
        logger.debug("%s: all %d parts acknowledged", self.key, self._next_id - 1)
        return self._file.finish_large_file(cancel=self._cancel)

    def close(self) -> Any:
        """Finish the upload and return the remote file info.

        Runs once; later calls do nothing and return None. Parts that were
        already uploaded are left in place if this fails.
        """
        with self._done_lock:
            if self._done:
                return None
            self._done = True
        try:
            return self._finish()
        except BaseException:
            self._release()
            raise

    def abort(self) -> None:
        """Stop without finishing the upload, releasing the upload workers."""
        with self._done_lock:
            self._done = True
            self._aborted = True
        self._release()

    def _release(self) -> None:
        if self._handoff is not None:
            self._handoff.abort()

    def status(self) -> WriterStatus:
        if self._error is not None or (self._pool is not None and self._pool.error):
            state = "failed"
        elif self._aborted:
            state = "aborted"
        elif self._done:
            state = "closed"
        elif self._started:
            state = "uploading"
        else:
            state = "buffering"
        pool = self._pool
        return WriterStatus(
            bucket=self.bucket_name,
            name=self.name,
            state=state,
            parts_sealed=self._next_id - 1,
            parts_uploaded=pool.uploaded if pool is not None else 0,
            retries=pool.retries if pool is not None else 0,
            buffered=len(self._buffer),
            attempts=pool.attempts() if pool is not None else {},
        )

    def __enter__(self) -> Writer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.abort()
            return
        self.close()
