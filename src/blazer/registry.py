from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from .types import WriterStatus

if TYPE_CHECKING:
    from .writer import Writer


class WriterRegistry:
    """Writers currently in flight, keyed by ``bucket/name``.

    Only read by the status page; the upload pipeline never consults it.
    Two writers aimed at the same key are not prevented, the later ``add``
    simply replaces the earlier entry.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._writers: dict[str, Writer] | None = None

    def add(self, writer: Writer) -> None:
        with self._lock:
            if self._writers is None:
                self._writers = {}
            self._writers[writer.key] = writer

    def remove(self, writer: Writer) -> None:
        with self._lock:
            if self._writers is None:
                return
            self._writers.pop(writer.key, None)

    def get(self, key: str) -> Writer | None:
        with self._lock:
            if self._writers is None:
                return None
            return self._writers.get(key)

    def snapshot(self) -> list[WriterStatus]:
        with self._lock:
            writers = list((self._writers or {}).values())
        return [writer.status() for writer in writers]

    def __len__(self) -> int:
        with self._lock:
            return len(self._writers or {})

    def __contains__(self, writer: object) -> bool:
        key = getattr(writer, "key", None)
        with self._lock:
            return key is not None and key in (self._writers or {})
