from __future__ import annotations

import hashlib


class DigestBuffer:
    """Pending part bytes with a running SHA-1 over exactly those bytes.

    Every write goes to both sinks before returning, and :meth:`reset` clears
    both together, so :meth:`hexdigest` always describes :meth:`getvalue`.
    """

    def __init__(self) -> None:
        self._buf = bytearray()
        self._hash = hashlib.sha1()

    def __len__(self) -> int:
        return len(self._buf)

    def write(self, data: bytes | bytearray | memoryview) -> int:
        self._hash.update(data)
        self._buf += data
        return len(data)

    def hexdigest(self) -> str:
        return self._hash.hexdigest()

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def take(self) -> bytes:
        """Return the buffered bytes and start over with an empty buffer.

        The old bytearray is dropped before the caller gets the result, so
        only the returned copy stays alive.
        """
        data = bytes(self._buf)
        self.reset()
        return data

    def reset(self) -> None:
        self._buf = bytearray()
        self._hash = hashlib.sha1()
