from __future__ import annotations

import threading
from types import TracebackType
from typing import TYPE_CHECKING, Any

from . import base
from ._http import BaseTransport, HTTPConfig, require_credentials, resolve_base_url
from .errors import NoSuchBucketError
from .registry import WriterRegistry
from .types import WriterStatus
from .utils import DEFAULT_CONTENT_TYPE
from .writer import Writer

if TYPE_CHECKING:
    import fastapi
    import uvicorn


class Client:
    """A Backblaze B2 client."""

    def __init__(self, b2: base.B2) -> None:
        self._b2 = b2
        self._registry = WriterRegistry()
        self._stats_server: uvicorn.Server | None = None

    @classmethod
    def authorize(
        cls,
        account_id: str | None = None,
        application_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: BaseTransport | None = None,
        cancel: threading.Event | None = None,
    ) -> Client:
        """Authorize an account and return a client for it.

        Credentials fall back to the B2_ACCOUNT_ID and B2_APPLICATION_KEY
        environment variables.
        """
        account_id, application_key = require_credentials(account_id, application_key)
        config = HTTPConfig(base_url=resolve_base_url(base_url))
        if timeout is not None:
            config.timeout = timeout
        b2 = base.authorize_account(
            account_id,
            application_key,
            config=config,
            transport=transport,
            cancel=cancel,
        )
        return cls(b2)

    @property
    def registry(self) -> WriterRegistry:
        return self._registry

    def bucket(self, name: str, *, cancel: threading.Event | None = None) -> Bucket:
        """Return the named bucket, if it exists."""
        for bucket in self._b2.list_buckets(cancel=cancel):
            if bucket.name == name:
                return Bucket(self, bucket)
        raise NoSuchBucketError(name)

    def add_writer(self, writer: Writer) -> None:
        self._registry.add(writer)

    def remove_writer(self, writer: Writer) -> None:
        self._registry.remove(writer)

    def writers(self) -> list[WriterStatus]:
        return self._registry.snapshot()

    def status_app(self) -> fastapi.FastAPI:
        from .monitor import create_status_app

        return create_status_app(self._registry)

    def show_stats(self, host: str = "127.0.0.1", port: int = 8080) -> None:
        """Serve the status page on ``host:port`` in the background."""
        from .monitor import serve

        if self._stats_server is not None:
            return
        self._stats_server = serve(self.status_app(), host, port)

    def close(self) -> None:
        if self._stats_server is not None:
            self._stats_server.should_exit = True
            self._stats_server = None
        self._b2.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class Bucket:
    """A reference to a B2 bucket."""

    def __init__(self, client: Client, bucket: base.Bucket) -> None:
        self._client = client
        self._bucket = bucket

    def __repr__(self) -> str:
        return f"Bucket(name={self.name!r})"

    @property
    def name(self) -> str:
        return self._bucket.name

    @property
    def id(self) -> str:
        return self._bucket.id

    def new_writer(
        self,
        name: str,
        content_type: str = DEFAULT_CONTENT_TYPE,
        info: dict[str, str] | None = None,
        **options: Any,
    ) -> Writer:
        """Return a new writer for the given file.

        ``options`` are passed on to :class:`~blazer.writer.Writer`:
        ``concurrent_uploads``, ``total_retries``, ``cancel`` and
        ``chunk_size``.
        """
        return Writer(self._bucket, name, content_type, info, **options)
