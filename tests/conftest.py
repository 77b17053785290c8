"""Shared fixtures for all tests."""

from __future__ import annotations

import hashlib
import threading
from collections import Counter
from collections.abc import Callable, Generator
from typing import Any

import pytest

from blazer.errors import B2ServiceUnavailable
from blazer.utils import check_cancelled


class FakeBucket:
    """In-memory stand-in for the B2 bucket API used by the writer.

    ``fail_parts`` maps a part number to how many times its upload should
    fail before succeeding.
    """

    def __init__(self, name: str = "test-bucket", *, fail_parts: dict[int, int] | None = None) -> None:
        self.name = name
        self.lock = threading.Lock()
        self.calls: list[str] = []
        self.whole_uploads: list[dict[str, Any]] = []
        self.parts: dict[int, bytes] = {}
        self.part_tries: Counter[int] = Counter()
        self.first_attempt_order: list[int] = []
        self.part_urls = 0
        self.parts_at_finish: list[int] | None = None
        self.fail_parts = dict(fail_parts or {})
        self.start_error: Exception | None = None
        self.part_url_error: Exception | None = None
        self.part_started: threading.Event = threading.Event()
        self.part_gate: threading.Event | None = None
        self.large_file: dict[str, Any] | None = None

    def record(self, call: str) -> None:
        with self.lock:
            self.calls.append(call)

    def count(self, call: str) -> int:
        with self.lock:
            return self.calls.count(call)

    def assembled(self) -> bytes:
        with self.lock:
            return b"".join(self.parts[number] for number in sorted(self.parts))

    def get_upload_url(self, *, cancel: threading.Event | None = None) -> FakeUploadURL:
        check_cancelled(cancel)
        self.record("get_upload_url")
        return FakeUploadURL(self)

    def start_large_file(
        self,
        name: str,
        content_type: str,
        info: dict[str, str],
        *,
        cancel: threading.Event | None = None,
    ) -> FakeLargeFile:
        check_cancelled(cancel)
        self.record("start_large_file")
        if self.start_error is not None:
            raise self.start_error
        self.large_file = {"name": name, "content_type": content_type, "info": dict(info)}
        return FakeLargeFile(self)


class FakeUploadURL:
    def __init__(self, bucket: FakeBucket) -> None:
        self._bucket = bucket

    def upload_file(
        self,
        data: bytes,
        size: int,
        name: str,
        content_type: str,
        sha1: str,
        info: dict[str, str],
        *,
        cancel: threading.Event | None = None,
    ) -> dict[str, Any]:
        check_cancelled(cancel)
        self._bucket.record("upload_file")
        with self._bucket.lock:
            self._bucket.whole_uploads.append(
                {
                    "data": data,
                    "size": size,
                    "name": name,
                    "content_type": content_type,
                    "sha1": sha1,
                    "info": dict(info),
                }
            )
        return {"fileName": name, "contentSha1": sha1, "contentLength": size}


class FakeLargeFile:
    def __init__(self, bucket: FakeBucket) -> None:
        self._bucket = bucket

    def get_upload_part_url(self, *, cancel: threading.Event | None = None) -> FakePartURL:
        check_cancelled(cancel)
        self._bucket.record("get_upload_part_url")
        if self._bucket.part_url_error is not None:
            raise self._bucket.part_url_error
        with self._bucket.lock:
            self._bucket.part_urls += 1
        return FakePartURL(self._bucket)

    def finish_large_file(self, *, cancel: threading.Event | None = None) -> dict[str, Any]:
        check_cancelled(cancel)
        self._bucket.record("finish_large_file")
        with self._bucket.lock:
            self._bucket.parts_at_finish = sorted(self._bucket.parts)
            return {"parts": list(self._bucket.parts_at_finish)}


class FakePartURL:
    def __init__(self, bucket: FakeBucket) -> None:
        self._bucket = bucket

    def upload_part(
        self,
        data: bytes,
        sha1: str,
        size: int,
        part_number: int,
        *,
        cancel: threading.Event | None = None,
    ) -> dict[str, Any]:
        bucket = self._bucket
        bucket.part_started.set()
        if bucket.part_gate is not None:
            bucket.part_gate.wait(5)
        check_cancelled(cancel)
        bucket.record("upload_part")
        with bucket.lock:
            bucket.part_tries[part_number] += 1
            if bucket.part_tries[part_number] == 1:
                bucket.first_attempt_order.append(part_number)
            if bucket.fail_parts.get(part_number, 0) > 0:
                bucket.fail_parts[part_number] -= 1
                raise B2ServiceUnavailable(503, "service_unavailable", "try again")
            assert size == len(data)
            assert sha1 == hashlib.sha1(data).hexdigest()
            bucket.parts[part_number] = data
        return {"partNumber": part_number, "contentSha1": sha1}


@pytest.fixture
def make_bucket() -> Callable[..., FakeBucket]:
    """Factory for fake buckets."""
    return FakeBucket


@pytest.fixture
def fake_bucket() -> FakeBucket:
    return FakeBucket()


@pytest.fixture
def mock_env_clear(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear all B2-related environment variables for testing.

    This ensures tests don't accidentally use real credentials from the environment.
    """
    env_vars_to_clear = [
        "B2_ACCOUNT_ID",
        "B2_APPLICATION_KEY",
        "B2_API_URL",
        "B2_TOTAL_RETRIES",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def mock_account_id() -> str:
    return "000account1234"


@pytest.fixture
def mock_application_key() -> str:
    return "K000test_application_key"
