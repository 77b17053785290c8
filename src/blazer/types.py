from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(slots=True)
class FileInfo:
    file_id: str
    name: str
    bucket_id: str
    size: int
    sha1: str | None
    content_type: str
    info: dict[str, str] = field(default_factory=dict)
    action: str = "upload"
    upload_timestamp: int | None = None


@dataclass(slots=True)
class PartInfo:
    file_id: str
    part_number: int
    size: int
    sha1: str


@dataclass(slots=True)
class WriterStatus:
    bucket: str
    name: str
    state: str
    parts_sealed: int
    parts_uploaded: int
    retries: int
    buffered: int
    attempts: dict[int, int] = field(default_factory=dict)


def build_file_info(raw: dict[str, Any]) -> FileInfo:
    sha1 = raw.get("contentSha1")
    return FileInfo(
        file_id=raw["fileId"],
        name=raw["fileName"],
        bucket_id=raw.get("bucketId", ""),
        size=int(raw.get("contentLength") or 0),
        sha1=None if sha1 in (None, "none") else sha1,
        content_type=raw.get("contentType", ""),
        info=dict(raw.get("fileInfo") or {}),
        action=raw.get("action", "upload"),
        upload_timestamp=raw.get("uploadTimestamp"),
    )


def build_part_info(raw: dict[str, Any]) -> PartInfo:
    return PartInfo(
        file_id=raw["fileId"],
        part_number=int(raw["partNumber"]),
        size=int(raw["contentLength"]),
        sha1=raw["contentSha1"],
    )


# The subset of the remote API the upload pipeline depends on.


class UploadEndpoint(Protocol):
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
    ) -> Any: ...


class PartEndpoint(Protocol):
    def upload_part(
        self,
        data: bytes,
        sha1: str,
        size: int,
        part_number: int,
        *,
        cancel: threading.Event | None = None,
    ) -> Any: ...


class LargeFileSession(Protocol):
    def get_upload_part_url(self, *, cancel: threading.Event | None = None) -> PartEndpoint: ...

    def finish_large_file(self, *, cancel: threading.Event | None = None) -> Any: ...


class UploadTarget(Protocol):
    name: str

    def get_upload_url(self, *, cancel: threading.Event | None = None) -> UploadEndpoint: ...

    def start_large_file(
        self,
        name: str,
        content_type: str,
        info: dict[str, str],
        *,
        cancel: threading.Event | None = None,
    ) -> LargeFileSession: ...
