from __future__ import annotations

import os
import threading
from typing import TypedDict
from urllib.parse import quote

from .errors import UploadCancelledError

# Objects and parts are capped at 1e8 bytes before a new part is sealed.
MAX_PART_SIZE = 100_000_000
DEFAULT_TOTAL_RETRIES = 10
DEFAULT_CONTENT_TYPE = "application/octet-stream"
API_PATH = "/b2api/v2"


def get_total_retries() -> int:
    retries = os.getenv("B2_TOTAL_RETRIES")
    try:
        return int(retries) if retries is not None else DEFAULT_TOTAL_RETRIES
    except Exception:
        return DEFAULT_TOTAL_RETRIES


def check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise UploadCancelledError()


def encode_file_name(name: str) -> str:
    # B2 wants UTF-8 percent-encoding with "/" left intact
    return quote(name, safe="/")


def parse_retry_after(value: str | None) -> int | None:
    if not value:
        return None
    try:
        return int(value)
    except Exception:
        return None


# TypedDict with real HTTP header keys. Use functional syntax to allow hyphens.
UploadHeaders = TypedDict(
    "UploadHeaders",
    {
        "x-bz-file-name": str,
        "x-bz-content-sha1": str,
        "x-bz-part-number": str,
        "content-length": str,
    },
    total=False,
)


def create_upload_headers(
    *,
    size: int,
    sha1: str,
    name: str | None = None,
    part_number: int | None = None,
    info: dict[str, str] | None = None,
) -> dict[str, str]:
    headers: UploadHeaders = {
        "content-length": str(size),
        "x-bz-content-sha1": sha1,
    }
    if name is not None:
        headers["x-bz-file-name"] = encode_file_name(name)
    if part_number is not None:
        headers["x-bz-part-number"] = str(part_number)
    result = dict(headers)
    for key, value in (info or {}).items():
        result[f"x-bz-info-{key}"] = quote(str(value), safe="")
    return result
