"""Thin pass-through to the B2 native API.

Every call here is a single request; retrying, splitting and hashing live in
the upload pipeline (:mod:`blazer.writer`). Objects hold on to the
authorization they were issued with and never refresh it.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import httpx

from ._http import (
    BaseTransport,
    BlockingTransport,
    BytesBody,
    HTTPConfig,
    JSONBody,
    RequestBody,
    resolve_base_url,
)
from .errors import (
    B2APIError,
    B2AuthError,
    B2NotFoundError,
    B2RateLimited,
    B2ServiceUnavailable,
    B2UnknownError,
)
from .types import FileInfo, PartInfo, build_file_info, build_part_info
from .utils import (
    API_PATH,
    check_cancelled,
    create_upload_headers,
    parse_retry_after,
)

logger = logging.getLogger(__name__)

AUTH_ERROR_CODES = {"bad_auth_token", "expired_auth_token", "unauthorized"}


def map_b2_error(response: httpx.Response) -> B2APIError:
    try:
        data = response.json()
    except Exception:
        data = {}
    if not isinstance(data, dict):
        data = {}

    status = int(data.get("status") or response.status_code)
    code = data.get("code") or "unknown"
    message = data.get("message") or ""

    if status == 401 or code in AUTH_ERROR_CODES:
        return B2AuthError(status, code, message)
    if status == 404 or code == "not_found":
        return B2NotFoundError(status, code, message)
    if status == 429:
        retry_after = parse_retry_after(response.headers.get("retry-after"))
        return B2RateLimited(status, code, message, retry_after=retry_after)
    if status == 503:
        return B2ServiceUnavailable(status, code, message)
    return B2APIError(status, code, message)


def decode_b2_response(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except Exception as exc:
        raise B2UnknownError("invalid JSON in response") from exc
    if not isinstance(data, dict):
        raise B2UnknownError("unexpected response body")
    return data


class RequestClient:
    def __init__(self, transport: BaseTransport) -> None:
        self._transport = transport

    @property
    def transport(self) -> BaseTransport:
        return self._transport

    def request(
        self,
        method: str,
        url: str,
        *,
        authorization: str | None = None,
        auth: tuple[str, str] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        cancel: threading.Event | None = None,
    ) -> dict[str, Any]:
        check_cancelled(cancel)
        logger.debug("%s %s", method, url)
        try:
            resp = self._transport.send(
                method,
                url,
                body=body,
                headers=headers,
                authorization=authorization,
                auth=auth,
            )
        except httpx.HTTPError as exc:
            raise B2UnknownError(str(exc) or type(exc).__name__) from exc

        if 200 <= resp.status_code < 300:
            return decode_b2_response(resp)
        error = map_b2_error(resp)
        logger.debug("%s %s failed: %s", method, url, error)
        raise error

    def close(self) -> None:
        self._transport.close()


def authorize_account(
    account_id: str,
    application_key: str,
    *,
    config: HTTPConfig | None = None,
    transport: BaseTransport | None = None,
    cancel: threading.Event | None = None,
) -> B2:
    """Exchange an account id and application key for an API session."""
    config = config or HTTPConfig(base_url=resolve_base_url())
    requests = RequestClient(transport or BlockingTransport(config))
    raw = requests.request(
        "GET",
        f"{API_PATH}/b2_authorize_account",
        auth=(account_id, application_key),
        cancel=cancel,
    )
    return B2(
        requests,
        account_id=raw["accountId"],
        auth_token=raw["authorizationToken"],
        api_url=raw["apiUrl"],
        download_url=raw.get("downloadUrl", ""),
        recommended_part_size=raw.get("recommendedPartSize"),
        minimum_part_size=raw.get("absoluteMinimumPartSize"),
    )


class B2:
    """An authorized B2 account."""

    def __init__(
        self,
        requests: RequestClient,
        *,
        account_id: str,
        auth_token: str,
        api_url: str,
        download_url: str = "",
        recommended_part_size: int | None = None,
        minimum_part_size: int | None = None,
    ) -> None:
        self._requests = requests
        self.account_id = account_id
        self.auth_token = auth_token
        self.api_url = api_url.rstrip("/")
        self.download_url = download_url
        self.recommended_part_size = recommended_part_size
        self.minimum_part_size = minimum_part_size

    def call(
        self,
        operation: str,
        payload: dict[str, Any],
        *,
        cancel: threading.Event | None = None,
    ) -> dict[str, Any]:
        return self._requests.request(
            "POST",
            f"{self.api_url}{API_PATH}/{operation}",
            authorization=self.auth_token,
            body=JSONBody(payload),
            cancel=cancel,
        )

    def upload(
        self,
        url: str,
        token: str,
        data: bytes,
        headers: dict[str, str],
        *,
        content_type: str = "application/octet-stream",
        cancel: threading.Event | None = None,
    ) -> dict[str, Any]:
        return self._requests.request(
            "POST",
            url,
            authorization=token,
            body=BytesBody(data, content_type=content_type),
            headers=headers,
            cancel=cancel,
        )

    def list_buckets(self, *, cancel: threading.Event | None = None) -> list[Bucket]:
        raw = self.call("b2_list_buckets", {"accountId": self.account_id}, cancel=cancel)
        return [
            Bucket(
                self,
                bucket_id=item["bucketId"],
                name=item["bucketName"],
                bucket_type=item.get("bucketType", ""),
            )
            for item in raw.get("buckets", [])
        ]

    def close(self) -> None:
        self._requests.close()


class Bucket:
    def __init__(self, b2: B2, *, bucket_id: str, name: str, bucket_type: str = "") -> None:
        self._b2 = b2
        self.id = bucket_id
        self.name = name
        self.type = bucket_type

    def __repr__(self) -> str:
        return f"Bucket(name={self.name!r}, id={self.id!r})"

    def get_upload_url(self, *, cancel: threading.Event | None = None) -> UploadURL:
        raw = self._b2.call("b2_get_upload_url", {"bucketId": self.id}, cancel=cancel)
        return UploadURL(self._b2, url=raw["uploadUrl"], token=raw["authorizationToken"])

    def start_large_file(
        self,
        name: str,
        content_type: str,
        info: dict[str, str],
        *,
        cancel: threading.Event | None = None,
    ) -> LargeFile:
        raw = self._b2.call(
            "b2_start_large_file",
            {
                "bucketId": self.id,
                "fileName": name,
                "contentType": content_type,
                "fileInfo": dict(info),
            },
            cancel=cancel,
        )
        return LargeFile(self._b2, file_id=raw["fileId"], name=name)


class UploadURL:
    def __init__(self, b2: B2, *, url: str, token: str) -> None:
        self._b2 = b2
        self.url = url
        self.token = token

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
    ) -> FileInfo:
        headers = create_upload_headers(size=size, sha1=sha1, name=name, info=info)
        raw = self._b2.upload(
            self.url,
            self.token,
            data,
            headers,
            content_type=content_type,
            cancel=cancel,
        )
        return build_file_info(raw)


class LargeFile:
    """A started large file; remembers part hashes for the finish call."""

    def __init__(self, b2: B2, *, file_id: str, name: str) -> None:
        self._b2 = b2
        self.id = file_id
        self.name = name
        self._lock = threading.Lock()
        self._hashes: dict[int, str] = {}

    def record_part(self, part_number: int, sha1: str) -> None:
        with self._lock:
            self._hashes[part_number] = sha1

    def part_sha1s(self) -> list[str]:
        with self._lock:
            return [self._hashes[number] for number in sorted(self._hashes)]

    def get_upload_part_url(self, *, cancel: threading.Event | None = None) -> UploadPartURL:
        raw = self._b2.call("b2_get_upload_part_url", {"fileId": self.id}, cancel=cancel)
        return UploadPartURL(self, url=raw["uploadUrl"], token=raw["authorizationToken"])

    def finish_large_file(self, *, cancel: threading.Event | None = None) -> FileInfo:
        raw = self._b2.call(
            "b2_finish_large_file",
            {"fileId": self.id, "partSha1Array": self.part_sha1s()},
            cancel=cancel,
        )
        return build_file_info(raw)

    def upload(
        self,
        url: str,
        token: str,
        data: bytes,
        headers: dict[str, str],
        *,
        cancel: threading.Event | None = None,
    ) -> dict[str, Any]:
        return self._b2.upload(url, token, data, headers, cancel=cancel)


class UploadPartURL:
    def __init__(self, large_file: LargeFile, *, url: str, token: str) -> None:
        self._file = large_file
        self.url = url
        self.token = token

    def upload_part(
        self,
        data: bytes,
        sha1: str,
        size: int,
        part_number: int,
        *,
        cancel: threading.Event | None = None,
    ) -> PartInfo:
        headers = create_upload_headers(size=size, sha1=sha1, part_number=part_number)
        raw = self._file.upload(self.url, self.token, data, headers, cancel=cancel)
        self._file.record_part(part_number, sha1)
        return build_part_info(raw)


__all__ = [
    "map_b2_error",
    "decode_b2_response",
    "RequestClient",
    "authorize_account",
    "B2",
    "Bucket",
    "UploadURL",
    "LargeFile",
    "UploadPartURL",
]
