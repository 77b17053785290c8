"""Fixtures for integration tests using respx mocking."""

from collections.abc import Callable

import pytest

API_BASE = "https://api001.backblazeb2.com"


@pytest.fixture
def mock_authorize_response() -> dict:
    """Mock response for b2_authorize_account."""
    return {
        "accountId": "000account1234",
        "authorizationToken": "4_auth_token",
        "apiUrl": API_BASE,
        "downloadUrl": "https://f001.backblazeb2.com",
        "recommendedPartSize": 100000000,
        "absoluteMinimumPartSize": 5000000,
    }


@pytest.fixture
def mock_list_buckets_response() -> dict:
    """Mock response for b2_list_buckets."""
    return {
        "buckets": [
            {"bucketId": "bucket-1", "bucketName": "photos", "bucketType": "allPrivate"},
            {"bucketId": "bucket-2", "bucketName": "backups", "bucketType": "allPrivate"},
        ]
    }


@pytest.fixture
def file_response() -> Callable[..., dict]:
    """Build a file info response as returned by upload and finish calls."""

    def build(name: str, size: int, sha1: str, *, action: str = "upload") -> dict:
        return {
            "accountId": "000account1234",
            "action": action,
            "bucketId": "bucket-1",
            "contentLength": size,
            "contentSha1": sha1,
            "contentType": "application/octet-stream",
            "fileId": "file-1",
            "fileInfo": {},
            "fileName": name,
            "uploadTimestamp": 1700000000000,
        }

    return build
