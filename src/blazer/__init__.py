from .client import Bucket, Client
from .errors import (
    B2APIError,
    B2AuthError,
    B2Error,
    B2NotFoundError,
    B2RateLimited,
    B2ServiceUnavailable,
    B2UnknownError,
    MissingCredentialsError,
    NoSuchBucketError,
    PartUploadError,
    UploadCancelledError,
    WriterClosedError,
)
from .registry import WriterRegistry
from .types import FileInfo, PartInfo, WriterStatus
from .utils import MAX_PART_SIZE
from .writer import Writer

__version__ = "0.1.0"

__all__ = [
    "Client",
    "Bucket",
    "Writer",
    "WriterRegistry",
    "MAX_PART_SIZE",
    "FileInfo",
    "PartInfo",
    "WriterStatus",
    "B2Error",
    "B2APIError",
    "B2AuthError",
    "B2NotFoundError",
    "B2RateLimited",
    "B2ServiceUnavailable",
    "B2UnknownError",
    "MissingCredentialsError",
    "NoSuchBucketError",
    "PartUploadError",
    "UploadCancelledError",
    "WriterClosedError",
]
