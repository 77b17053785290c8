"""Shared HTTP infrastructure for the B2 API client."""

from .config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    HTTPConfig,
    require_credentials,
    resolve_base_url,
)
from .transport import (
    BaseTransport,
    BlockingTransport,
    BytesBody,
    JSONBody,
    RequestBody,
)

__all__ = [
    "DEFAULT_API_BASE_URL",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "HTTPConfig",
    "require_credentials",
    "resolve_base_url",
    "BaseTransport",
    "BlockingTransport",
    "JSONBody",
    "BytesBody",
    "RequestBody",
]
