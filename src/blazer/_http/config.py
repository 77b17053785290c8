"""HTTP configuration for B2 API clients."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from ..errors import MissingCredentialsError

DEFAULT_API_BASE_URL = "https://api.backblazeb2.com"
DEFAULT_TIMEOUT = 60.0
DEFAULT_USER_AGENT = "blazer-python"


@dataclass
class HTTPConfig:
    """Configuration for HTTP requests to the B2 API."""

    base_url: str = DEFAULT_API_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    default_headers: dict[str, str] = field(default_factory=dict)

    def get_headers(self, authorization: str | None = None) -> dict[str, str]:
        """Build request headers, adding the B2 authorization token when given.

        B2 takes the raw token in the Authorization header, without a scheme.
        """
        headers = {
            "user-agent": self.user_agent,
            "accept": "application/json",
            **self.default_headers,
        }
        if authorization:
            headers["authorization"] = authorization
        return headers


def resolve_base_url(base_url: str | None = None) -> str:
    """Resolve the authorization endpoint from argument or B2_API_URL."""
    return base_url or os.getenv("B2_API_URL") or DEFAULT_API_BASE_URL


def require_credentials(
    account_id: str | None, application_key: str | None
) -> tuple[str, str]:
    """Resolve credentials from arguments or environment, raising if not found."""
    resolved_account = account_id or os.getenv("B2_ACCOUNT_ID")
    resolved_key = application_key or os.getenv("B2_APPLICATION_KEY")
    if not resolved_account or not resolved_key:
        raise MissingCredentialsError()
    return resolved_account, resolved_key


__all__ = [
    "HTTPConfig",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "resolve_base_url",
    "require_credentials",
]
