from __future__ import annotations


class B2Error(Exception):
    def __init__(self, message: str = "") -> None:
        super().__init__(f"B2: {message}")


class MissingCredentialsError(B2Error):
    def __init__(self) -> None:
        super().__init__(
            "No credentials found. Either configure the `B2_ACCOUNT_ID` and "
            "`B2_APPLICATION_KEY` environment variables, or pass them to your calls."
        )


class B2APIError(B2Error):
    """A non-2xx response from the B2 API."""

    def __init__(self, status: int, code: str, message: str = "") -> None:
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"{status} {code}: {message}" if message else f"{status} {code}")


class B2AuthError(B2APIError):
    pass


class B2NotFoundError(B2APIError):
    pass


class B2ServiceUnavailable(B2APIError):
    pass


class B2RateLimited(B2APIError):
    def __init__(
        self, status: int, code: str, message: str = "", retry_after: int | None = None
    ) -> None:
        self.retry_after = retry_after
        super().__init__(status, code, message)


class B2UnknownError(B2Error):
    def __init__(self, message: str = "Unknown error, please visit https://www.backblaze.com/help.html") -> None:
        super().__init__(message)


class NoSuchBucketError(B2Error):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name}: no such bucket")


class UploadCancelledError(B2Error):
    def __init__(self, message: str = "upload was cancelled") -> None:
        super().__init__(message)


class PartUploadError(B2Error):
    """A part kept failing until its retry budget ran out."""

    def __init__(self, part_number: int, attempts: int) -> None:
        self.part_number = part_number
        self.attempts = attempts
        super().__init__(f"part {part_number} failed after {attempts} attempts")


class WriterClosedError(B2Error):
    def __init__(self, name: str) -> None:
        super().__init__(f"{name}: write on closed writer")


__all__ = [
    "B2Error",
    "MissingCredentialsError",
    "B2APIError",
    "B2AuthError",
    "B2NotFoundError",
    "B2ServiceUnavailable",
    "B2RateLimited",
    "B2UnknownError",
    "NoSuchBucketError",
    "UploadCancelledError",
    "PartUploadError",
    "WriterClosedError",
]
