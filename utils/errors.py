# utils/errors.py
from __future__ import annotations

from typing import Optional


class ExportError(Exception):
    """Base class for every failure that aborts (or skips part of) an export."""


class ParseError(ExportError):
    """Raised when the credentials file is missing lines or malformed."""


class AuthError(ExportError):
    """Raised when the OAuth handshake fails."""


class HttpError(ExportError):
    """Raised on transport failures (DNS, connection reset, timeout)."""


class ApiError(ExportError):
    """Raised when the remote API answers with a non-2xx status."""

    def __init__(self, status_code: int, url: str, body: str = "") -> None:
        self.status_code = status_code
        self.url = url
        self.body = body
        super().__init__(f"{status_code} from {url}")


class PayloadError(ExportError):
    """Raised when a response lacks a field the walk needs, or is not JSON."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        self.url = url
        super().__init__(f"{message} ({url})" if url else message)


class ArtifactExistsError(ExportError):
    """Raised when the same artifact path is written twice within one run."""
