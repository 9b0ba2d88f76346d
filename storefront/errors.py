"""
Error types for the storefront core.

Two families live here:
- Exceptions a caller may see: the gateway rejects with NotFoundError or
  ConflictError (from a 404/409 answer or from the local database), which
  the Store turns into notifications.
- RemoteError, a plain value describing why a remote call failed. It is
  carried inside a Result and never raised, so the fallback decision can be
  made (and tested) without exception-based control flow.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class StorefrontError(Exception):
    """Base class for storefront errors."""


class NotFoundError(StorefrontError):
    """A requested record does not exist (e.g. login for an unknown user)."""


class ConflictError(StorefrontError):
    """A record already exists (e.g. signup with a registered email)."""


class QuotaExceededError(StorefrontError):
    """Durable storage refused a write because it is full."""


class RemoteErrorKind(str, Enum):
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    MALFORMED = "malformed"
    DISABLED = "disabled"


@dataclass(frozen=True)
class RemoteError:
    """Why a call to the remote catalog service did not produce a value."""
    kind: RemoteErrorKind
    detail: str = ""
    status_code: Optional[int] = None

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.kind.value} ({self.status_code}): {self.detail}"
        return f"{self.kind.value}: {self.detail}"


class RemoteUnavailable(StorefrontError):
    """
    The remote service failed and the fallback policy declined the local
    path. Under the default policy only an unexpected 4xx (e.g. 400 or 422)
    raises it.
    """
