"""Exceptions raised by the OneFS Platform API client."""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


class IsilonError(Exception):
    """Base class for every error raised by isilonpapi."""


class ClientConfigError(IsilonError):
    """The client was given incomplete or invalid configuration."""


class UnsupportedVersionError(IsilonError):
    """The appliance reports a PAPI version this client cannot talk to."""

    def __init__(self, version: int, minimum: int):
        self.version = version
        self.minimum = minimum
        super().__init__("OneFS releases older than 8.0 are no longer supported")


@dataclass
class ErrorDetail:
    """One entry of the ``errors`` array returned by the appliance."""

    code: str = ""
    field: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorDetail":
        return cls(
            code=data.get("code") or "",
            field=data.get("field") or "",
            message=data.get("message") or "",
        )


class PapiError(IsilonError):
    """A non-2xx response from the Platform API.

    ``str(err)`` is the message of the first reported error, or the HTTP
    status line when the appliance did not supply one.
    """

    def __init__(self, status_code: int, errors: List[ErrorDetail], status_text: str = ""):
        self.status_code = status_code
        self.errors = errors or [ErrorDetail()]
        if not self.errors[0].message:
            self.errors[0].message = status_text
        self.message = self.errors[0].message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.errors[0].code

    def __repr__(self):
        return f"PapiError(status_code={self.status_code}, message={self.message!r})"


class PapiDecodeError(IsilonError, ValueError):
    """A response body could not be decoded as JSON."""

    def __init__(self, message: str, body: Optional[bytes] = None):
        self.body = body
        super().__init__(message)


class NotFoundError(IsilonError):
    """A lookup matched nothing on the appliance."""


class QuotaNotFoundError(NotFoundError):

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Quota not found: {path}")


class SnapshotNotFoundError(NotFoundError):

    def __init__(self, snapshot_id: Optional[int] = None, name: str = ""):
        self.snapshot_id = snapshot_id
        self.name = name
        super().__init__(f"Snapshot doesn't exist: ({snapshot_id}, {name})")
