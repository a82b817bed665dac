"""Custom exception hierarchy for the OCS Inventory client."""
from __future__ import annotations

from typing import Any


class OCSError(RuntimeError):
    """Base error for OCS Inventory failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ConfigurationError(OCSError):
    """Raised when the client cannot be built from the supplied settings."""


class TransportError(OCSError):
    """Raised when the SOAP endpoint cannot be reached or answers with an HTTP error."""


class RemoteError(OCSError):
    """Raised when the server answers with a SOAP fault."""


class UnexpectedResponseError(OCSError):
    """Raised when the server returns a payload that cannot be parsed."""


class UnmappedFieldWarning(UserWarning):
    """Emitted when a custom field id has no entry in the field-name table."""
