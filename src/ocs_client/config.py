"""Configuration helpers for the OCS Inventory client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import quote, urlsplit, urlunsplit

from .exceptions import ConfigurationError

IDENTIFIER_PATH = "/Apache/Ocsinventory/Interface"
ENDPOINT_PATH = "/ocsinterface"


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Typed configuration for `OCSClient`."""

    base_url: str
    username: str | None = None
    password: str | None = None
    verify_ssl: bool | str = True
    timeout: float = 30.0
    default_headers: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        validate_base_url(self.base_url)

    def identifier_url(self) -> str:
        """URI naming the SOAP service, used as namespace and SOAPAction prefix."""
        return _with_path(self.base_url, IDENTIFIER_PATH)

    def endpoint_url(self) -> str:
        """URL the SOAP envelopes are posted to, carrying credentials if any."""
        return _with_path(self.base_url, ENDPOINT_PATH, userinfo=self._userinfo())

    def resolved_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "Accept": "text/xml",
            "Content-Type": "text/xml; charset=utf-8",
        }
        if self.default_headers:
            headers.update(self.default_headers)
        return headers

    def _userinfo(self) -> str | None:
        # A password without a username ends up as the bare userinfo.
        userinfo = ""
        if self.username:
            userinfo = quote(self.username, safe="")
        if self.username and self.password:
            userinfo += ":"
        if self.password:
            userinfo += quote(self.password, safe="")
        return userinfo or None


def validate_base_url(base_url: str) -> None:
    """Raise `ConfigurationError` unless `base_url` is an absolute http(s) URL."""

    if not isinstance(base_url, str) or not base_url.strip():
        raise ConfigurationError("OCS base URL must be a non-empty string.")
    try:
        parsed = urlsplit(base_url)
        parsed.port  # raises on a malformed port
    except ValueError as exc:
        raise ConfigurationError(f"Invalid OCS base URL {base_url!r}: {exc}") from exc
    if parsed.scheme not in {"http", "https"}:
        raise ConfigurationError(
            f"Invalid OCS base URL {base_url!r}: scheme must be http or https."
        )
    if not parsed.hostname:
        raise ConfigurationError(f"Invalid OCS base URL {base_url!r}: missing host.")


def _with_path(base_url: str, path: str, *, userinfo: str | None = None) -> str:
    parsed = urlsplit(base_url)
    hostport = parsed.netloc.rpartition("@")[2]
    netloc = f"{userinfo}@{hostport}" if userinfo else parsed.netloc
    return urlunsplit((parsed.scheme, netloc, path, parsed.query, ""))
