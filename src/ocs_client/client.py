"""High-level OCS Inventory SOAP client."""

from __future__ import annotations

import html
import logging
from collections.abc import Callable, Mapping
from typing import Any

from .config import ClientConfig
from .constants import GET_COMPUTERS
from .exceptions import RemoteError
from .iterator import ComputerIterator
from .records import parse_computers
from .request import build_request_xml, merge_query
from .soap import SoapTransport

logger = logging.getLogger(__name__)

TransportFactory = Callable[..., SoapTransport]


class OCSClient:
    """Query inventoried computers through the OCS ``/ocsinterface`` web service.

    Example::

        with OCSClient("http://ocs.example.com", "user", "secret") as ocs:
            for computer in ocs.computer_iterator(checksum=Checksum.HARDWARE):
                print(computer["HARDWARE"]["NAME"])
    """

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        *,
        transport_factory: TransportFactory = SoapTransport,
        session: Any | None = None,
        timeout: float = 30.0,
        verify_ssl: bool | str = True,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.config = ClientConfig(
            base_url=base_url,
            username=username,
            password=password,
            verify_ssl=verify_ssl,
            timeout=timeout,
            default_headers=headers,
        )
        self._transport = transport_factory(
            self.config.identifier_url(),
            self.config.endpoint_url(),
            session=session,
            timeout=self.config.timeout,
            verify_ssl=self.config.verify_ssl,
            headers=self.config.resolved_headers(),
        )

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> OCSClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        self.close()

    # Public API --------------------------------------------------------------
    @property
    def transport(self) -> SoapTransport:
        return self._transport

    def get_computers(
        self, params: Mapping[str, Any] | None = None, **overrides: Any
    ) -> list[dict[str, Any]]:
        """Return the computers matching the query, in server order.

        `params` and keyword overrides are merged over the defaults
        (``engine=FIRST``, ``asking_for=INVENTORY``, ``checksum=0x1FFFF``,
        ``wanted=3``, ``offset=0``); any extra key becomes an extra request tag.

        Raises `RemoteError` when the server answers with a SOAP fault.
        """
        query = merge_query(params, **overrides)
        result = self._transport.call(GET_COMPUTERS, build_request_xml(query))
        if result.fault is not None:
            message = html.unescape(result.fault.faultstring)
            logger.warning("OCS fault on %s: %s", GET_COMPUTERS, message)
            raise RemoteError(message, details=result.fault.faultcode)
        return parse_computers(result.params)

    def computer_iterator(
        self, params: Mapping[str, Any] | None = None, **overrides: Any
    ) -> ComputerIterator:
        """Return an iterator walking every page of the query."""
        query = dict(params or {})
        query.update(overrides)
        return ComputerIterator(self, query)

    def close(self) -> None:
        self._transport.close()
