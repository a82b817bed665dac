"""Minimal SOAP 1.1 RPC transport for the OCS web service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote, urlsplit, urlunsplit

import requests
import urllib3
from lxml import etree
from urllib3.exceptions import InsecureRequestWarning

from .exceptions import TransportError, UnexpectedResponseError

SOAP_ENV = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP_ENC = "http://schemas.xmlsoap.org/soap/encoding/"
XSD = "http://www.w3.org/2001/XMLSchema"
XSI = "http://www.w3.org/2001/XMLSchema-instance"

logger = logging.getLogger(__name__)

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=True)


@dataclass(slots=True)
class SoapFault:
    """Fault element returned by the server."""

    faultcode: str
    faultstring: str


@dataclass(slots=True)
class SoapResult:
    """Outcome of a SOAP call: either result parameters or a fault."""

    params: list[str] = field(default_factory=list)
    fault: SoapFault | None = None


class SoapTransport:
    """Post RPC-style envelopes to `proxy` using `uri` as the method namespace."""

    def __init__(
        self,
        uri: str,
        proxy: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        verify_ssl: bool | str = True,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.uri = uri
        self.proxy = proxy
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._url, self._auth = split_credentials(proxy)
        self._headers = dict(headers or {})
        self._session = session or requests.Session()
        if isinstance(verify_ssl, bool) and not verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)

    def call(self, method: str, *args: Any) -> SoapResult:
        body = build_envelope(self.uri, method, args)
        headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "Accept": "text/xml",
        }
        headers.update(self._headers)
        headers["SOAPAction"] = f'"{self.uri}#{method}"'
        logger.info("OCS SOAP call %s -> %s", method, self._url)
        try:
            response = self._session.post(
                self._url,
                data=body,
                headers=headers,
                auth=self._auth,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.RequestException as exc:
            reason = str(exc).strip() or exc.__class__.__name__
            raise TransportError(
                f"Failed to communicate with OCS SOAP endpoint: {reason}", details=reason
            ) from exc
        return parse_envelope(response)

    def close(self) -> None:
        self._session.close()


def split_credentials(url: str) -> tuple[str, tuple[str, str] | None]:
    """Strip userinfo from `url`, returning it as a Basic auth pair."""

    parsed = urlsplit(url)
    if "@" not in parsed.netloc:
        return url, None
    userinfo, _, hostport = parsed.netloc.rpartition("@")
    username, _, password = userinfo.partition(":")
    clean = urlunsplit((parsed.scheme, hostport, parsed.path, parsed.query, parsed.fragment))
    return clean, (unquote(username), unquote(password))


def build_envelope(uri: str, method: str, args: tuple[Any, ...]) -> bytes:
    """Encode an RPC call with positional string arguments."""

    nsmap = {"soap": SOAP_ENV, "soapenc": SOAP_ENC, "xsd": XSD, "xsi": XSI}
    envelope = etree.Element(f"{{{SOAP_ENV}}}Envelope", nsmap=nsmap)
    envelope.set(f"{{{SOAP_ENV}}}encodingStyle", SOAP_ENC)
    body = etree.SubElement(envelope, f"{{{SOAP_ENV}}}Body")
    call = etree.SubElement(body, f"{{{uri}}}{method}", nsmap={"namesp1": uri})
    for index, arg in enumerate(args, start=1):
        param = etree.SubElement(call, f"c-gensym{index}")
        param.set(f"{{{XSI}}}type", "xsd:string")
        param.text = str(arg)
    return etree.tostring(envelope, xml_declaration=True, encoding="UTF-8")


def parse_envelope(response: requests.Response) -> SoapResult:
    """Turn an HTTP response into a `SoapResult`.

    Faults are reported through the result even when sent with HTTP 500.
    Any other non-success status is a `TransportError`.
    """

    status = response.status_code
    body = _find_body(response)
    if body is None:
        if not 200 <= status < 300:
            message = f"OCS SOAP endpoint error {status}: {response.text[:200]}"
            raise TransportError(message, status_code=status, details=response.text)
        raise UnexpectedResponseError(
            "Response did not contain a SOAP envelope", status_code=status, details=response.text
        )

    fault = body.find(f"{{{SOAP_ENV}}}Fault")
    if fault is not None:
        return SoapResult(
            fault=SoapFault(
                faultcode=_child_text(fault, "faultcode"),
                faultstring=_child_text(fault, "faultstring"),
            )
        )
    if not 200 <= status < 300:
        message = f"OCS SOAP endpoint error {status}: {response.text[:200]}"
        raise TransportError(message, status_code=status, details=response.text)

    method_response = next((child for child in body if isinstance(child.tag, str)), None)
    if method_response is None:
        return SoapResult()
    params = [child.text or "" for child in method_response if isinstance(child.tag, str)]
    return SoapResult(params=params)


def _find_body(response: requests.Response) -> etree._Element | None:
    if not response.content:
        return None
    try:
        envelope = etree.fromstring(response.content, parser=_PARSER)
    except etree.XMLSyntaxError:
        return None
    if envelope.tag != f"{{{SOAP_ENV}}}Envelope":
        return None
    return envelope.find(f"{{{SOAP_ENV}}}Body")


def _child_text(element: etree._Element, name: str) -> str:
    # faultcode/faultstring are normally unqualified but some stacks prefix them
    for child in element:
        if isinstance(child.tag, str) and etree.QName(child).localname == name:
            return child.text or ""
    return ""


__all__ = [
    "SoapFault",
    "SoapResult",
    "SoapTransport",
    "build_envelope",
    "parse_envelope",
    "split_credentials",
]
