"""Parsing of the published checkVat WSDL.

Only two facts are needed to talk to VIES: the SOAP endpoint address and the
namespace of the checkVat request element. Both are read from the WSDL so that
a moved endpoint is picked up without a release.
"""

from __future__ import annotations

from dataclasses import dataclass
from xml.etree import ElementTree as ET

import httpx

from euvat.exceptions import ClientInitializationError

OPERATION = "checkVat"

NS = {
    "wsdl": "http://schemas.xmlsoap.org/wsdl/",
    "soap": "http://schemas.xmlsoap.org/wsdl/soap/",
    "xsd": "http://www.w3.org/2001/XMLSchema",
}


@dataclass(frozen=True)
class ServiceContract:
    """What the client needs from the WSDL."""

    endpoint: str
    types_namespace: str
    operation: str = OPERATION


def _check_endpoint(endpoint: str) -> None:
    try:
        url = httpx.URL(endpoint)
    except httpx.InvalidURL as exc:
        raise ClientInitializationError(f"wsdl error: invalid SOAP address {endpoint!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ClientInitializationError(f"wsdl error: invalid SOAP address {endpoint!r}")


def parse_service_contract(document: str) -> ServiceContract:
    """Extract the checkVat endpoint and request namespace from a WSDL document.

    Raises:
        ClientInitializationError: the document is not XML, or does not
            describe the checkVat operation and a SOAP address.
    """
    try:
        root = ET.fromstring(document.encode("utf-8"))
    except ET.ParseError as exc:
        raise ClientInitializationError(f"wsdl error: {exc}") from exc

    if root.tag != f"{{{NS['wsdl']}}}definitions":
        raise ClientInitializationError("wsdl error: document is not a WSDL definition")

    operations = {
        op.get("name")
        for op in root.iterfind("wsdl:portType/wsdl:operation", NS)
    }
    if OPERATION not in operations:
        raise ClientInitializationError(f"wsdl error: operation '{OPERATION}' not found")

    address = root.find("wsdl:service/wsdl:port/soap:address", NS)
    endpoint = address.get("location") if address is not None else None
    if not endpoint:
        raise ClientInitializationError("wsdl error: no SOAP address in service definition")
    _check_endpoint(endpoint)

    types_namespace = None
    for schema in root.iterfind("wsdl:types/xsd:schema", NS):
        if schema.find(f"xsd:element[@name='{OPERATION}']", NS) is not None:
            types_namespace = schema.get("targetNamespace")
            break
    if not types_namespace:
        raise ClientInitializationError(f"wsdl error: no schema declares element '{OPERATION}'")

    return ServiceContract(endpoint=endpoint, types_namespace=types_namespace)
