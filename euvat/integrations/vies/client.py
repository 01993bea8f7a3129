"""Async httpx SOAP client for the VIES checkVat service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from xml.etree import ElementTree as ET

import httpx

from euvat.config import settings
from euvat.decoders.vat_number import mask_number
from euvat.events import emit
from euvat.exceptions import ClientInitializationError
from euvat.integrations.vies.cache import ValidationCache
from euvat.integrations.vies.schemas import ValidationResult, Validity
from euvat.integrations.vies.wsdl import ServiceContract, parse_service_contract
from euvat.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"

# checkVat reply field names
_FIELD_VALID = "valid"
_FIELD_NAME = "name"
_FIELD_ADDRESS = "address"
_FIELD_FAULT = "faultstring"


@dataclass(frozen=True)
class StructuredReply:
    """A SOAP body the service answered with: checkVatResponse or Fault."""

    fields: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class OpaqueFailure:
    """No usable reply; ``reason`` is set when the transport gave one."""

    reason: str | None = None


ServiceReply = StructuredReply | OpaqueFailure


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def build_envelope(contract: ServiceContract, prefix: str, number: str) -> bytes:
    """Serialize a UTF-8 SOAP 1.1 checkVat request."""
    ns = contract.types_namespace
    envelope = ET.Element(f"{{{SOAP_ENV_NS}}}Envelope")
    body = ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Body")
    operation = ET.SubElement(body, f"{{{ns}}}{contract.operation}")
    ET.SubElement(operation, f"{{{ns}}}countryCode").text = prefix
    ET.SubElement(operation, f"{{{ns}}}vatNumber").text = number
    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)


def parse_reply(content: bytes) -> ServiceReply:
    """Decide, at the transport boundary, whether the body is a usable reply."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError:
        logger.debug("VIES reply is not XML")
        return OpaqueFailure()

    body = root.find(f"{{{SOAP_ENV_NS}}}Body")
    if body is None or len(body) == 0:
        return OpaqueFailure()

    payload = body[0]
    if _local_name(payload.tag) not in ("checkVatResponse", "Fault"):
        return OpaqueFailure()

    return StructuredReply(
        fields={_local_name(child.tag): (child.text or "").strip() for child in payload}
    )


class ViesClient:
    """Thin async wrapper around the VIES checkVat SOAP operation.

    WSDL: fetched from settings.vies.wsdl_url, cached for a minute
    Endpoint and request namespace: read from the WSDL
    """

    def __init__(
        self,
        cache: ValidationCache,
        *,
        debug_mode: bool | None = None,
        wsdl_url: str | None = None,
    ) -> None:
        self._cache = cache
        self._debug_mode = settings.vies.debug_mode if debug_mode is None else debug_mode
        self._wsdl_url = wsdl_url or settings.vies.wsdl_url
        self._timeout = httpx.Timeout(
            settings.vies.read_timeout,
            connect=settings.vies.connect_timeout,
        )

    async def check_vat(self, prefix: str, number: str) -> ValidationResult:
        """Look up ``number`` under ``prefix``. Never raises."""
        try:
            contract = await self._load_contract()
        except ClientInitializationError as exc:
            logger.warning("VIES client could not be initialised: %s", exc.reason)
            return ValidationResult(
                valid=Validity.UNKNOWN,
                company_name="",
                company_address="",
                errors=[str(exc)],
                raw_response=None,
            )

        await emit(SystemEvent(
            event_type=EventType.EXTERNAL_API_CALL,
            data={"integration": "vies", "prefix": prefix, "vat_number": mask_number(number)},
            source_module="integrations.vies.client",
        ))

        reply = await self._call(contract, prefix, number)
        result = self._to_result(reply)

        await emit(SystemEvent(
            event_type=EventType.EXTERNAL_API_RESPONSE,
            data={
                "integration": "vies",
                "valid": result.valid.value,
                "structured": isinstance(reply, StructuredReply),
            },
            source_module="integrations.vies.client",
        ))
        return result

    async def _load_contract(self) -> ServiceContract:
        document = None if self._debug_mode else await self._cache.get_wsdl()
        if document is None:
            document = await self._fetch_wsdl()
            await self._cache.put_wsdl(document)
        return parse_service_contract(document)

    async def _fetch_wsdl(self) -> str:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(self._wsdl_url)
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ClientInitializationError(f"wsdl error: {exc!r}") from exc

        await emit(SystemEvent(
            event_type=EventType.VIES_WSDL_FETCHED,
            data={"url": self._wsdl_url, "bytes": len(response.content)},
            source_module="integrations.vies.client",
        ))
        return response.content.decode("utf-8", errors="replace")

    async def _call(self, contract: ServiceContract, prefix: str, number: str) -> ServiceReply:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    contract.endpoint,
                    content=build_envelope(contract, prefix, number),
                    headers={
                        "Content-Type": "text/xml; charset=utf-8",
                        "SOAPAction": "",
                    },
                )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("VIES transport error for %s%s: %r", prefix, mask_number(number), exc)
            return OpaqueFailure(reason=str(exc) or None)

        # Faults arrive with HTTP 500, so the status code is not checked here.
        reply = parse_reply(response.content)
        if isinstance(reply, OpaqueFailure):
            logger.warning(
                "Unexpected VIES reply (HTTP %s) for %s%s",
                response.status_code,
                prefix,
                mask_number(number),
            )
        return reply

    def _to_result(self, reply: ServiceReply) -> ValidationResult:
        if isinstance(reply, StructuredReply):
            fields = reply.fields
            return ValidationResult(
                valid=Validity.VALID if fields.get(_FIELD_VALID) == "true" else Validity.INVALID,
                company_name=fields.get(_FIELD_NAME) or "",
                company_address=fields.get(_FIELD_ADDRESS) or "",
                errors=[fields.get(_FIELD_FAULT) or ""],
                raw_response=dict(fields),
            )
        return ValidationResult(
            valid=Validity.UNKNOWN,
            company_name="",
            company_address="",
            errors=[reply.reason] if reply.reason else [],
            raw_response=None,
        )
