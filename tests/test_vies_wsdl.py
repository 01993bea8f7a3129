"""Tests for checkVat WSDL parsing.

Covers:
- Endpoint and request namespace read from a real-shaped WSDL
- Non-XML, non-WSDL and incomplete documents rejected
"""

from __future__ import annotations

import pytest

from euvat.exceptions import ClientInitializationError
from euvat.integrations.vies.wsdl import parse_service_contract


class TestParseServiceContract:
    def test_valid_wsdl(self, vies_wsdl: str) -> None:
        contract = parse_service_contract(vies_wsdl)
        assert contract.endpoint == "http://ec.europa.eu/taxation_customs/vies/services/checkVatService"
        assert contract.types_namespace == "urn:ec.europa.eu:taxud:vies:services:checkVat:types"
        assert contract.operation == "checkVat"

    def test_not_xml(self) -> None:
        with pytest.raises(ClientInitializationError) as exc_info:
            parse_service_contract("<html><body>Service unavailable")
        assert str(exc_info.value).startswith("An error occurred initialising SOAP client.")

    def test_not_a_wsdl(self) -> None:
        with pytest.raises(ClientInitializationError, match="not a WSDL"):
            parse_service_contract("<html><body>Maintenance</body></html>")

    def test_missing_operation(self, vies_wsdl: str) -> None:
        broken = vies_wsdl.replace('<wsdl:operation name="checkVat">', '<wsdl:operation name="other">')
        with pytest.raises(ClientInitializationError, match="operation 'checkVat' not found"):
            parse_service_contract(broken)

    def test_missing_address(self, vies_wsdl: str) -> None:
        start = vies_wsdl.index("<wsdlsoap:address")
        end = vies_wsdl.index("/>", start) + 2
        broken = vies_wsdl[:start] + vies_wsdl[end:]
        with pytest.raises(ClientInitializationError, match="no SOAP address"):
            parse_service_contract(broken)

    def test_missing_schema_element(self, vies_wsdl: str) -> None:
        broken = vies_wsdl.replace('<xsd:element name="checkVat">', '<xsd:element name="renamed">')
        with pytest.raises(ClientInitializationError, match="no schema declares"):
            parse_service_contract(broken)

    @pytest.mark.parametrize(
        "location",
        [
            "http://[::1/x",
            "ftp://ec.europa.eu/taxation_customs/vies/services/checkVatService",
            "checkVatService",
            "http:///checkVatService",
        ],
    )
    def test_unusable_address(self, vies_wsdl: str, location: str) -> None:
        broken = vies_wsdl.replace(
            "http://ec.europa.eu/taxation_customs/vies/services/checkVatService",
            location,
        )
        with pytest.raises(ClientInitializationError, match="invalid SOAP address"):
            parse_service_contract(broken)
