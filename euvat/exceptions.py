"""Error kinds raised along the VAT validation pipeline.

Each exception carries the human-readable message reported back to the
caller in ``errors``. None of them is ever allowed to escape ``validate``.
"""

from __future__ import annotations


class VatValidationError(Exception):
    """Base class for VAT validation errors."""


class InvalidNumberFormatError(VatValidationError):
    """Raised when a VAT number is empty after normalization."""

    def __init__(self, raw_input: str) -> None:
        super().__init__(
            "An empty or invalid VAT number was passed for validation. "
            "The VAT number should contain several digits, without the country prefix. "
            f'Received VAT number: "{raw_input}".'
        )
        self.raw_input = raw_input


class UnknownCountryPrefixError(VatValidationError):
    """Raised when no VAT prefix is known for a country code."""

    def __init__(self, country_code: str) -> None:
        super().__init__(
            "A VAT prefix could not be found for the specified country. "
            f'Received country code: "{country_code}".'
        )
        self.country_code = country_code


class ClientInitializationError(VatValidationError):
    """Raised when the VIES client cannot be built from its WSDL."""

    def __init__(self, reason: str) -> None:
        super().__init__(f'An error occurred initialising SOAP client. Error message: "{reason}".')
        self.reason = reason
