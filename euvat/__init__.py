"""EU VAT number validation against the VIES registry."""

__version__ = "0.1.0"
