"""
Error types raised by the LegFed converters.
"""


class LegfedError(Exception):
    """Base class for converter errors."""

    pass


class ItemError(LegfedError):
    """Invalid operation on an Item (null or empty attribute value, bad reference)."""

    pass


class DuplicateStoreError(LegfedError):
    """An Item was handed to the writer a second time."""

    pass


class ConverterError(LegfedError):
    """Malformed or incomplete input file."""

    pass


class ChadoError(LegfedError):
    """Missing CV term, unknown organism or bad chado source configuration."""

    pass
