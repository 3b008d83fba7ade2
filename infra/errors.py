"""
Error taxonomy for pagescribe.

Every failure a caller can see is one of these (or a builtin OSError for
filesystem problems). Root causes are always chained with ``raise ... from``.
"""


class ScribeError(Exception):
    """Base class for all pagescribe errors."""


class ConfigurationError(ScribeError, ValueError):
    """Missing or invalid input. Raised before any remote call is made."""


class ConversionError(ScribeError):
    """Download, office-to-PDF or PDF-to-image conversion failed."""


class AdapterError(ScribeError):
    """A completion request failed (HTTP error, timeout, bad response)."""


class MalformedResponseError(AdapterError):
    """Completion response was missing expected keys."""


class ExtractionError(ScribeError):
    """Schema extraction failed."""
