"""Exception types raised by the extraction stack."""


class SnapsheetError(Exception):
    """Base class for all snapsheet errors."""


class ConfigurationError(SnapsheetError, ValueError):
    """Raised when settings are missing or invalid at startup."""


class MissingCredentialsError(ConfigurationError):
    """Raised when no Gemini API key can be found."""


class ExtractionError(SnapsheetError):
    """Base class for failures while turning an image into a record."""


class RateLimitedError(ExtractionError):
    """The model kept answering 429 after every retry was spent."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class MalformedResponseError(ExtractionError):
    """The model answered with something that is not the expected JSON."""
