# core/errors.py

from typing import Optional


class ProviderError(RuntimeError):
    """Base class for every failure coming out of the completion provider."""


class TransientProviderError(ProviderError):
    """Network error, timeout or non-2xx status. Worth retrying."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PermanentProviderError(ProviderError):
    """A well-formed exchange whose content is unusable. Retrying won't help."""


class EnvelopeError(PermanentProviderError):
    """The response lacks candidates / content / parts / text."""


class ItineraryParseError(PermanentProviderError):
    """The generated text is not the declared itinerary shape."""


class RetryExhaustedError(ProviderError):
    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error
