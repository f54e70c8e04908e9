"""Errors raised while relaying a submission.

Every subclass of :class:`FormRelayError` is reported to the submitter as a
plain-text ``400 Error: <message>`` response.
"""

from __future__ import annotations


class FormRelayError(Exception):
    """Base class for submission handling failures."""


class ConfigurationMissingError(FormRelayError):
    """Raised when a required credential or address cannot be resolved."""


class MalformedInputError(FormRelayError):
    """Raised when a body does not parse under its declared content type."""


class DeliveryFailedError(FormRelayError):
    """Raised when the mail provider rejects or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.delivered: list[str] = []


class RateLimitExceeded(FormRelayError):
    def __init__(self, message: str, *, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class VerificationFailedError(FormRelayError):
    """Raised when the challenge provider does not confirm the token."""


class RedirectResolutionError(FormRelayError):
    """Raised for an unusable ``Referer``; always recovered locally."""
