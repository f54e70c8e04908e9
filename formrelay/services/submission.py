from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from formrelay.core.config import Settings
from formrelay.core.constants import (
    DEFAULT_FORM_NAME,
    FORM_FIELD,
    HONEYPOT_FIELD,
    TURNSTILE_FIELD,
)
from formrelay.core.exceptions import (
    ConfigurationMissingError,
    DeliveryFailedError,
    RateLimitExceeded,
    VerificationFailedError,
)
from formrelay.models.form_config import FormConfig, FormsCatalog, form_key_from_path
from formrelay.models.submission import (
    FormDisabled,
    HoneypotDropped,
    InboundSubmission,
    OutboundEmail,
    Redirected,
    Rejected,
    SubmissionOutcome,
)
from formrelay.repositories.submission import SubmissionRepository
from formrelay.services.email import EmailService
from formrelay.services.rate_limiter import RateLimiter
from formrelay.services.verification import TurnstileVerifier
from formrelay.utils.email import render_notification, render_subject
from formrelay.utils.redirect import resolve_redirect

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capabilities:
    """Optional bindings; each one is either wired in or ``None``."""

    rate_limiter: RateLimiter | None = None
    verifier: TurnstileVerifier | None = None
    store: SubmissionRepository | None = None


class SubmissionService:
    def __init__(
        self,
        settings: Settings,
        catalog: FormsCatalog,
        email_service: EmailService,
        capabilities: Capabilities | None = None,
    ) -> None:
        self._settings = settings
        self._catalog = catalog
        self._email_service = email_service
        self._capabilities = capabilities or Capabilities()

    def ensure_credentials(self) -> None:
        if not self._settings.mailgun_api_key:
            raise ConfigurationMissingError("MAILGUN_API_KEY environment variable is not set")
        if not self._settings.mailgun_domain:
            raise ConfigurationMissingError("MAILGUN_DOMAIN environment variable is not set")

    def resolve_form(self, submission: InboundSubmission) -> tuple[str, FormConfig | None]:
        """Return the form key and its configuration, if any.

        The path key wins over the ``_form`` field; with neither the key is
        ``contact``.
        """
        key = form_key_from_path(submission.path) or submission.data.get(FORM_FIELD) or None
        return key or DEFAULT_FORM_NAME, self._catalog.get(key)

    def resolve_recipients(self, form_name: str, config: FormConfig | None) -> list[str]:
        if config is not None:
            return list(config.notify_to)
        recipients = list(self._catalog.defaults.default_notify_to)
        if not recipients:
            raise ConfigurationMissingError(
                f"No recipients configured for form '{form_name}'; set NOTIFY_TO"
            )
        return recipients

    def resolve_sender(self, config: FormConfig | None) -> str:
        if config is not None and config.from_email:
            return config.from_email
        if self._catalog.defaults.default_from_email:
            return self._catalog.defaults.default_from_email
        raise ConfigurationMissingError("FROM_EMAIL environment variable is not set")

    async def process(self, submission: InboundSubmission) -> SubmissionOutcome:
        form_name, config = self.resolve_form(submission)

        if config is not None and not config.enabled:
            _LOGGER.warning("Submission to disabled form", extra={"form": form_name})
            return FormDisabled(form=form_name)

        if submission.data.get(HONEYPOT_FIELD):
            _LOGGER.warning(
                "Honeypot triggered, dropping submission",
                extra={"form": form_name, "client_ip": submission.client_ip},
            )
            return HoneypotDropped()

        try:
            await self._run_guards(submission)
        except (RateLimitExceeded, VerificationFailedError) as exc:
            _LOGGER.warning(
                "Submission refused by guard",
                extra={"form": form_name, "client_ip": submission.client_ip, "reason": str(exc)},
            )
            return Rejected(message=str(exc), retry_after=getattr(exc, "retry_after", None))

        recipients = self.resolve_recipients(form_name, config)
        sender = self.resolve_sender(config)

        if self._capabilities.store is not None:
            await self._capabilities.store.record(form_name, submission.data)

        subject = render_subject(form_name, config)
        html_body, text_body = render_notification(
            submission.data, form_name, config, now=datetime.now(timezone.utc)
        )

        delivered: list[str] = []
        for recipient in recipients:
            message = OutboundEmail(
                to=recipient,
                sender=sender,
                subject=subject,
                html=html_body,
                text=text_body,
            )
            try:
                await self._email_service.send(message)
            except DeliveryFailedError as exc:
                exc.delivered = list(delivered)
                _LOGGER.warning(
                    "Delivery aborted",
                    extra={"form": form_name, "failed": recipient, "delivered": delivered},
                )
                raise
            delivered.append(recipient)

        location = resolve_redirect(submission, config, self._catalog.defaults)
        _LOGGER.info(
            "Submission relayed",
            extra={"form": form_name, "recipients": delivered, "location": location},
        )
        return Redirected(location=location, recipients=delivered)

    async def _run_guards(self, submission: InboundSubmission) -> None:
        if self._capabilities.rate_limiter is not None:
            await self._capabilities.rate_limiter.enforce(submission.client_ip)
        if self._capabilities.verifier is not None:
            await self._capabilities.verifier.verify(
                submission.data.get(TURNSTILE_FIELD), submission.client_ip
            )
