from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from formrelay.core.exceptions import DeliveryFailedError
from formrelay.models.submission import OutboundEmail

_LOGGER = logging.getLogger(__name__)


class EmailService(ABC):
    @abstractmethod
    async def send(self, message: OutboundEmail) -> None:
        raise NotImplementedError


class MailgunEmailService(EmailService):
    """Email service backed by the Mailgun messages API."""

    def __init__(
        self,
        api_key: str,
        domain: str,
        api_base: str = "https://api.mailgun.net/v3",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._auth = httpx.BasicAuth("api", api_key)
        self._endpoint = f"{api_base.rstrip('/')}/{domain}/messages"
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def send(self, message: OutboundEmail) -> None:
        try:
            async with httpx.AsyncClient(auth=self._auth, transport=self._transport) as client:
                response = await client.post(self._endpoint, data=message.as_form())
        except httpx.HTTPError as exc:
            _LOGGER.warning("Mailgun request failed", extra={"to": message.to}, exc_info=exc)
            raise DeliveryFailedError(f"Mailgun request failed: {exc}") from exc

        if not response.is_success:
            _LOGGER.warning(
                "Mailgun rejected message",
                extra={"to": message.to, "status_code": response.status_code},
            )
            raise DeliveryFailedError(
                f"Mailgun failed: {response.status_code} {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        _LOGGER.info("Notification dispatched via Mailgun", extra={"to": message.to})
