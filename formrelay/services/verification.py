"""Cloudflare Turnstile token verification."""

from __future__ import annotations

import logging

import httpx

from formrelay.core.exceptions import VerificationFailedError

_LOGGER = logging.getLogger(__name__)


class TurnstileVerifier:
    def __init__(
        self,
        secret: str,
        verify_url: str = "https://challenges.cloudflare.com/turnstile/v0/siteverify",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret = secret
        self._verify_url = verify_url
        self._transport = transport

    async def verify(self, token: str | None, remote_ip: str) -> None:
        if not token:
            raise VerificationFailedError("Turnstile verification failed: missing token")

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self._verify_url,
                    data={"secret": self._secret, "response": token, "remoteip": remote_ip},
                )
            outcome = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise VerificationFailedError(f"Turnstile verification failed: {exc}") from exc

        if not outcome.get("success"):
            _LOGGER.warning(
                "Turnstile rejected token",
                extra={"remote_ip": remote_ip, "error_codes": outcome.get("error-codes")},
            )
            raise VerificationFailedError("Turnstile verification failed")
