"""Dependency providers for API routes."""

from __future__ import annotations

from typing import Annotated, AsyncGenerator

from fastapi import Depends

from formrelay.core.config import Settings, get_settings as load_settings
from formrelay.core.database import get_db_conn, persistence_enabled
from formrelay.core.forms import get_forms_catalog
from formrelay.core.redis import get_redis_client, rate_limit_enabled
from formrelay.models.form_config import FormsCatalog
from formrelay.repositories.submission import SubmissionRepository
from formrelay.services.email import EmailService, MailgunEmailService
from formrelay.services.rate_limiter import RateLimiter
from formrelay.services.submission import Capabilities, SubmissionService
from formrelay.services.verification import TurnstileVerifier


async def get_settings() -> Settings:
    return load_settings()


async def get_catalog() -> FormsCatalog:
    return get_forms_catalog()


def get_email_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> EmailService:
    # Missing credentials are reported per request by SubmissionService.ensure_credentials.
    return MailgunEmailService(
        api_key=settings.mailgun_api_key or "",
        domain=settings.mailgun_domain or "",
        api_base=settings.mailgun_api_base,
    )


def get_rate_limiter(settings: Settings) -> RateLimiter | None:
    if not rate_limit_enabled(settings):
        return None
    return RateLimiter(
        get_redis_client(),
        limit=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


def get_verifier(settings: Settings) -> TurnstileVerifier | None:
    if not (settings.enable_turnstile and settings.turnstile_secret_key):
        return None
    return TurnstileVerifier(settings.turnstile_secret_key, settings.turnstile_verify_url)


async def get_capabilities(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[Capabilities, None]:
    rate_limiter = get_rate_limiter(settings)
    verifier = get_verifier(settings)
    if persistence_enabled(settings):
        async with get_db_conn() as conn:
            yield Capabilities(rate_limiter, verifier, SubmissionRepository(conn))
        return
    yield Capabilities(rate_limiter, verifier)


async def get_submission_service(
    settings: Annotated[Settings, Depends(get_settings)],
    catalog: Annotated[FormsCatalog, Depends(get_catalog)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
    capabilities: Annotated[Capabilities, Depends(get_capabilities)],
) -> SubmissionService:
    return SubmissionService(
        settings=settings,
        catalog=catalog,
        email_service=email_service,
        capabilities=capabilities,
    )
