"""Shared pytest fixtures for the relay tests."""

from __future__ import annotations

import json
import os

import pytest
import pytest_asyncio
import psycopg
from psycopg import AsyncConnection
from psycopg.rows import dict_row

from formrelay.core.config import get_settings
from formrelay.core.forms import get_forms_catalog
from formrelay.core.exceptions import DeliveryFailedError
from formrelay.models.submission import OutboundEmail
from formrelay.services.email import EmailService

FORMS_CONFIG = {
    "forms": {
        "quote": {
            "name": "Quote Request",
            "notifyTo": ["sales@example.com"],
            "thankYouUrl": "/quote/thank-you",
            "subject": "New quote request",
        },
        "support": {
            "name": "Support",
            "notifyTo": ["support@example.com", "oncall@example.com"],
            "fromEmail": "support-forms@mg.example.com",
        },
        "closed": {
            "name": "Closed Form",
            "notifyTo": ["nobody@example.com"],
            "enabled": False,
        },
    }
}

DEFAULT_SETTINGS_ENV = {
    "MAILGUN_API_KEY": "key-test",
    "MAILGUN_DOMAIN": "mg.example.com",
    "NOTIFY_TO": "owner@example.com",
    "FROM_EMAIL": "forms@mg.example.com",
    "FORMS_CONFIG": json.dumps(FORMS_CONFIG),
}

UNSET_SETTINGS_ENV = (
    "MAILGUN_API_BASE",
    "THANK_YOU_URL",
    "FORMS_CONFIG_PATH",
    "REDIS_URL",
    "DATABASE_URL",
    "TURNSTILE_SECRET_KEY",
    "ENABLE_RATE_LIMIT",
    "ENABLE_TURNSTILE",
    "ENABLE_PERSISTENCE",
)


def clear_caches() -> None:
    get_settings.cache_clear()  # type: ignore[attr-defined]
    get_forms_catalog.cache_clear()  # type: ignore[attr-defined]


def apply_default_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in UNSET_SETTINGS_ENV:
        monkeypatch.delenv(key, raising=False)
    for key, value in DEFAULT_SETTINGS_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def settings_env(monkeypatch: pytest.MonkeyPatch):
    apply_default_settings_env(monkeypatch)
    clear_caches()
    yield
    clear_caches()


class RecordingEmailService(EmailService):
    """Collects messages instead of calling Mailgun."""

    def __init__(self, fail_for: dict[str, int] | None = None) -> None:
        self.sent: list[OutboundEmail] = []
        self.fail_for = fail_for or {}

    async def send(self, message: OutboundEmail) -> None:
        status_code = self.fail_for.get(message.to)
        if status_code is not None:
            raise DeliveryFailedError(
                f"Mailgun failed: {status_code} rejected",
                status_code=status_code,
                body="rejected",
            )
        self.sent.append(message)


@pytest_asyncio.fixture
async def db_conn() -> AsyncConnection:
    database_url = os.getenv("TEST_DATABASE_URL")
    if not database_url:
        pytest.skip("TEST_DATABASE_URL environment variable is not set")

    connection = await psycopg.AsyncConnection.connect(database_url)
    connection.row_factory = dict_row

    yield connection

    try:
        await connection.execute("DROP TABLE IF EXISTS form_submissions")
        await connection.commit()
    finally:
        await connection.close()


@pytest.fixture
def email_recorder() -> RecordingEmailService:
    return RecordingEmailService()
