from __future__ import annotations

import base64
import threading
from urllib.parse import parse_qs

import httpx
import pytest

import mock_mailgun_server
from formrelay.core.exceptions import DeliveryFailedError
from formrelay.models.submission import OutboundEmail
from formrelay.services.email import MailgunEmailService

MESSAGE = OutboundEmail(
    to="owner@example.com",
    sender="forms@mg.example.com",
    subject="New contact submission",
    html="<p>Hi</p>",
    text="Hi",
)


def _service(handler) -> MailgunEmailService:
    return MailgunEmailService(
        api_key="key-test",
        domain="mg.example.com",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_send_posts_basic_authenticated_form() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "<1@mg.example.com>", "message": "Queued."})

    await _service(handler).send(MESSAGE)

    assert len(captured) == 1
    request = captured[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.mailgun.net/v3/mg.example.com/messages"
    expected_auth = base64.b64encode(b"api:key-test").decode("ascii")
    assert request.headers["authorization"] == f"Basic {expected_auth}"
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"

    form = parse_qs(request.content.decode("utf-8"))
    assert form == {
        "from": ["forms@mg.example.com"],
        "to": ["owner@example.com"],
        "subject": ["New contact submission"],
        "html": ["<p>Hi</p>"],
        "text": ["Hi"],
    }


@pytest.mark.asyncio
async def test_non_success_status_raises_delivery_failed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="Forbidden")

    with pytest.raises(DeliveryFailedError) as exc:
        await _service(handler).send(MESSAGE)

    assert str(exc.value) == "Mailgun failed: 401 Forbidden"
    assert exc.value.status_code == 401
    assert exc.value.body == "Forbidden"


@pytest.mark.asyncio
async def test_transport_error_raises_delivery_failed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DeliveryFailedError, match="Mailgun request failed") as exc:
        await _service(handler).send(MESSAGE)

    assert exc.value.status_code is None
    assert isinstance(exc.value.__cause__, httpx.ConnectError)


def test_endpoint_ignores_trailing_slash_in_api_base() -> None:
    service = MailgunEmailService("key", "mg.example.com", api_base="https://api.eu.mailgun.net/v3/")
    assert service.endpoint == "https://api.eu.mailgun.net/v3/mg.example.com/messages"


@pytest.mark.asyncio
async def test_send_against_mock_mailgun_server() -> None:
    server = mock_mailgun_server.build_server("127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        port = server.server_address[1]
        service = MailgunEmailService(
            api_key="key-test",
            domain="mg.example.com",
            api_base=f"http://127.0.0.1:{port}/v3",
            transport=httpx.AsyncHTTPTransport(),
        )
        await service.send(MESSAGE)

        unauthenticated = httpx.post(
            f"http://127.0.0.1:{port}/v3/mg.example.com/messages",
            data=MESSAGE.as_form(),
            trust_env=False,
        )
        assert unauthenticated.status_code == 401
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)
