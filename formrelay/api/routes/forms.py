from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from formrelay.api.deps import get_submission_service
from formrelay.core.constants import CLIENT_IP_HEADER, REDIRECT_QUERY_PARAM
from formrelay.core.exceptions import FormRelayError
from formrelay.models.submission import (
    FormDisabled,
    HoneypotDropped,
    InboundSubmission,
    Redirected,
)
from formrelay.services.submission import SubmissionService
from formrelay.utils.email import render_thank_you_page
from formrelay.utils.form_data import parse_form_data

_LOGGER = logging.getLogger(__name__)

router = APIRouter()

_THANK_YOU_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get(CLIENT_IP_HEADER)
    if forwarded:
        return forwarded
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def _error(message: str, status_code: int, headers: dict[str, str] | None = None) -> Response:
    return PlainTextResponse(f"Error: {message}", status_code=status_code, headers=headers)


async def _relay(request: Request, service: SubmissionService) -> Response:
    client_ip = _client_ip(request)
    _LOGGER.info(
        "Submission received",
        extra={"path": request.url.path, "client_ip": client_ip},
    )
    try:
        service.ensure_credentials()
        data = await parse_form_data(request)
        outcome = await service.process(
            InboundSubmission(
                data=data,
                path=request.url.path,
                url=str(request.url),
                query_redirect=request.query_params.get(REDIRECT_QUERY_PARAM),
                referer=request.headers.get("referer"),
                client_ip=client_ip,
            )
        )
    except FormRelayError as exc:
        _LOGGER.warning(
            "Form submission failed",
            extra={"path": request.url.path, "error": str(exc)},
        )
        return _error(str(exc), status.HTTP_400_BAD_REQUEST)
    except Exception as exc:  # noqa: BLE001
        _LOGGER.exception(
            "Form submission failed unexpectedly",
            extra={"path": request.url.path},
        )
        return _error(str(exc) or type(exc).__name__, status.HTTP_400_BAD_REQUEST)

    if isinstance(outcome, Redirected):
        return RedirectResponse(outcome.location, status_code=status.HTTP_303_SEE_OTHER)
    if isinstance(outcome, HoneypotDropped):
        return PlainTextResponse("OK", status_code=status.HTTP_200_OK)
    if isinstance(outcome, FormDisabled):
        return _error(
            f"Form '{outcome.form}' is disabled", status.HTTP_503_SERVICE_UNAVAILABLE
        )

    headers = {}
    if outcome.retry_after is not None and outcome.retry_after >= 0:
        headers["Retry-After"] = str(outcome.retry_after)
    return _error(outcome.message, status.HTTP_400_BAD_REQUEST, headers)


@router.api_route("/thank-you", methods=_THANK_YOU_METHODS, response_class=HTMLResponse)
async def thank_you() -> HTMLResponse:
    return HTMLResponse(render_thank_you_page())


@router.post("/submit")
async def submit(
    request: Request,
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> Response:
    return await _relay(request, service)


@router.post("/{form_name}/submit")
async def submit_named_form(
    form_name: str,
    request: Request,
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> Response:
    return await _relay(request, service)
