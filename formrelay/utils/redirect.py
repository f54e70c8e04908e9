"""Thank-you redirect resolution."""

from __future__ import annotations

import logging

import httpx

from formrelay.core.constants import DEFAULT_THANK_YOU_PATH, REDIRECT_FIELD
from formrelay.core.exceptions import RedirectResolutionError
from formrelay.models.form_config import DefaultsConfig, FormConfig
from formrelay.models.submission import InboundSubmission

_LOGGER = logging.getLogger(__name__)


def _join(base: str, target: str) -> str:
    try:
        return str(httpx.URL(base).join(target))
    except httpx.InvalidURL as exc:
        raise RedirectResolutionError(f"Invalid redirect target: {target}") from exc


def _origin(url: httpx.URL) -> str:
    return f"{url.scheme}://{url.netloc.decode('ascii')}"


def _is_root_relative(target: str) -> bool:
    return target.startswith("/") and not target.startswith("//")


def referer_origin(referer: str | None) -> str:
    """Return ``scheme://host[:port]`` of an absolute ``Referer`` header."""
    if not referer:
        raise RedirectResolutionError("Missing Referer header")
    try:
        url = httpx.URL(referer)
    except httpx.InvalidURL as exc:
        raise RedirectResolutionError(f"Malformed Referer header: {referer}") from exc
    if not url.scheme or not url.host:
        raise RedirectResolutionError(f"Referer is not an absolute URL: {referer}")
    return _origin(url)


def _configured_target(target: str, submission: InboundSubmission) -> str:
    if not _is_root_relative(target):
        return _join(submission.url, target)
    try:
        origin = referer_origin(submission.referer)
    except RedirectResolutionError as exc:
        _LOGGER.debug("Falling back to request origin", extra={"reason": str(exc)})
        origin = _origin(httpx.URL(submission.url))
    return _join(origin, target)


def resolve_redirect(
    submission: InboundSubmission,
    config: FormConfig | None,
    defaults: DefaultsConfig,
) -> str:
    """Pick the absolute thank-you location for a relayed submission.

    Precedence: ``_redirect`` field, the form's ``thankYouUrl``, the
    ``?redirect=`` query parameter, the default thank-you URL, then
    ``/thank-you``. Root-relative configured URLs take their origin from the
    ``Referer`` header when it is a usable absolute URL.
    """
    explicit = submission.data.get(REDIRECT_FIELD)
    if explicit:
        return _join(submission.url, explicit)

    if config is not None and config.thank_you_url:
        return _configured_target(config.thank_you_url, submission)

    if submission.query_redirect:
        return _join(submission.url, submission.query_redirect)

    if defaults.default_thank_you_url:
        return _configured_target(defaults.default_thank_you_url, submission)

    return _join(submission.url, DEFAULT_THANK_YOU_PATH)
