from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.networks import validate_email

from formrelay.core.constants import SUBMIT_SEGMENT


def _check_address(value: str) -> str:
    # "Sales <sales@example.com>" is accepted and passed to Mailgun as written
    validate_email(value)
    return value


MailAddress = Annotated[str, AfterValidator(_check_address)]


class FormConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str | None = None
    notify_to: list[MailAddress] = Field(alias="notifyTo", min_length=1)
    from_email: MailAddress | None = Field(default=None, alias="fromEmail")
    thank_you_url: str | None = Field(default=None, alias="thankYouUrl")
    subject: str | None = None
    enabled: bool = True


class DefaultsConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    default_notify_to: list[MailAddress] = Field(default_factory=list, alias="defaultNotifyTo")
    default_from_email: MailAddress | None = Field(default=None, alias="defaultFromEmail")
    default_thank_you_url: str | None = Field(default=None, alias="defaultThankYouUrl")


class FormsCatalog(BaseModel):
    """Named form configurations plus the defaults they fall back to."""

    model_config = ConfigDict(frozen=True)

    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    forms: dict[str, FormConfig] = Field(default_factory=dict)

    def get(self, key: str | None) -> FormConfig | None:
        if not key:
            return None
        return self.forms.get(key)

    def resolve(self, path: str) -> FormConfig | None:
        return self.get(form_key_from_path(path))


def form_key_from_path(path: str) -> str | None:
    """Return ``name`` for paths shaped like ``/name/submit``."""
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) >= 2 and segments[1] == SUBMIT_SEGMENT:
        return segments[0]
    return None
