from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class InboundSubmission:
    """Everything the relay needs from one inbound request."""

    data: dict[str, str]
    path: str
    url: str
    query_redirect: str | None = None
    referer: str | None = None
    client_ip: str = "unknown"


@dataclass(frozen=True)
class OutboundEmail:
    to: str
    sender: str
    subject: str
    html: str
    text: str

    def as_form(self) -> dict[str, str]:
        return {
            "from": self.sender,
            "to": self.to,
            "subject": self.subject,
            "html": self.html,
            "text": self.text,
        }


@dataclass(frozen=True)
class Redirected:
    location: str
    recipients: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class HoneypotDropped:
    pass


@dataclass(frozen=True)
class FormDisabled:
    form: str


@dataclass(frozen=True)
class Rejected:
    message: str
    retry_after: int | None = None


SubmissionOutcome = Union[Redirected, HoneypotDropped, FormDisabled, Rejected]
