"""Data types for the send_email tool."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SendEmailArgs:
    """Arguments of a send_email call, built only from schema-validated input."""

    to: str
    subject: str
    body: str
    attachment_path: str | None = None

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any]) -> "SendEmailArgs":
        return cls(
            to=arguments["to"],
            subject=arguments["subject"],
            body=arguments["body"],
            attachment_path=arguments.get("attachment_path"),
        )


@dataclass(frozen=True)
class Attachment:
    """A file read fully into memory, ready to be attached."""

    filename: str
    mime_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ComposedMessage:
    """A message ready for delivery.

    Lives only for the duration of one tool call; never persisted.
    """

    sender: str
    to: str
    subject: str
    body: str
    attachment: Attachment | None = None


@dataclass(frozen=True)
class Credential:
    """Opaque secret handed from a CredentialProvider to a MailSender.

    The secret is excluded from ``repr`` so it cannot leak through logging.
    """

    username: str
    secret: str = field(repr=False)
