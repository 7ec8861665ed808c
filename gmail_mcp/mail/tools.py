"""The ``send_email`` tool and the registry that exposes it."""

import logging
from typing import Any

from gmail_mcp.mail.composer import compose
from gmail_mcp.mail.credentials import CredentialProvider, InvalidatingCredentialProvider
from gmail_mcp.mail.smtp_sender import MailSender
from gmail_mcp.mail.types import SendEmailArgs
from gmail_mcp.protocol.errors import AuthError
from gmail_mcp.protocol.registry import Param, Tool, ToolRegistry

logger = logging.getLogger(__name__)

SEND_EMAIL = "send_email"

SEND_EMAIL_PARAMS: tuple[Param, ...] = (
    Param("to", "Recipient email address", min_length=1, format="email", single_line=True),
    Param("subject", "Email subject", single_line=True),
    Param("body", "Plain text email body"),
    Param(
        "attachment_path",
        "Absolute path to a file to attach (optional)",
        required=False,
    ),
)


class SendEmailHandler:
    """Compose → acquire credential → send.

    The attachment is read before any credential or network work, so an
    unreadable file never triggers a login or a delivery attempt.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        sender: MailSender,
        from_address: str,
    ) -> None:
        self._credentials = credentials
        self._sender = sender
        self._from_address = from_address

    async def __call__(self, arguments: dict[str, Any]) -> str:
        args = SendEmailArgs.from_arguments(arguments)
        message = await compose(args, self._from_address)
        credential = await self._credentials.acquire()
        try:
            reply = await self._sender.send(message, credential)
        except AuthError:
            if isinstance(self._credentials, InvalidatingCredentialProvider):
                self._credentials.invalidate()
            raise

        logger.info("Sent email to %s: %r", args.to, args.subject)
        text = f"Email sent successfully to {args.to}."
        if message.attachment is not None:
            text += f" Attached {message.attachment.filename} ({message.attachment.size} bytes)."
        if reply:
            text += f" Server reply: {reply}"
        return text


def send_email_tool(
    credentials: CredentialProvider,
    sender: MailSender,
    from_address: str,
) -> Tool:
    return Tool(
        name=SEND_EMAIL,
        description="Send an email with an optional attachment via Gmail",
        params=SEND_EMAIL_PARAMS,
        handler=SendEmailHandler(credentials, sender, from_address),
    )


def build_registry(
    credentials: CredentialProvider,
    sender: MailSender,
    from_address: str,
) -> ToolRegistry:
    """The server's fixed tool set."""
    return ToolRegistry([send_email_tool(credentials, sender, from_address)])
