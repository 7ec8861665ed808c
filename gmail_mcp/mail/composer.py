"""Builds ComposedMessage values and renders them as RFC 5322 messages."""

import logging
import mimetypes
import os
from email.message import EmailMessage
from email.utils import formatdate, make_msgid, parseaddr

import anyio

from gmail_mcp.mail.types import Attachment, ComposedMessage, SendEmailArgs
from gmail_mcp.protocol.errors import AttachmentError

logger = logging.getLogger(__name__)

#: Used when the extension gives no hint about the content.
FALLBACK_MIME_TYPE = "application/octet-stream"


def guess_mime_type(path: str) -> str:
    """MIME type from the file extension, or FALLBACK_MIME_TYPE."""
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type or FALLBACK_MIME_TYPE


async def read_attachment(path: str) -> Attachment:
    """Read ``path`` fully into memory.

    Raises AttachmentError for any reason the file cannot be read.
    """
    try:
        data = await anyio.Path(path).read_bytes()
    except FileNotFoundError:
        raise AttachmentError(path, "file not found") from None
    except IsADirectoryError:
        raise AttachmentError(path, "is a directory") from None
    except PermissionError:
        raise AttachmentError(path, "permission denied") from None
    except OSError as exc:
        logger.debug("Attachment read failed for %s", path, exc_info=True)
        raise AttachmentError(path, exc.strerror or "unreadable") from None

    attachment = Attachment(
        filename=os.path.basename(path) or "attachment",
        mime_type=guess_mime_type(path),
        data=data,
    )
    logger.debug(
        "Read attachment %s (%s, %d bytes)", attachment.filename, attachment.mime_type, attachment.size
    )
    return attachment


async def compose(args: SendEmailArgs, sender: str) -> ComposedMessage:
    """Assemble the message for ``args``, reading the attachment if any.

    Either the whole message is built or AttachmentError is raised; nothing
    is sent from here.
    """
    attachment = None
    if args.attachment_path is not None:
        attachment = await read_attachment(args.attachment_path)
    return ComposedMessage(
        sender=sender,
        to=args.to,
        subject=args.subject,
        body=args.body,
        attachment=attachment,
    )


def to_mime(message: ComposedMessage) -> EmailMessage:
    """Render ``message`` as an EmailMessage.

    Plain text only when there is no attachment, ``multipart/mixed`` otherwise.
    """
    mime = EmailMessage()
    mime["From"] = message.sender
    mime["To"] = message.to
    mime["Subject"] = message.subject
    mime["Date"] = formatdate(localtime=True)
    _, sender_addr = parseaddr(message.sender)
    domain = sender_addr.rpartition("@")[2] or None
    mime["Message-ID"] = make_msgid(domain=domain)
    mime.set_content(message.body)

    if message.attachment is not None:
        maintype, _, subtype = message.attachment.mime_type.partition("/")
        mime.add_attachment(
            message.attachment.data,
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=message.attachment.filename,
        )
    return mime
