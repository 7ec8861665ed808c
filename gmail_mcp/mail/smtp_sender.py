"""Mail delivery over SMTP (Gmail by default)."""

import logging
from typing import Protocol, runtime_checkable

import aiosmtplib

from gmail_mcp.mail.composer import to_mime
from gmail_mcp.mail.types import ComposedMessage, Credential
from gmail_mcp.protocol.errors import AuthError, DeliveryError

logger = logging.getLogger(__name__)


@runtime_checkable
class MailSender(Protocol):
    """Delivers a composed message.

    Returns a short confirmation (e.g. the server's reply); raises
    DeliveryError, or AuthError when the credential was rejected.
    """

    async def send(self, message: ComposedMessage, credential: Credential) -> str: ...


class SmtpMailSender:
    """Sends through an authenticated SMTP relay.

    Port 465 uses implicit TLS; set ``start_tls`` for port 587 style servers.
    """

    def __init__(
        self,
        host: str = "smtp.gmail.com",
        port: int = 465,
        *,
        start_tls: bool = False,
        timeout: float = 60.0,
    ) -> None:
        self._host = host
        self._port = port
        self._start_tls = start_tls
        self._timeout = timeout

    async def send(self, message: ComposedMessage, credential: Credential) -> str:
        mime = to_mime(message)
        try:
            _, reply = await aiosmtplib.send(
                mime,
                hostname=self._host,
                port=self._port,
                username=credential.username,
                password=credential.secret,
                use_tls=not self._start_tls,
                start_tls=self._start_tls,
                timeout=self._timeout,
            )
        except aiosmtplib.SMTPAuthenticationError as exc:
            logger.warning("SMTP authentication rejected (%s): %s", exc.code, exc.message)
            raise AuthError("SMTP server rejected the credentials") from exc
        except aiosmtplib.SMTPTimeoutError as exc:
            logger.warning("SMTP timeout talking to %s:%d: %s", self._host, self._port, exc)
            raise DeliveryError(f"timed out talking to {self._host}:{self._port}") from exc
        except aiosmtplib.SMTPConnectError as exc:
            logger.warning("SMTP connect to %s:%d failed: %s", self._host, self._port, exc)
            raise DeliveryError(f"could not connect to {self._host}:{self._port}") from exc
        except aiosmtplib.SMTPRecipientsRefused as exc:
            logger.warning("SMTP recipients refused: %s", exc.recipients)
            raise DeliveryError(f"recipient {message.to!r} was refused") from exc
        except aiosmtplib.SMTPResponseException as exc:
            logger.warning("SMTP error %s: %s", exc.code, exc.message)
            raise DeliveryError(f"SMTP server returned error {exc.code}") from exc
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.warning("SMTP delivery failed: %s", exc, exc_info=True)
            raise DeliveryError("SMTP delivery failed") from exc

        logger.info("Delivered message to %s via %s:%d", message.to, self._host, self._port)
        return reply
