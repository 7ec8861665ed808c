"""Server configuration read from the environment (after ``load_dotenv()``)."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from gmail_mcp.protocol.errors import FatalStartupError


@dataclass(frozen=True)
class ServerConfig:
    """Settings for the SMTP transport and its credential."""

    username: str
    app_password: str = field(repr=False)
    from_address: str = ""
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    smtp_start_tls: bool = False
    smtp_timeout: float = 60.0

    @property
    def sender(self) -> str:
        return self.from_address or self.username

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        """Build ServerConfig from environment variables.

        Raises FatalStartupError when a required value is missing or malformed.
        """
        env = os.environ if environ is None else environ

        missing = [key for key in ("GMAIL_USERNAME", "GMAIL_APP_PASSWORD") if not env.get(key)]
        if missing:
            raise FatalStartupError(f"Missing required configuration: {', '.join(missing)}")

        try:
            port = int(env.get("SMTP_PORT", "465"))
        except ValueError:
            raise FatalStartupError(f"SMTP_PORT must be an integer, got {env['SMTP_PORT']!r}") from None
        try:
            timeout = float(env.get("SMTP_TIMEOUT_SECONDS", "60"))
        except ValueError:
            raise FatalStartupError(
                f"SMTP_TIMEOUT_SECONDS must be a number, got {env['SMTP_TIMEOUT_SECONDS']!r}"
            ) from None

        return cls(
            username=env["GMAIL_USERNAME"],
            app_password=env["GMAIL_APP_PASSWORD"],
            from_address=env.get("GMAIL_FROM_ADDRESS", ""),
            smtp_host=env.get("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=port,
            smtp_start_tls=env.get("SMTP_STARTTLS", "false").lower() == "true",
            smtp_timeout=timeout,
        )
