# Overview: Outbound mail collaborator used to deliver validation codes.

from __future__ import annotations

import smtplib
from email.message import EmailMessage

from flask import current_app

from ..errors import InternalError


EXTENSION_KEY = "managefy_mail"


class MailClient:
    """
    SMTP client with a single operation, send_code.

    Sending the same code twice is harmless for the core, so callers never
    need to track whether a previous attempt went out. Without a configured
    host the code is only logged (development mode).
    """

    def __init__(
        self,
        host: str | None,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        sender: str = "no-reply@managefy.local",
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "MailClient":
        return cls(
            host=config.get("MAIL_HOST"),
            port=config.get("MAIL_PORT", 587),
            username=config.get("MAIL_USERNAME"),
            password=config.get("MAIL_PASSWORD"),
            sender=config.get("MAIL_SENDER", "no-reply@managefy.local"),
            use_tls=config.get("MAIL_USE_TLS", True),
            timeout=config.get("MAIL_TIMEOUT_SECONDS", 10.0),
        )

    def _build_message(self, to_email: str, code: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = "Managefy - Verify your account"
        message["From"] = self.sender
        message["To"] = to_email
        message.set_content(
            f"Your Managefy validation code is: {code}\n\n"
            "It expires in 15 minutes. If you didn't request it, ignore this email."
        )
        return message

    def send_code(self, to_email: str, code: str) -> None:
        if not self.host:
            current_app.logger.info("MAIL_HOST not configured; validation code for %s is %s", to_email, code)
            return

        message = self._build_message(to_email, code)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            current_app.logger.exception("Failed to send validation code to %s", to_email)
            raise InternalError("Couldn't send the validation email") from exc


def init_mail(app) -> None:
    app.extensions[EXTENSION_KEY] = MailClient.from_config(app.config)


def get_mail_client():
    return current_app.extensions[EXTENSION_KEY]
