"""Thin smtplib wrapper used to deliver the digest."""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, List, Optional

from email_validator import EmailNotValidError, validate_email

from listing_scanner.config.environment import EnvironmentConfig

from .models import SMTPDeliveryError

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


class SMTPClient:
    """Sends EmailMessages over SMTP.

    Port 465 uses implicit TLS; any other port connects in plain text and
    upgrades with STARTTLS when ``use_tls`` is set. The smtplib classes can be
    replaced through the factory arguments for testing.
    """

    def __init__(
        self,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(
        self,
        message: EmailMessage,
        env_config: EnvironmentConfig,
        use_tls: bool = True,
    ) -> None:
        """Deliver ``message`` once.

        Raises:
            SMTPDeliveryError: On any SMTP or network failure
        """
        smtp = None
        try:
            if env_config.smtp_port == IMPLICIT_TLS_PORT:
                logger.debug(
                    f"Connecting to {env_config.smtp_host}:{env_config.smtp_port} with implicit TLS"
                )
                smtp = self.smtp_ssl_factory(
                    env_config.smtp_host,
                    env_config.smtp_port,
                    context=ssl.create_default_context(),
                )
            else:
                logger.debug(f"Connecting to {env_config.smtp_host}:{env_config.smtp_port}")
                smtp = self.smtp_factory(env_config.smtp_host, env_config.smtp_port)
                if use_tls:
                    smtp.starttls(context=ssl.create_default_context())

            if env_config.smtp_user and env_config.smtp_pass:
                smtp.login(env_config.smtp_user, env_config.smtp_pass)

            smtp.send_message(message)
            logger.debug(f"Message sent to {message['To']}")

        except smtplib.SMTPException as e:
            error_msg = f"SMTP error during message delivery: {e}"
            logger.error(error_msg)
            raise SMTPDeliveryError(error_msg) from e
        except OSError as e:
            error_msg = f"Network error during SMTP connection: {e}"
            logger.error(error_msg)
            raise SMTPDeliveryError(error_msg) from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError) as e:
                    logger.warning(f"Error closing SMTP connection: {e}")


def parse_recipients(recipient_string: str) -> List[str]:
    """Split a comma-separated address list and validate each entry.

    Empty entries (e.g. from a trailing comma) are ignored.

    Raises:
        ValueError: If an address is invalid or none is given
    """
    recipients = []
    for email in (part.strip() for part in recipient_string.split(",")):
        if not email:
            continue
        try:
            recipients.append(validate_email(email, check_deliverability=False).normalized)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid recipient address '{email}' - {e}") from e

    if not recipients:
        raise ValueError("No valid recipient addresses configured")
    return recipients


def build_sender_address(env_config: EnvironmentConfig) -> str:
    """``Name <SMTP_USER>``, or ``Name <noreply@SMTP_HOST>`` without credentials."""
    sender_email = env_config.smtp_user or f"noreply@{env_config.smtp_host}"
    return f"{env_config.smtp_sender_name} <{sender_email}>"
