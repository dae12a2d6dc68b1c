"""Digest notification for matched listings.

One run produces at most one email: every matched listing of the run in a
single digest, sent to the configured recipient list.
"""

import logging
from email.message import EmailMessage
from typing import Optional, Sequence

from listing_scanner.config.environment import EnvironmentConfig
from listing_scanner.config.models import EmailConfig
from listing_scanner.domain.models import AnnotatedListing
from listing_scanner.logging import get_logger

from .models import NotificationResult
from .payloads import build_digest_context
from .smtp_client import SMTPClient, build_sender_address, parse_recipients
from .templates import TemplateRenderer

logger = get_logger(__name__, component="notification")


class NotificationService:
    """Renders and delivers the listing digest.

    There is no retry. NotificationTemplateError, SMTPDeliveryError and
    invalid recipient errors propagate to the caller.
    """

    def __init__(
        self,
        template_renderer: Optional[TemplateRenderer] = None,
        smtp_client: Optional[SMTPClient] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.template_renderer = template_renderer or TemplateRenderer()
        self.smtp_client = smtp_client or SMTPClient()
        self.logger = logger_instance or logger

    def build_message(
        self,
        listings: Sequence[AnnotatedListing],
        email_config: EmailConfig,
        env_config: EnvironmentConfig,
    ) -> EmailMessage:
        """Assemble the multipart digest (plain text with an HTML alternative).

        Raises:
            ValueError: If the recipient list contains an invalid address
            NotificationTemplateError: If rendering fails
        """
        recipients = parse_recipients(email_config.recipients)
        rendered = self.template_renderer.render(
            build_digest_context(listings, email_config.subject)
        )

        message = EmailMessage()
        message["Subject"] = email_config.subject
        message["From"] = build_sender_address(env_config)
        message["To"] = ", ".join(recipients)
        message.set_content(rendered["text_body"])
        message.add_alternative(rendered["html_body"], subtype="html")
        return message

    def send_digest(
        self,
        listings: Sequence[AnnotatedListing],
        email_config: EmailConfig,
        env_config: EnvironmentConfig,
    ) -> NotificationResult:
        """Send one digest of ``listings``, in the order given.

        An empty list is skipped unless ``email_config.notify_when_empty``
        is set.

        Args:
            listings: Matched listings for this run
            email_config: Recipients, subject and TLS preference
            env_config: SMTP connection settings

        Returns:
            NotificationResult with status "sent" or "skipped"

        Raises:
            NotificationTemplateError: If rendering fails
            SMTPDeliveryError: If delivery fails
        """
        if not listings and not email_config.notify_when_empty:
            self.logger.info(
                "No matching listings, skipping digest",
                extra={"event": "notification.skip", "reason": "no_matches"},
            )
            return NotificationResult(status="skipped", reason="no_matches")

        message = self.build_message(listings, email_config, env_config)
        recipients = [address.strip() for address in message["To"].split(",")]

        self.smtp_client.send(message, env_config, email_config.use_tls)

        self.logger.info(
            f"Digest with {len(listings)} listings sent to {', '.join(recipients)}",
            extra={
                "event": "notification.send.success",
                "listing_count": len(listings),
                "recipients": recipients,
            },
        )
        return NotificationResult(
            status="sent", listing_count=len(listings), recipients=recipients
        )
