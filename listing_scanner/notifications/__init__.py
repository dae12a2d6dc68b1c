"""Email digest of matched listings.

Components:
- NotificationService: renders and sends one digest per run
- TemplateRenderer: Jinja2 HTML and plain-text bodies
- SMTPClient: smtplib wrapper with STARTTLS/implicit TLS
"""

from .models import (
    NotificationError,
    NotificationResult,
    NotificationTemplateError,
    SMTPDeliveryError,
)
from .payloads import build_digest_context, build_listing_payload
from .service import NotificationService
from .smtp_client import SMTPClient, build_sender_address, parse_recipients
from .templates import TemplateRenderer

__all__ = [
    "NotificationService",
    "TemplateRenderer",
    "SMTPClient",
    "build_digest_context",
    "build_listing_payload",
    "build_sender_address",
    "parse_recipients",
    "NotificationResult",
    "NotificationError",
    "NotificationTemplateError",
    "SMTPDeliveryError",
]
