"""Result type and exceptions for digest delivery."""

from dataclasses import dataclass, field
from typing import List, Optional


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when a digest template cannot be loaded or rendered."""

    pass


class SMTPDeliveryError(NotificationError):
    """Raised when the SMTP server rejects the message or cannot be reached."""

    pass


@dataclass
class NotificationResult:
    """Outcome of one digest send.

    Attributes:
        status: "sent" or "skipped" (failures raise instead)
        listing_count: Number of listings included in the digest
        recipients: Normalized recipient addresses the message went to
        reason: Why the digest was skipped, if it was
    """

    status: str
    listing_count: int = 0
    recipients: List[str] = field(default_factory=list)
    reason: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == "sent"
