"""Jinja2 rendering of the listing digest."""

import logging
from typing import Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError, select_autoescape

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders the HTML and plain-text bodies of the digest email.

    Templates are loaded from the ``listing_scanner.notifications`` package
    and cached by the Jinja2 environment across renders. Only the HTML body
    is autoescaped and undefined variables are errors.
    """

    def __init__(
        self,
        template_dir: str = "email_templates",
        html_template: str = "listing_digest.html.j2",
        text_template: str = "listing_digest.txt.j2",
    ):
        self.html_template_name = html_template
        self.text_template_name = text_template
        self.env = Environment(
            loader=PackageLoader("listing_scanner.notifications", template_dir),
            autoescape=select_autoescape(enabled_extensions=("html.j2",), default=False),
            undefined=StrictUndefined,
        )

    def render(self, context: Dict) -> Dict[str, str]:
        """Render both bodies.

        Args:
            context: Template variables (see payloads.build_digest_context)

        Returns:
            Dictionary with ``html_body`` and ``text_body``

        Raises:
            NotificationTemplateError: If a template is missing or fails to render
        """
        try:
            html_body = self.env.get_template(self.html_template_name).render(context)
            text_body = self.env.get_template(self.text_template_name).render(context)
        except TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e

        logger.debug(f"Rendered digest for {context.get('listing_count', 0)} listings")
        return {"html_body": html_body, "text_body": text_body}
