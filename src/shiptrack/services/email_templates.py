"""
Email templates for package notifications.

Templates are data: each entry in EMAIL_TEMPLATES names a subject template
and an HTML body file under shiptrack/templates/email. Both are rendered with
Jinja2 from a dict of named slots, so wording changes never touch the
notification logic.

Slots available to every template:
    company_name, recipient_name, recipient_role, tracking_id, tracking_url,
    sender_name, origin, destination, description, weight, status
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"


@dataclass(frozen=True)
class EmailTemplate:
    """Subject line template plus the HTML body file it pairs with."""

    subject: str
    body: str


@dataclass(frozen=True)
class RenderedEmail:
    """A rendered message ready for an email client."""

    subject: str
    html: str


EMAIL_TEMPLATES: Dict[str, EmailTemplate] = {
    "package_created_sender": EmailTemplate(
        subject="Package Created - Package Notification - Tracking ID: {{ tracking_id }}",
        body="package_created.html",
    ),
    "package_created_receiver": EmailTemplate(
        subject="Package Incoming - Package Notification - Tracking ID: {{ tracking_id }}",
        body="package_created.html",
    ),
    "processing_confirmation": EmailTemplate(
        subject="Confirmation that the package is processed",
        body="processing_confirmation.html",
    ),
    "incoming_package": EmailTemplate(
        subject="Notification of incoming package",
        body="incoming_package.html",
    ),
    "status_update": EmailTemplate(
        subject="Updated package status",
        body="status_update.html",
    ),
}


class EmailRenderer:
    """Renders registered templates with Jinja2."""

    def __init__(
        self,
        templates: Optional[Dict[str, EmailTemplate]] = None,
        template_dir: Path = TEMPLATE_DIR,
    ):
        self.templates = templates if templates is not None else EMAIL_TEMPLATES
        self._body_env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
        )
        # Subjects are plain text headers, not HTML
        self._subject_env = Environment(autoescape=False, undefined=StrictUndefined)

    def render(self, name: str, **slots: Any) -> RenderedEmail:
        """
        Render a registered template.

        Args:
            name: Key in the template registry
            **slots: Values for the template's named slots

        Returns:
            RenderedEmail

        Raises:
            KeyError: If no template is registered under name
            jinja2.UndefinedError: If a slot used by the template is missing
        """
        template = self.templates[name]
        subject = self._subject_env.from_string(template.subject).render(**slots)
        html = self._body_env.get_template(template.body).render(**slots)
        return RenderedEmail(subject=subject.strip(), html=html)
