"""
Email clients used by the notification dispatcher.

- ResendEmailClient sends through the Resend HTTP API with httpx.
- LoggingEmailClient writes messages to the log; used when no API key is
  configured so local setups still show what would have been sent.

Both expose send(to, subject, html) and raise NotificationError on failure.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from shiptrack.services.exceptions import NotificationError
from shiptrack.utils.constants import DEFAULT_EMAIL_TIMEOUT_SECONDS, RESEND_API_URL

logger = logging.getLogger(__name__)


class ResendEmailClient:
    """Email client for the Resend API (POST /emails)."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        base_url: str = RESEND_API_URL,
        timeout: float = DEFAULT_EMAIL_TIMEOUT_SECONDS,
        http_client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    def send(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        """
        Send one email.

        Returns:
            Dict with the provider's message id

        Raises:
            NotificationError: On transport errors or non-2xx responses
        """
        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            if self._http_client is not None:
                response = self._http_client.post(
                    f"{self.base_url}/emails", headers=headers, json=payload, timeout=self.timeout
                )
            else:
                with httpx.Client() as client:
                    response = client.post(
                        f"{self.base_url}/emails",
                        headers=headers,
                        json=payload,
                        timeout=self.timeout,
                    )
        except httpx.HTTPError as e:
            raise NotificationError(to, f"transport error: {e}") from e
        except (httpx.InvalidURL, ValueError) as e:
            # e.g. a non-ASCII API key cannot be encoded into the header
            raise NotificationError(to, f"invalid request: {e}") from e

        if response.status_code >= 300:
            logger.error(f"Resend send failed: {response.status_code} - {response.text}")
            raise NotificationError(to, f"Resend API error: {response.status_code}")

        try:
            message_id = response.json().get("id")
        except ValueError:
            message_id = None
        logger.info(f"Email sent to {to}: {message_id}")
        return {"id": message_id}


class LoggingEmailClient:
    """Fallback client that logs messages instead of sending them."""

    def send(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        logger.info(f"Email (not sent, no provider configured) to {to}: {subject}")
        return {"id": None}


def build_email_client(config) -> Any:
    """Resend client when an API key is configured, logging client otherwise."""
    if config.email_enabled:
        return ResendEmailClient(
            api_key=config.resend_api_key,
            sender=config.company_email,
            timeout=config.email_timeout,
        )
    logger.warning("RESEND_API_KEY not set - emails will be logged, not sent")
    return LoggingEmailClient()
