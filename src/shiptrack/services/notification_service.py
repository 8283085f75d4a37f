"""
Notification Service - email notifications for package events.

The dispatcher maps a NotificationClass to the set of emails to send:

- PACKAGE_CREATED: sender (if an address is present) and receiver
- FIRST_PROCESSING: processing confirmation to the sender and an incoming
  package notice to the receiver, each only if the address is present
- ROUTINE_UPDATE: status update to the receiver only

Each email is attempted once and independently. A failure of any kind while
rendering or sending is logged and recorded in the returned DispatchResult;
it never propagates, so a failed email cannot undo a committed package change.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from shiptrack.services.email_templates import EmailRenderer
from shiptrack.services.exceptions import NotificationError
from shiptrack.services.logging_utils import get_service_logger, log_operation
from shiptrack.services.status_evaluator import NotificationClass
from shiptrack.utils.constants import (
    CREATED_EVENT_STATUS,
    DEFAULT_COMPANY_NAME,
    DEFAULT_FRONTEND_URL,
    DEFAULT_RECIPIENT_NAME,
)

logger = get_service_logger(__name__)


@dataclass
class DispatchResult:
    """Outcome of one dispatch, reported to API callers as emailStatus."""

    notification_class: NotificationClass
    attempted: int = 0
    sent: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "notificationClass": self.notification_class.value,
            "attempted": self.attempted,
            "sent": self.sent,
            "errors": list(self.errors),
        }


class NotificationDispatcher:
    """Sends the email set for a notification class through an email client."""

    def __init__(
        self,
        email_client,
        renderer: Optional[EmailRenderer] = None,
        company_name: str = DEFAULT_COMPANY_NAME,
        frontend_url: str = DEFAULT_FRONTEND_URL,
    ):
        self.email_client = email_client
        self.renderer = renderer or EmailRenderer()
        self.company_name = company_name
        self.frontend_url = frontend_url.rstrip("/")

    @classmethod
    def from_config(cls, config, email_client) -> "NotificationDispatcher":
        return cls(
            email_client,
            company_name=config.company_name,
            frontend_url=config.frontend_url,
        )

    def tracking_url(self, tracking_id: str) -> str:
        return f"{self.frontend_url}/track?id={tracking_id}"

    def _slots(self, package: Dict[str, Any], status: str) -> Dict[str, Any]:
        """Template slots shared by every message about a package."""
        return {
            "company_name": self.company_name,
            "tracking_id": package["tracking_id"],
            "tracking_url": self.tracking_url(package["tracking_id"]),
            "sender_name": package.get("sender_name") or "Sender",
            "origin": package.get("origin", ""),
            "destination": package.get("destination", ""),
            "description": package.get("package_description", ""),
            "weight": package.get("weight", 0),
            "status": status,
        }

    def _send(
        self,
        result: DispatchResult,
        template_name: str,
        to: Optional[str],
        slots: Dict[str, Any],
    ) -> None:
        """
        Render and send one email; missing addresses are skipped.

        Any failure while rendering or sending is recorded on result and
        logged. The package change has already been committed at this point,
        so nothing is raised to the caller.
        """
        if not to:
            return

        result.attempted += 1
        try:
            message = self.renderer.render(template_name, **slots)
            self.email_client.send(to, message.subject, message.html)
        except NotificationError as e:
            self._record_failure(result, template_name, to, slots, "send_failed", str(e))
            return
        except Exception as e:
            error = NotificationError(to, f"{type(e).__name__}: {e}")
            self._record_failure(result, template_name, to, slots, "send_error", str(error))
            return

        result.sent += 1
        log_operation(
            logger,
            operation="send_email",
            outcome="sent",
            tracking_id=slots["tracking_id"],
            template=template_name,
            recipient=to,
        )

    def _record_failure(
        self,
        result: DispatchResult,
        template_name: str,
        to: str,
        slots: Dict[str, Any],
        outcome: str,
        error: str,
    ) -> None:
        result.errors.append(error)
        log_operation(
            logger,
            operation="send_email",
            outcome=outcome,
            level=logging.WARNING,
            tracking_id=slots["tracking_id"],
            template=template_name,
            recipient=to,
            error=error,
        )

    def _log_fallback(self, result: DispatchResult, package: Dict[str, Any], status: str) -> None:
        """Record what should have been delivered when any send failed."""
        log_operation(
            logger,
            operation="dispatch_notifications",
            outcome="fallback",
            level=logging.WARNING,
            tracking_id=package["tracking_id"],
            notification_class=result.notification_class.value,
            new_status=status,
            sender_email=package.get("sender_email") or None,
            receiver_email=package.get("receiver_email") or None,
            failed=len(result.errors),
        )

    def dispatch_package_created(self, package: Dict[str, Any]) -> DispatchResult:
        """
        Send creation notices for a newly created package.

        Args:
            package: Package dict (Package.to_dict())

        Returns:
            DispatchResult
        """
        result = DispatchResult(NotificationClass.PACKAGE_CREATED)
        slots = self._slots(package, CREATED_EVENT_STATUS)

        self._send(
            result,
            "package_created_sender",
            package.get("sender_email"),
            {
                **slots,
                "recipient_role": "sender",
                "recipient_name": package.get("sender_name") or DEFAULT_RECIPIENT_NAME,
            },
        )
        self._send(
            result,
            "package_created_receiver",
            package.get("receiver_email"),
            {
                **slots,
                "recipient_role": "receiver",
                "recipient_name": package.get("receiver_name") or DEFAULT_RECIPIENT_NAME,
            },
        )

        if not result.success:
            self._log_fallback(result, package, CREATED_EVENT_STATUS)
        return result

    def dispatch_status_update(
        self,
        notification_class: NotificationClass,
        package: Dict[str, Any],
        new_status: str,
    ) -> DispatchResult:
        """
        Send the email set for a classified status update.

        Args:
            notification_class: FIRST_PROCESSING or ROUTINE_UPDATE
            package: Package dict (Package.to_dict()) after the update
            new_status: Status label as requested, for display

        Returns:
            DispatchResult
        """
        result = DispatchResult(notification_class)
        slots = self._slots(package, new_status)
        sender_slots = {
            **slots,
            "recipient_role": "sender",
            "recipient_name": package.get("sender_name") or DEFAULT_RECIPIENT_NAME,
        }
        receiver_slots = {
            **slots,
            "recipient_role": "receiver",
            "recipient_name": package.get("receiver_name") or DEFAULT_RECIPIENT_NAME,
        }

        if notification_class is NotificationClass.FIRST_PROCESSING:
            self._send(
                result, "processing_confirmation", package.get("sender_email"), sender_slots
            )
            self._send(result, "incoming_package", package.get("receiver_email"), receiver_slots)
        else:
            self._send(result, "status_update", package.get("receiver_email"), receiver_slots)

        if not result.success:
            self._log_fallback(result, package, new_status)
        return result
