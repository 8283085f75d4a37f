"""
API routes.

Public:
    GET  /api/health
    GET  /api/tracking/<tracking_id>
    POST /api/auth/signin

Admin (Authorization: Bearer <token>):
    POST   /api/auth/signout
    GET    /api/packages
    POST   /api/packages
    GET    /api/packages/summary
    PUT    /api/packages/<tracking_id>/location
    DELETE /api/packages/<tracking_id>

Request and response bodies use camelCase keys; the service layer uses
snake_case.
"""

import logging
from typing import Any, Dict

from flask import Blueprint, jsonify, request

from shiptrack.services import package_service
from shiptrack.services.auth_service import AdminSession
from shiptrack.services.exceptions import ValidationError
from shiptrack.services.logging_utils import log_operation
from shiptrack.utils.constants import ERROR_BODY_NOT_OBJECT
from shiptrack.utils.datetime_utils import to_iso

from .auth import app_services, require_admin

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")

# camelCase request field -> service field
CREATE_FIELDS = {
    "senderName": "sender_name",
    "senderEmail": "sender_email",
    "senderAddress": "sender_address",
    "senderPhone": "sender_phone",
    "receiverName": "receiver_name",
    "receiverEmail": "receiver_email",
    "receiverAddress": "receiver_address",
    "receiverPhone": "receiver_phone",
    "packageDescription": "package_description",
    "packageQuantity": "package_quantity",
    "origin": "origin",
    "destination": "destination",
    "weight": "weight",
    "totalCharges": "total_charges",
}


def _json_body() -> Dict[str, Any]:
    """Parsed JSON object body; a missing body counts as empty."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError([ERROR_BODY_NOT_OBJECT])
    return body


def _package_payload(package: Dict[str, Any]) -> Dict[str, Any]:
    """Admin/public package representation."""
    return {
        "id": package["tracking_id"],
        "trackingId": package["tracking_id"],
        "senderName": package["sender_name"],
        "senderEmail": package["sender_email"],
        "senderAddress": package["sender_address"],
        "senderPhone": package["sender_phone"],
        "receiverName": package["receiver_name"],
        "receiverEmail": package["receiver_email"],
        "receiverAddress": package["receiver_address"],
        "receiverPhone": package["receiver_phone"],
        "packageDescription": package["package_description"],
        "packageQuantity": package["package_quantity"],
        "origin": package["origin"],
        "destination": package["destination"],
        "weight": package["weight"],
        "totalCharges": package["total_charges"],
        "status": package["status"],
        "statusCategory": package["status_category"],
        "createdAt": package["created_at"],
        "updatedAt": package["updated_at"],
    }


@api.get("/health")
def health():
    return jsonify({"status": "ok"})


# ============================================================================
# Auth
# ============================================================================


@api.post("/auth/signin")
def sign_in():
    body = _json_body()
    session = app_services().sessions.sign_in(body.get("username", ""), body.get("password", ""))
    return jsonify(
        {
            "success": True,
            "token": session.token,
            "username": session.username,
            "expiresAt": to_iso(session.expires_at),
        }
    )


@api.post("/auth/signout")
@require_admin
def sign_out(admin_session: AdminSession):
    app_services().sessions.sign_out(admin_session.token)
    return jsonify({"success": True, "message": "Signed out"})


# ============================================================================
# Packages
# ============================================================================


@api.get("/tracking/<tracking_id>")
def get_tracking(tracking_id: str):
    info = package_service.get_tracking_info(tracking_id)
    payload = _package_payload(info)
    payload["locationHistory"] = info["timeline"]
    return jsonify(payload)


@api.get("/packages")
@require_admin
def list_packages(admin_session: AdminSession):
    packages = package_service.list_packages()
    return jsonify([_package_payload(p) for p in packages])


@api.get("/packages/summary")
@require_admin
def package_summary(admin_session: AdminSession):
    return jsonify(package_service.get_status_summary())


@api.post("/packages")
@require_admin
def create_package(admin_session: AdminSession):
    body = _json_body()
    data = {field: body.get(key) for key, field in CREATE_FIELDS.items()}

    result = package_service.create_package(data, dispatcher=app_services().dispatcher)
    log_operation(
        logger,
        operation="api_create_package",
        outcome="success",
        tracking_id=result.tracking_id,
        username=admin_session.username,
    )
    return (
        jsonify(
            {
                "success": True,
                "trackingId": result.tracking_id,
                "message": "Package created successfully",
                "emailStatus": result.email_status,
            }
        ),
        201,
    )


@api.put("/packages/<tracking_id>/location")
@require_admin
def update_location(tracking_id: str, admin_session: AdminSession):
    body = _json_body()
    result = package_service.update_package_status(
        tracking_id,
        body.get("status"),
        location=body.get("location"),
        description=body.get("description"),
        dispatcher=app_services().dispatcher,
    )
    log_operation(
        logger,
        operation="api_update_location",
        outcome="success",
        tracking_id=tracking_id,
        username=admin_session.username,
    )
    return jsonify(
        {
            "success": True,
            "message": "Package location updated successfully",
            "status": result.status,
            "notificationClass": result.notification_class.value,
            "event": result.event,
            "emailStatus": result.email_status,
        }
    )


@api.delete("/packages/<tracking_id>")
@require_admin
def delete_package(tracking_id: str, admin_session: AdminSession):
    deleted = package_service.delete_package(tracking_id)
    log_operation(
        logger,
        operation="api_delete_package",
        outcome="deleted" if deleted else "already_absent",
        tracking_id=tracking_id,
        username=admin_session.username,
    )
    return jsonify({"success": True, "message": "Package deleted successfully"})
