"""Request authentication helpers for admin routes."""

from functools import wraps
from typing import Optional

from flask import current_app, request

from shiptrack.services.auth_service import AdminSession


def app_services():
    """Collaborators registered by create_app."""
    from .app import EXTENSION_KEY

    return current_app.extensions[EXTENSION_KEY]


def bearer_token() -> Optional[str]:
    """Token from 'Authorization: Bearer <token>', or None."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def require_admin(view):
    """
    Resolve the caller's admin session and pass it to the view.

    The wrapped view receives ``admin_session`` as a keyword argument.
    AuthenticationError from the session store becomes a 401 response.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        admin_session: AdminSession = app_services().sessions.resolve(bearer_token())
        return view(*args, admin_session=admin_session, **kwargs)

    return wrapper
