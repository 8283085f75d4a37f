"""
Admin authentication and session management.

An AdminSession is created on sign-in and ends on sign-out or when it
expires. Sessions live in an AdminSessionStore owned by the web
application; request handlers receive the resolved AdminSession as an
argument instead of reading global state.
"""

import hmac
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from shiptrack.services.exceptions import AuthenticationError
from shiptrack.services.logging_utils import get_service_logger, log_operation
from shiptrack.utils.constants import DEFAULT_SESSION_TTL_MINUTES
from shiptrack.utils.datetime_utils import utc_now

logger = get_service_logger(__name__)


@dataclass
class AdminSession:
    """A signed-in admin."""

    token: str
    username: str
    created_at: datetime
    expires_at: datetime
    invalidated_at: Optional[datetime] = None

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """True until the session is invalidated or reaches expires_at."""
        now = now or utc_now()
        return self.invalidated_at is None and now < self.expires_at

    def invalidate(self, now: Optional[datetime] = None) -> None:
        if self.invalidated_at is None:
            self.invalidated_at = now or utc_now()


class AdminSessionStore:
    """
    In-memory registry of admin sessions for one application instance.

    Args:
        username: Configured admin username
        password: Configured admin password; empty disables sign-in
        ttl_minutes: Session lifetime
        clock: Callable returning the current UTC time (tests)
    """

    def __init__(
        self,
        username: str,
        password: str,
        ttl_minutes: int = DEFAULT_SESSION_TTL_MINUTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._username = username
        self._password = password
        self._ttl = timedelta(minutes=ttl_minutes)
        self._clock = clock
        self._sessions: Dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config) -> "AdminSessionStore":
        return cls(
            username=config.admin_username,
            password=config.admin_password,
            ttl_minutes=config.session_ttl_minutes,
        )

    def sign_in(self, username: str, password: str) -> AdminSession:
        """
        Create a session for valid admin credentials.

        Raises:
            AuthenticationError: If sign-in is not configured or the
                credentials do not match
        """
        if not self._password:
            log_operation(logger, operation="sign_in", outcome="not_configured", level=logging.WARNING)
            raise AuthenticationError("Admin sign-in is not configured")

        # Credentials from JSON may be numbers, lists or null
        if not isinstance(username, str) or not isinstance(password, str):
            username_ok = password_ok = False
        else:
            username_ok = hmac.compare_digest(username.encode(), self._username.encode())
            password_ok = hmac.compare_digest(password.encode(), self._password.encode())
        if not (username_ok and password_ok):
            log_operation(
                logger,
                operation="sign_in",
                outcome="invalid_credentials",
                level=logging.WARNING,
                username=username,
            )
            raise AuthenticationError("Invalid username or password")

        now = self._clock()
        session = AdminSession(
            token=secrets.token_urlsafe(32),
            username=self._username,
            created_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._purge_inactive(now)
            self._sessions[session.token] = session

        log_operation(logger, operation="sign_in", outcome="success", username=session.username)
        return session

    def resolve(self, token: Optional[str]) -> AdminSession:
        """
        Look up an active session by token.

        Expired sessions are invalidated and dropped on lookup.

        Raises:
            AuthenticationError: If the token is missing, unknown, expired or revoked
        """
        if not token:
            raise AuthenticationError("Authentication required")

        now = self._clock()
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                raise AuthenticationError("Invalid session")
            if not session.is_active(now):
                session.invalidate(now)
                del self._sessions[token]
                raise AuthenticationError("Session expired. Please sign in again.")
            return session

    def sign_out(self, token: str) -> None:
        """Invalidate a session. Unknown tokens are ignored."""
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is not None:
            session.invalidate(self._clock())
            log_operation(logger, operation="sign_out", outcome="success", username=session.username)

    def active_count(self) -> int:
        with self._lock:
            self._purge_inactive(self._clock())
            return len(self._sessions)

    def _purge_inactive(self, now: datetime) -> None:
        for token in [t for t, s in self._sessions.items() if not s.is_active(now)]:
            self._sessions.pop(token).invalidate(now)
