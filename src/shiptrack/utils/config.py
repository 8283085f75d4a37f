"""
Configuration management for the ShipTrack application.

This module handles:
- Database URL configuration
- Company, tracking ID and notification settings
- Admin credentials and session lifetime
- Environment-specific configuration (production, development, testing)

All settings come from environment variables; explicit keyword overrides
win over the environment so tests can build isolated configurations.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    DEFAULT_COMPANY_EMAIL,
    DEFAULT_COMPANY_NAME,
    DEFAULT_EMAIL_TIMEOUT_SECONDS,
    DEFAULT_FRONTEND_URL,
    DEFAULT_SESSION_TTL_MINUTES,
    DEFAULT_TRACKING_PREFIX,
    DEFAULT_WAREHOUSE_LOCATION,
)

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("production", "development", "testing")


class Config:
    """
    Application configuration manager.

    Handles all configuration settings including the database location,
    outbound email settings and admin credentials.
    """

    def __init__(self, environment: str = "production", **overrides: Any):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production', 'development' or 'testing'
            **overrides: Explicit values for any setting (e.g. database_url="sqlite:///:memory:")

        Raises:
            ValueError: If environment is not a known mode
        """
        if environment not in ENVIRONMENTS:
            raise ValueError(
                f"Unknown environment '{environment}'. Expected one of: {', '.join(ENVIRONMENTS)}"
            )
        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION

        self.database_url = overrides.get("database_url") or os.environ.get(
            "SHIPTRACK_DATABASE_URL"
        )
        if not self.database_url:
            if environment == "testing":
                self.database_url = "sqlite:///:memory:"
            else:
                self.database_url = self._default_database_url()

        self.tracking_prefix = self._setting(
            overrides, "tracking_prefix", "SHIPTRACK_TRACKING_PREFIX", DEFAULT_TRACKING_PREFIX
        )
        self.company_name = self._setting(
            overrides, "company_name", "SHIPTRACK_COMPANY_NAME", DEFAULT_COMPANY_NAME
        )
        self.warehouse_location = self._setting(
            overrides,
            "warehouse_location",
            "SHIPTRACK_WAREHOUSE_LOCATION",
            DEFAULT_WAREHOUSE_LOCATION,
        )
        self.company_email = self._setting(
            overrides, "company_email", "SHIPTRACK_COMPANY_EMAIL", DEFAULT_COMPANY_EMAIL
        )
        self.frontend_url = self._setting(
            overrides, "frontend_url", "SHIPTRACK_FRONTEND_URL", DEFAULT_FRONTEND_URL
        ).rstrip("/")
        self.resend_api_key = self._setting(overrides, "resend_api_key", "RESEND_API_KEY", "")
        self.admin_username = self._setting(
            overrides, "admin_username", "SHIPTRACK_ADMIN_USERNAME", "admin"
        )
        self.admin_password = self._setting(
            overrides, "admin_password", "SHIPTRACK_ADMIN_PASSWORD", ""
        )
        self.session_ttl_minutes = int(
            self._setting(
                overrides,
                "session_ttl_minutes",
                "SHIPTRACK_SESSION_TTL_MINUTES",
                DEFAULT_SESSION_TTL_MINUTES,
            )
        )
        self.email_timeout = float(
            self._setting(
                overrides, "email_timeout", "SHIPTRACK_EMAIL_TIMEOUT", DEFAULT_EMAIL_TIMEOUT_SECONDS
            )
        )
        self.log_level = self._setting(overrides, "log_level", "SHIPTRACK_LOG_LEVEL", "INFO")
        self.secret_key = self._setting(overrides, "secret_key", "SHIPTRACK_SECRET_KEY", "dev-secret")

    @staticmethod
    def _setting(overrides: dict, key: str, env_var: str, default: Any) -> Any:
        """Resolve a setting: explicit override, then environment, then default."""
        if overrides.get(key) is not None:
            return overrides[key]
        value = os.environ.get(env_var)
        if value is None or value == "":
            return default
        return value

    def _default_database_url(self) -> str:
        """
        SQLite database URL inside the environment's data directory.

        Development uses the project's data/ directory; production uses
        ~/.shiptrack. The directory is created if missing.
        """
        if self.environment == "development":
            data_dir = Path(__file__).parent.parent.parent.parent / "data"
        else:
            data_dir = Path.home() / ".shiptrack"
        data_dir.mkdir(parents=True, exist_ok=True)

        # Use forward slashes for SQLite URL
        db_path_str = str(data_dir / DATABASE_FILENAME).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def email_enabled(self) -> bool:
        """True when a Resend API key is configured."""
        return bool(self.resend_api_key)

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(environment='{self.environment}', database_url='{self.database_url}')"


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing a
    different environment argument - this prevents switching databases
    mid-process.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    SHIPTRACK_ENV or defaults to production. Ignored if the
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get("SHIPTRACK_ENV", "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def set_config(config: Config) -> None:
    """Install an explicit configuration as the global instance."""
    global _config_instance
    _config_instance = config


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None
