"""Pytest configuration and fixtures for ShipTrack tests."""

import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from shiptrack.models import Base
from shiptrack.services.exceptions import NotificationError
from shiptrack.services.notification_service import NotificationDispatcher
from shiptrack.utils.config import Config, reset_config, set_config

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"


class RecordingEmailClient:
    """Email client that records messages and can fail for chosen addresses."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, to, subject, html):
        if to in self.fail_for:
            raise NotificationError(to, "simulated outage")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return {"id": f"msg-{len(self.sent)}"}

    @property
    def recipients(self):
        return [message["to"] for message in self.sent]


@pytest.fixture(autouse=True)
def test_config():
    """Install an isolated testing configuration for every test."""
    reset_config()
    config = Config(
        "testing",
        database_url="sqlite:///:memory:",
        tracking_prefix="ESP",
        company_name="Emil Shipping",
        warehouse_location="Emil Shipping Warehouse",
        company_email="noreply@example.com",
        frontend_url="https://track.example.com",
        resend_api_key="",
        admin_username=ADMIN_USERNAME,
        admin_password=ADMIN_PASSWORD,
        session_ttl_minutes=60,
    )
    set_config(config)
    yield config
    reset_config()


def _install_session_factory(engine):
    """Point the global session factory at engine; returns (Session, restore)."""
    import shiptrack.services.database as db_module

    Base.metadata.create_all(engine)
    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    original_get_session_factory = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    def restore():
        Session.remove()
        Base.metadata.drop_all(engine)
        db_module.get_session_factory = original_get_session_factory
        engine.dispose()

    return Session, restore


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean in-memory database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Swaps the global session factory so services use it
    4. Drops all tables after the test completes
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Session, restore = _install_session_factory(engine)
    yield Session
    restore()


@pytest.fixture(scope="function")
def file_db(tmp_path):
    """File-backed SQLite database where each session gets its own connection."""
    engine = create_engine(f"sqlite:///{tmp_path / 'shiptrack-test.db'}", echo=False)
    Session, restore = _install_session_factory(engine)
    yield engine
    restore()


@pytest.fixture
def email_client():
    return RecordingEmailClient()


@pytest.fixture
def dispatcher(email_client):
    return NotificationDispatcher(
        email_client,
        company_name="Emil Shipping",
        frontend_url="https://track.example.com",
    )


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def package_data():
    """Valid create_package input with both addresses."""
    return {
        "sender_name": "Ada Sender",
        "sender_email": "sender@example.com",
        "sender_address": "1 Harbour Road",
        "sender_phone": "+1-555-0100",
        "receiver_name": "Rui Receiver",
        "receiver_email": "receiver@example.com",
        "receiver_address": "9 Market Street",
        "receiver_phone": "+1-555-0199",
        "origin": "Lisbon, PT",
        "destination": "Toronto, CA",
        "package_description": "Documents",
        "package_quantity": 2,
        "weight": "12.5 kg",
        "total_charges": "$40.00",
    }


@pytest.fixture
def sample_package(test_db, package_data, dispatcher, email_client):
    """A created package; the creation emails are cleared from the recorder."""
    from shiptrack.services import package_service

    result = package_service.create_package(package_data, dispatcher=dispatcher)
    email_client.sent.clear()
    return result


@pytest.fixture
def app(test_db, test_config, email_client):
    from shiptrack.web import create_app

    return create_app(test_config, email_client=email_client, configure_db=False)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/auth/signin", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.get_json()['token']}"}
