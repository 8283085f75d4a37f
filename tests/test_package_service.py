"""Tests for package service.

Tests cover:
- Package creation with defaults and the initial "Package Created" event
- Tracking lookups and timeline ordering
- Status updates, first-processing classification and notification sets
- Unknown tracking IDs, deletion and the status summary
- Tracking ID collisions and concurrent updates
"""

import random
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy.orm import sessionmaker

from shiptrack.models import Package, TimelineEvent
from shiptrack.services import package_service
from shiptrack.services.email_client import ResendEmailClient
from shiptrack.services.exceptions import (
    ConcurrentUpdateError,
    PackageNotFound,
    TrackingIdCollision,
    ValidationError,
)
from shiptrack.services.notification_service import NotificationDispatcher
from shiptrack.services.status_evaluator import NotificationClass
from shiptrack.services.tracking_id import is_valid_tracking_id


def _event_count(session, tracking_id):
    package = session.query(Package).filter(Package.tracking_id == tracking_id).one()
    return session.query(TimelineEvent).filter(TimelineEvent.package_id == package.id).count()


# ============================================================================
# create_package
# ============================================================================


class TestCreatePackage:
    """Tests for create_package."""

    def test_creates_package_with_initial_event(self, test_db, package_data, dispatcher):
        result = package_service.create_package(package_data, dispatcher=dispatcher)

        assert is_valid_tracking_id(result.tracking_id)
        assert result.package["status"] == "pending"
        assert result.package["status_category"] == "pending"

        info = package_service.get_tracking_info(result.tracking_id)
        assert len(info["timeline"]) == 1
        first = info["timeline"][0]
        assert first["status"] == "Package Created"
        assert first["location"] == "Emil Shipping Warehouse"
        assert first["description"] == "Package has been created and is being processed"

    def test_parses_free_text_amounts(self, test_db, package_data, dispatcher):
        result = package_service.create_package(package_data, dispatcher=dispatcher)
        assert result.package["weight"] == pytest.approx(12.5)
        assert result.package["total_charges"] == pytest.approx(40.0)
        assert result.package["package_quantity"] == 2

    def test_applies_defaults(self, test_db, dispatcher):
        result = package_service.create_package(
            {
                "receiver_name": "Rui Receiver",
                "receiver_email": "r@x.com",
                "origin": "Lisbon",
                "destination": "Porto",
            },
            dispatcher=dispatcher,
        )
        package = result.package
        assert package["sender_name"] == "Unknown Sender"
        assert package["sender_email"] == ""
        assert package["package_description"] == "Package"
        assert package["package_quantity"] == 1
        assert package["weight"] == 0
        assert package["total_charges"] == 0

    def test_sends_creation_emails_to_both_parties(
        self, test_db, package_data, dispatcher, email_client
    ):
        result = package_service.create_package(package_data, dispatcher=dispatcher)

        assert email_client.recipients == ["sender@example.com", "receiver@example.com"]
        assert email_client.sent[0]["subject"] == (
            f"Package Created - Package Notification - Tracking ID: {result.tracking_id}"
        )
        assert email_client.sent[1]["subject"] == (
            f"Package Incoming - Package Notification - Tracking ID: {result.tracking_id}"
        )
        assert result.email_status["success"] is True
        assert result.email_status["notificationClass"] == "package_created"
        assert result.email_status["sent"] == 2

    def test_without_sender_email_only_receiver_notified(
        self, test_db, package_data, dispatcher, email_client
    ):
        package_data["sender_email"] = ""
        package_service.create_package(package_data, dispatcher=dispatcher)
        assert email_client.recipients == ["receiver@example.com"]

    def test_missing_required_fields_reports_all(self, test_db, dispatcher, email_client):
        with pytest.raises(ValidationError) as exc_info:
            package_service.create_package({"sender_name": "Ada"}, dispatcher=dispatcher)

        errors = exc_info.value.errors
        assert any("Receiver name" in e for e in errors)
        assert any("Receiver email" in e for e in errors)
        assert any("Origin" in e for e in errors)
        assert any("Destination" in e for e in errors)
        assert email_client.sent == []
        assert package_service.list_packages() == []

    def test_invalid_email_rejected(self, test_db, package_data, dispatcher):
        package_data["receiver_email"] = "not-an-email"
        with pytest.raises(ValidationError) as exc_info:
            package_service.create_package(package_data, dispatcher=dispatcher)
        assert any("Receiver email" in e for e in exc_info.value.errors)

    def test_tracking_id_collision(self, test_db, package_data, dispatcher):
        """Two creations drawing the same ID: the second fails, the first is intact."""
        first = package_service.create_package(
            package_data, dispatcher=dispatcher, rng=random.Random(99)
        )

        with pytest.raises(TrackingIdCollision):
            package_service.create_package(
                package_data, dispatcher=dispatcher, rng=random.Random(99)
            )

        packages = package_service.list_packages()
        assert [p["tracking_id"] for p in packages] == [first.tracking_id]
        assert len(package_service.get_tracking_info(first.tracking_id)["timeline"]) == 1

    def test_uses_configured_prefix(self, test_db, test_config, package_data, dispatcher):
        test_config.tracking_prefix = "ZZZ"
        result = package_service.create_package(package_data, dispatcher=dispatcher)
        assert result.tracking_id.startswith("ZZZ-")


# ============================================================================
# Lookup and listing
# ============================================================================


class TestLookup:
    """Tests for get_tracking_info, package_exists and list_packages."""

    def test_unknown_tracking_id(self, test_db):
        with pytest.raises(PackageNotFound) as exc_info:
            package_service.get_tracking_info("ESP-0000000000")
        assert exc_info.value.tracking_id == "ESP-0000000000"

    def test_package_exists(self, sample_package):
        assert package_service.package_exists(sample_package.tracking_id) is True
        assert package_service.package_exists("ESP-0000000000") is False

    def test_list_newest_first(self, test_db, package_data, dispatcher):
        ids = [
            package_service.create_package(package_data, dispatcher=dispatcher).tracking_id
            for _ in range(3)
        ]
        listed = [p["tracking_id"] for p in package_service.list_packages()]
        assert listed == list(reversed(ids))

    def test_list_empty(self, test_db):
        assert package_service.list_packages() == []


# ============================================================================
# update_package_status
# ============================================================================


class TestUpdatePackageStatus:
    """Tests for update_package_status."""

    def test_first_processing_notifies_sender_and_receiver(
        self, sample_package, dispatcher, email_client
    ):
        result = package_service.update_package_status(
            sample_package.tracking_id, "Processing", "Lisbon Hub", dispatcher=dispatcher
        )

        assert result.status == "processing"
        assert result.is_first_processing is True
        assert result.notification_class is NotificationClass.FIRST_PROCESSING
        assert [m["subject"] for m in email_client.sent] == [
            "Confirmation that the package is processed",
            "Notification of incoming package",
        ]
        assert email_client.recipients == ["sender@example.com", "receiver@example.com"]
        assert result.email_status["success"] is True

    def test_upper_case_processing_is_first_processing(self, sample_package, dispatcher):
        result = package_service.update_package_status(
            sample_package.tracking_id, "PROCESSING", dispatcher=dispatcher
        )
        assert result.notification_class is NotificationClass.FIRST_PROCESSING
        assert result.status == "processing"

    def test_second_processing_is_routine(self, sample_package, dispatcher, email_client):
        tracking_id = sample_package.tracking_id
        package_service.update_package_status(tracking_id, "processing", dispatcher=dispatcher)
        package_service.update_package_status(tracking_id, "In Transit", dispatcher=dispatcher)
        email_client.sent.clear()

        result = package_service.update_package_status(
            tracking_id, "processing", dispatcher=dispatcher
        )

        assert result.notification_class is NotificationClass.ROUTINE_UPDATE
        assert email_client.recipients == ["receiver@example.com"]
        assert email_client.sent[0]["subject"] == "Updated package status"

    def test_routine_update_only_notifies_receiver(
        self, sample_package, dispatcher, email_client
    ):
        result = package_service.update_package_status(
            sample_package.tracking_id,
            "In Transit",
            "Madrid",
            "Left sorting facility",
            dispatcher=dispatcher,
        )
        assert result.notification_class is NotificationClass.ROUTINE_UPDATE
        assert result.status == "in transit"
        assert email_client.recipients == ["receiver@example.com"]

    def test_event_keeps_requested_casing(self, sample_package, dispatcher):
        result = package_service.update_package_status(
            sample_package.tracking_id, "Out For Delivery", "Toronto", "On the van",
            dispatcher=dispatcher,
        )
        assert result.event["status"] == "Out For Delivery"
        assert result.event["location"] == "Toronto"
        assert result.event["description"] == "On the van"

        info = package_service.get_tracking_info(sample_package.tracking_id)
        assert info["status"] == "out for delivery"
        assert info["status_category"] == "out_for_delivery"
        assert info["timeline"][-1]["status"] == "Out For Delivery"

    def test_missing_location_and_description_stored_empty(self, sample_package, dispatcher):
        result = package_service.update_package_status(
            sample_package.tracking_id, "Weighed", dispatcher=dispatcher
        )
        assert result.event["location"] == ""
        assert result.event["description"] == ""

    def test_timeline_grows_and_stays_ordered(self, sample_package, dispatcher):
        tracking_id = sample_package.tracking_id
        for status in ("processing", "in transit", "out for delivery", "delivered"):
            package_service.update_package_status(tracking_id, status, dispatcher=dispatcher)

        timeline = package_service.get_tracking_info(tracking_id)["timeline"]
        assert [e["status"] for e in timeline] == [
            "Package Created",
            "processing",
            "in transit",
            "out for delivery",
            "delivered",
        ]
        timestamps = [datetime.fromisoformat(e["timestamp"]) for e in timeline]
        assert timestamps == sorted(timestamps)

    def test_timestamp_never_precedes_latest_event(self, sample_package, dispatcher, test_db):
        """A clock behind the last event still yields a non-decreasing timeline."""
        session = test_db()
        package = (
            session.query(Package)
            .filter(Package.tracking_id == sample_package.tracking_id)
            .one()
        )
        future = datetime.now(timezone.utc) + timedelta(hours=1)
        session.add(
            TimelineEvent(
                package_id=package.id,
                status="Scheduled",
                location="",
                description="",
                timestamp=future,
            )
        )
        session.commit()

        result = package_service.update_package_status(
            sample_package.tracking_id, "In Transit", dispatcher=dispatcher
        )
        assert datetime.fromisoformat(result.event["timestamp"]) >= future

    def test_receiver_only_first_processing(self, test_db, dispatcher, email_client):
        """No sender email: first processing notifies the receiver only."""
        created = package_service.create_package(
            {
                "receiver_name": "Rui",
                "receiver_email": "r@x.com",
                "origin": "Lisbon",
                "destination": "Porto",
            },
            dispatcher=dispatcher,
        )
        email_client.sent.clear()

        result = package_service.update_package_status(
            created.tracking_id, "Processing", dispatcher=dispatcher
        )

        assert result.notification_class is NotificationClass.FIRST_PROCESSING
        assert email_client.recipients == ["r@x.com"]
        assert email_client.sent[0]["subject"] == "Notification of incoming package"

    def test_unknown_tracking_id_writes_nothing(self, sample_package, dispatcher, email_client, test_db):
        with pytest.raises(PackageNotFound):
            package_service.update_package_status(
                "ESP-0000000000", "processing", dispatcher=dispatcher
            )
        assert email_client.sent == []
        assert test_db().query(TimelineEvent).count() == 1

    @pytest.mark.parametrize("status", ["", "   ", None])
    def test_empty_status_rejected(self, sample_package, dispatcher, test_db, status):
        with pytest.raises(ValidationError):
            package_service.update_package_status(
                sample_package.tracking_id, status, dispatcher=dispatcher
            )
        assert _event_count(test_db(), sample_package.tracking_id) == 1

    def test_overlong_status_rejected(self, sample_package, dispatcher):
        with pytest.raises(ValidationError):
            package_service.update_package_status(
                sample_package.tracking_id, "x" * 101, dispatcher=dispatcher
            )

    def test_email_failure_does_not_undo_update(self, sample_package, email_client, dispatcher):
        email_client.fail_for = {"receiver@example.com"}

        result = package_service.update_package_status(
            sample_package.tracking_id, "processing", dispatcher=dispatcher
        )

        assert result.email_status["success"] is False
        assert result.email_status["attempted"] == 2
        assert result.email_status["sent"] == 1
        assert len(result.email_status["errors"]) == 1
        info = package_service.get_tracking_info(sample_package.tracking_id)
        assert info["status"] == "processing"
        assert len(info["timeline"]) == 2

    def test_unexpected_client_error_does_not_undo_update(self, sample_package):
        """Errors outside NotificationError are reported like any failed send."""

        class BrokenEmailClient:
            def send(self, to, subject, html):
                raise RuntimeError("socket closed")

        dispatcher = NotificationDispatcher(BrokenEmailClient())

        result = package_service.update_package_status(
            sample_package.tracking_id, "processing", dispatcher=dispatcher
        )

        assert result.email_status["success"] is False
        assert result.email_status["sent"] == 0
        assert "RuntimeError: socket closed" in result.email_status["errors"][0]
        info = package_service.get_tracking_info(sample_package.tracking_id)
        assert info["status"] == "processing"
        assert len(info["timeline"]) == 2

    def test_unencodable_api_key_does_not_undo_update(self, sample_package):
        """A Resend request that cannot even be built is a failed send."""
        http_client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"id": "x"}))
        )
        email_client = ResendEmailClient(
            api_key="re_kéy", sender="noreply@example.com", http_client=http_client
        )
        dispatcher = NotificationDispatcher(email_client)

        result = package_service.update_package_status(
            sample_package.tracking_id, "processing", dispatcher=dispatcher
        )

        assert result.email_status["success"] is False
        assert result.email_status["attempted"] == 2
        assert package_service.get_tracking_info(sample_package.tracking_id)["status"] == (
            "processing"
        )

    def test_equal_timestamps_keep_insertion_order(self, sample_package, test_db):
        """Events sharing a timestamp are listed in the order they were written."""
        session = test_db()
        package = (
            session.query(Package)
            .filter(Package.tracking_id == sample_package.tracking_id)
            .one()
        )
        shared = datetime.now(timezone.utc) + timedelta(minutes=5)
        for status in ("Zulu", "Alpha", "Mike"):
            session.add(
                TimelineEvent(
                    package_id=package.id,
                    status=status,
                    location="",
                    description="",
                    timestamp=shared,
                )
            )
            session.flush()
        session.commit()

        timeline = package_service.get_tracking_info(sample_package.tracking_id)["timeline"]
        assert [e["status"] for e in timeline] == ["Package Created", "Zulu", "Alpha", "Mike"]

    def test_padded_processing_label_is_trimmed(self, sample_package, dispatcher):
        """Surrounding whitespace is dropped before matching and storage."""
        result = package_service.update_package_status(
            sample_package.tracking_id, "  Processing ", dispatcher=dispatcher
        )
        assert result.notification_class is NotificationClass.FIRST_PROCESSING
        assert result.status == "processing"
        assert result.event["status"] == "Processing"

    def test_concurrent_update_rejected(self, file_db, package_data, dispatcher, monkeypatch):
        """An update that loses the race rolls back without writing an event."""
        created = package_service.create_package(package_data, dispatcher=dispatcher)
        tracking_id = created.tracking_id
        OtherSession = sessionmaker(bind=file_db)
        real_get_ordered_events = package_service.timeline_service.get_ordered_events

        def racing_get_ordered_events(session, package_id):
            events = real_get_ordered_events(session, package_id)
            other = OtherSession()
            try:
                package = other.query(Package).filter(Package.id == package_id).one()
                package.status = "on hold"
                other.commit()
            finally:
                other.close()
            return events

        monkeypatch.setattr(
            package_service.timeline_service, "get_ordered_events", racing_get_ordered_events
        )

        with pytest.raises(ConcurrentUpdateError):
            package_service.update_package_status(tracking_id, "processing", dispatcher=dispatcher)

        monkeypatch.undo()
        info = package_service.get_tracking_info(tracking_id)
        assert info["status"] == "on hold"
        assert len(info["timeline"]) == 1


# ============================================================================
# delete_package and get_status_summary
# ============================================================================


class TestDeletePackage:
    def test_delete_removes_package_and_timeline(self, sample_package, test_db):
        assert package_service.delete_package(sample_package.tracking_id) is True

        with pytest.raises(PackageNotFound):
            package_service.get_tracking_info(sample_package.tracking_id)
        assert test_db().query(TimelineEvent).count() == 0

    def test_delete_is_idempotent(self, sample_package):
        assert package_service.delete_package(sample_package.tracking_id) is True
        assert package_service.delete_package(sample_package.tracking_id) is False

    def test_delete_unknown(self, test_db):
        assert package_service.delete_package("ESP-0000000000") is False


class TestStatusSummary:
    def test_empty(self, test_db):
        summary = package_service.get_status_summary()
        assert summary["total"] == 0
        assert summary["delivered"] == 0
        assert summary["by_category"]["pending"] == 0

    def test_counts_by_group(self, test_db, package_data, dispatcher):
        ids = [
            package_service.create_package(package_data, dispatcher=dispatcher).tracking_id
            for _ in range(4)
        ]
        package_service.update_package_status(ids[0], "Delivered", dispatcher=dispatcher)
        package_service.update_package_status(ids[1], "In Transit", dispatcher=dispatcher)
        package_service.update_package_status(ids[2], "Delivery failed", dispatcher=dispatcher)

        summary = package_service.get_status_summary()
        assert summary["total"] == 4
        assert summary["delivered"] == 1
        assert summary["in_transit"] == 1
        assert summary["exception"] == 1
        assert summary["pending"] == 1
        assert summary["by_category"]["exception"] == 1


# ============================================================================
# Model invariants
# ============================================================================


class TestTimelineEventModel:
    def test_events_are_append_only(self, sample_package, test_db):
        session = test_db()
        timeline_event = session.query(TimelineEvent).first()
        timeline_event.status = "Rewritten"
        with pytest.raises(ValueError, match="append-only"):
            session.flush()
        session.rollback()
