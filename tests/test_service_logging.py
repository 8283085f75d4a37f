"""Tests for structured service logging."""

import logging

import pytest

from shiptrack.services import package_service
from shiptrack.services.logging_utils import get_service_logger, log_operation


def test_service_logger_name():
    assert get_service_logger("shiptrack.services.package_service").name == (
        "shiptrack.services.package_service"
    )


def test_log_operation_attaches_context(caplog):
    logger = get_service_logger("unit")
    with caplog.at_level(logging.INFO, logger="shiptrack.services"):
        log_operation(logger, operation="demo", outcome="success", tracking_id="ESP-0123456789")

    record = caplog.records[-1]
    assert record.getMessage() == "demo: success"
    assert record.operation == "demo"
    assert record.outcome == "success"
    assert record.tracking_id == "ESP-0123456789"


def test_update_logs_classification(sample_package, dispatcher, caplog):
    with caplog.at_level(logging.INFO, logger="shiptrack.services"):
        package_service.update_package_status(
            sample_package.tracking_id, "processing", dispatcher=dispatcher
        )

    records = [r for r in caplog.records if getattr(r, "operation", None) == "update_package_status"]
    assert records[-1].outcome == "success"
    assert records[-1].notification_class == "first_processing"


def test_not_found_logged_as_warning(test_db, dispatcher, caplog):
    with caplog.at_level(logging.INFO, logger="shiptrack.services"):
        with pytest.raises(package_service.PackageNotFound):
            package_service.update_package_status(
                "ESP-0000000000", "processing", dispatcher=dispatcher
            )

    record = [r for r in caplog.records if getattr(r, "outcome", None) == "not_found"][-1]
    assert record.levelno == logging.WARNING
