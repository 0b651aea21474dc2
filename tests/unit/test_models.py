"""Tests for core types."""

import uuid
from datetime import timezone

import pytest

from db_demo_worker.models import DatabaseKind, LogRecord, utc_now


@pytest.mark.parametrize("raw,expected", [
    ("postgres", DatabaseKind.POSTGRES),
    ("Postgres", DatabaseKind.POSTGRES),
    ("mysql", DatabaseKind.MYSQL),
    ("MySQL", DatabaseKind.MYSQL),
    ("mongo", DatabaseKind.MONGO),
    ("Mongo", DatabaseKind.MONGO),
    ("mongodb", DatabaseKind.POSTGRES),
    ("sqlserver", DatabaseKind.POSTGRES),
    ("", DatabaseKind.POSTGRES),
    (None, DatabaseKind.POSTGRES),
    (DatabaseKind.MYSQL, DatabaseKind.MYSQL),
])
def test_database_kind_parse(raw, expected):
    assert DatabaseKind.parse(raw) is expected


def test_log_record_defaults():
    before = utc_now()
    record = LogRecord()

    assert record.log_time.tzinfo is timezone.utc
    assert record.log_time >= before
    assert isinstance(record.id, uuid.UUID)
    assert record.id != LogRecord().id


def test_log_record_document():
    record = LogRecord()

    assert record.to_document() == {"_id": record.id, "log_time": record.log_time}
