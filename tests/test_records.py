"""Tests for record mapping and validation."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from docanswer.errors import InvalidDocumentError
from docanswer.ingestion.records import (
    default_sections,
    document_from_record,
    normalize_new_record,
    parse_timestamp,
)
from docanswer.models import DocumentType, Priority, SectionContent


class TestDocumentFromRecord:
    """Test document_from_record mapping."""

    def test_full_record(self) -> None:
        document = document_from_record(
            {
                "id": 7,
                "title": "料金プラン",
                "type": "manual",
                "sections": {"overview": "概要です", "pricing": ["月額3万円"]},
                "tags": ["料金", "プラン"],
                "priority": "HIGH",
                "last_updated": "2024-01-02T03:04:05Z",
                "company": "acme",
            }
        )
        assert document.id == "7"
        assert document.title == "料金プラン"
        assert document.document_type == DocumentType.MANUAL
        assert document.sections["pricing"] == SectionContent.of_list(["月額3万円"])
        assert document.tags == ("料金", "プラン")
        assert document.priority_hint == Priority.HIGH
        assert document.last_updated == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert document.company == "acme"

    def test_name_alias_and_defaults(self) -> None:
        document = document_from_record({"name": "議事録", "sections": "not a mapping", "type": "weird"})
        assert document.title == "議事録"
        assert document.sections == {}
        assert document.document_type == DocumentType.OTHER
        assert document.tags == ()
        assert document.priority_hint is None
        assert document.last_updated is not None
        assert document.last_updated.tzinfo is not None

    def test_camel_case_fields(self) -> None:
        document = document_from_record(
            {"title": "T", "userId": "u1", "companyName": "acme", "lastUpdated": 86400}
        )
        assert document.user_id == "u1"
        assert document.company == "acme"
        assert document.last_updated == datetime(1970, 1, 2, tzinfo=timezone.utc)

    def test_empty_record(self) -> None:
        document = document_from_record({})
        assert document.title == ""
        assert document.sections == {}


class TestParseTimestamp:
    """Test parse_timestamp function."""

    def test_naive_iso_becomes_utc(self) -> None:
        assert parse_timestamp("2024-01-01T00:00:00") == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_datetime_passthrough(self) -> None:
        value = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp(value) is value

    def test_garbage_is_now(self) -> None:
        before = datetime.now(timezone.utc)
        assert parse_timestamp("yesterday-ish") >= before


class TestNormalizeNewRecord:
    """Test normalize_new_record validation."""

    def test_requires_title_and_user(self) -> None:
        with pytest.raises(InvalidDocumentError):
            normalize_new_record({"title": "T"})
        with pytest.raises(InvalidDocumentError):
            normalize_new_record({"user_id": "u1"})

    def test_defaults(self) -> None:
        record = normalize_new_record({"title": "T", "userId": "u1"})
        assert record["type"] == "meeting"
        assert record["priority"] == "medium"
        assert record["sections"] == default_sections()
        assert record["tags"] == []
        assert record["description"] == ""
        assert record["user_id"] == "u1"
        assert record["company"] is None

    def test_keeps_values(self) -> None:
        record = normalize_new_record(
            {
                "title": "T",
                "user_id": "u1",
                "type": "policy",
                "priority": "high",
                "sections": {"rules": ["a"]},
                "tags": ["x"],
                "company": "acme",
            }
        )
        assert record["type"] == "policy"
        assert record["priority"] == "high"
        assert record["sections"] == {"rules": ["a"]}
        assert record["tags"] == ["x"]
        assert record["company"] == "acme"

    def test_unknown_priority_defaults_to_medium(self) -> None:
        record = normalize_new_record({"title": "T", "user_id": "u1", "priority": "urgent"})
        assert record["priority"] == "medium"
