"""Tests for the analytics event recorders."""

import logging

import pytest

from inspection_sync.analytics import (
    ConsoleAnalytics,
    LoggingAnalytics,
    NullAnalytics,
    create_analytics,
    format_event,
)


class TestFormatEvent:
    def test_without_properties(self):
        assert format_event("upload_started", {}) == "Event: upload_started"

    def test_with_properties(self):
        line = format_event(
            "entity_created", {"entity_type": "room", "id": "r1"}
        )
        assert line == (
            "Event: entity_created | Properties: entity_type=room, id=r1"
        )


class TestSinks:
    def test_console_prints(self, capsys):
        ConsoleAnalytics().track_event("upload_completed", {"success": True})
        out = capsys.readouterr().out
        assert out == (
            "[Analytics] Event: upload_completed | Properties: success=True\n"
        )

    def test_logging_writes_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="inspection_sync.analytics"):
            LoggingAnalytics().track_event("upload_started", {"project_id": "p"})
        assert "Event: upload_started | Properties: project_id=p" in caplog.text

    def test_null_discards(self, capsys):
        NullAnalytics().track_event("anything", {"a": 1})
        assert capsys.readouterr().out == ""


class TestCreateAnalytics:
    @pytest.mark.parametrize(
        "kind,cls",
        [
            ("console", ConsoleAnalytics),
            ("log", LoggingAnalytics),
            ("none", NullAnalytics),
        ],
    )
    def test_known_kinds(self, kind, cls):
        assert isinstance(create_analytics(kind), cls)

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown analytics sink"):
            create_analytics("kafka")
