"""Tests for the event-trust CLI using Typer's CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from event_trust import __version__
from event_trust.cli.main import app
from event_trust.config.settings import settings

runner = CliRunner()


@pytest.fixture
def events_file(tmp_path):
    path = tmp_path / "events.json"
    path.write_text(
        json.dumps(
            [
                {
                    "title": "Warehouse Party",
                    "startAt": "2026-03-14T23:00:00",
                    "venueName": "Club Space",
                    "sourceName": "Resident Advisor",
                },
                {
                    "title": "Jazz Night with the Miami Quartet",
                    "startAt": "2026-03-14T20:00:00",
                    "venueName": "Lagniappe",
                    "sourceName": "Neighborhood Blog",
                    "sourceUrl": "https://example.com/jazz",
                },
                {
                    "title": "Happy Hour at Spillover",
                    "startAt": "2026-03-14T17:00:00",
                    "venueName": "Spillover",
                    "sourceName": "Music Venues",
                },
                {"title": "Missing start and source"},
            ]
        )
    )
    return path


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "cache_path", str(tmp_path / "cache" / "verification.json"))
    monkeypatch.setattr(settings, "policy_dir", None)


class TestVerify:
    def test_no_llm_writes_annotated_events(self, events_file, tmp_path):
        output = tmp_path / "out" / "events.json"

        result = runner.invoke(app, ["verify", str(events_file), "--no-llm", "--output", str(output)])

        assert result.exit_code == 0, result.output
        events = json.loads(output.read_text())
        assert [e["event"]["title"] for e in events] == [
            "Warehouse Party",
            "Jazz Night with the Miami Quartet",
        ]
        assert [e["status"] for e in events] == ["trusted", "deferred"]
        assert events[0]["event"]["sourceName"] == "Resident Advisor"

    def test_negative_max_rejected(self, events_file):
        result = runner.invoke(app, ["verify", str(events_file), "--no-llm", "--max", "-1"])
        assert result.exit_code == 2

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["verify", str(tmp_path / "absent.json"), "--no-llm"])
        assert result.exit_code == 1

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"events": "nope"}))
        result = runner.invoke(app, ["verify", str(path), "--no-llm"])
        assert result.exit_code == 1


class TestScore:
    def test_scores_table(self, events_file):
        result = runner.invoke(app, ["score", str(events_file)])
        assert result.exit_code == 0, result.output
        assert "Quality Scores" in result.output

    def test_limit(self, events_file):
        result = runner.invoke(app, ["score", str(events_file), "--limit", "1"])
        assert result.exit_code == 0
        assert "and 2 more" in result.output


class TestClassify:
    def test_trusted_source(self):
        result = runner.invoke(app, ["classify", "Resident Advisor"])
        assert result.exit_code == 0
        assert "high" in result.output
        assert "yes" in result.output

    def test_unknown_source(self):
        result = runner.invoke(app, ["classify", "Some New Blog"])
        assert result.exit_code == 0
        assert "medium" in result.output
        assert "no" in result.output


class TestInfoCommands:
    def test_cache_stats_empty(self):
        result = runner.invoke(app, ["cache-stats"])
        assert result.exit_code == 0
        assert "Verification Cache" in result.output

    def test_status(self):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Event Trust Status" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output
