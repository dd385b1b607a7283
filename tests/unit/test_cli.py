"""Test the click CLI end to end against a temp journal file."""

import json
import logging

import pytest
import structlog
from click.testing import CliRunner

from trade_journal.cli import load_screenshot, main


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def journal_env(tmp_path, monkeypatch):
    snapshot = tmp_path / "journal.json"
    monkeypatch.setenv("TRADE_JOURNAL_STORAGE__SNAPSHOT_PATH", str(snapshot))
    monkeypatch.setenv("TRADE_JOURNAL_ANALYSIS__ENABLED", "false")
    return snapshot


def _invoke(*args):
    runner = CliRunner()
    return runner.invoke(main, ["--config", "does-not-exist.toml", *args], catch_exceptions=False)


def _add(*extra):
    return _invoke(
        "add", "--source", "5m", "--timeframe", "1h", "--model", "deepzone dc",
        "--entry", "100", "--exit", "110", "--rr", "2", *extra,
    )


class TestAdd:
    def test_add_writes_snapshot(self, journal_env):
        result = _add("--date", "2024-03-05T14:30", "--notes", "patient entry")
        assert result.exit_code == 0, result.output
        assert "Saved trade" in result.output
        (entry,) = json.loads(journal_env.read_text())
        assert entry["model"] == "deepzone dc"
        assert entry["status"] == "WIN"
        assert entry["notes"] == "patient entry"

    def test_malformed_numbers_accepted(self, journal_env):
        result = _invoke(
            "add", "--source", "5m", "--timeframe", "1h", "--model", "m",
            "--entry", "abc", "--rr", "",
        )
        assert result.exit_code == 0, result.output
        (entry,) = json.loads(journal_env.read_text())
        assert entry["entryPrice"] == 0
        assert entry["rr"] == 0

    def test_requires_model(self, journal_env):
        result = CliRunner().invoke(main, ["add", "--source", "5m", "--timeframe", "1h"])
        assert result.exit_code != 0
        assert "--model" in result.output

    def test_analyze_without_analyzer_uses_fallback(self, journal_env):
        result = _add("--analyze")
        assert result.exit_code == 0, result.output
        (entry,) = json.loads(journal_env.read_text())
        assert entry["aiAnalysis"].startswith("Unable to complete AI analysis")

    def test_screenshot_attached(self, journal_env, tmp_path):
        image = tmp_path / "chart.png"
        image.write_bytes(b"\x89PNG fake")
        result = _add("--screenshot", str(image))
        assert result.exit_code == 0, result.output
        (entry,) = json.loads(journal_env.read_text())
        assert entry["screenshotBase64"].startswith("data:image/png;base64,")


class TestHistoryAndStats:
    @pytest.fixture
    def populated(self, journal_env):
        _add("--date", "2024-02-10T09:00", "--status", "WIN", "--model", "a")
        _add("--date", "2024-03-02T09:00", "--status", "LOSS", "--model", "b")
        _add("--date", "2024-03-12T09:00", "--status", "BE", "--model", "a")
        return journal_env

    def test_history_newest_first(self, populated):
        result = _invoke("history")
        assert result.exit_code == 0, result.output
        lines = [ln for ln in result.output.splitlines() if ln.startswith("2024")]
        assert [ln[:10] for ln in lines] == ["2024-03-12", "2024-03-02", "2024-02-10"]

    def test_history_date_range(self, populated):
        result = _invoke("history", "--start", "2024-03-01", "--end", "2024-03-05")
        lines = [ln for ln in result.output.splitlines() if ln.startswith("2024")]
        assert len(lines) == 1

    def test_history_bad_date(self, populated):
        result = CliRunner().invoke(main, ["history", "--start", "March"])
        assert result.exit_code != 0

    def test_stats(self, populated):
        result = _invoke("stats")
        assert result.exit_code == 0, result.output
        assert "Total trades: 3" in result.output
        assert "Win rate:     33.3%" in result.output
        assert "Net R:R:      1.00R" in result.output
        assert "Break Even  1" in result.output

    def test_stats_empty_journal(self, journal_env):
        result = _invoke("stats")
        assert "Total trades: 0" in result.output
        assert "Win rate:     0.0%" in result.output

    def test_show(self, populated):
        trade_id = json.loads(populated.read_text())[0]["id"]
        result = _invoke("show", trade_id)
        assert result.exit_code == 0, result.output
        assert "Model:      a" in result.output

    def test_history_skips_out_of_range_timestamp(self, populated):
        entries = json.loads(populated.read_text())
        entries.append({**entries[0], "id": "far-future", "timestamp": 1e300})
        populated.write_text(json.dumps(entries))
        result = _invoke("history")
        assert result.exit_code == 0, result.output
        assert "far-future" not in result.output
        assert len([ln for ln in result.output.splitlines() if ln.startswith("2024")]) == 3

    def test_show_unknown(self, populated):
        result = CliRunner().invoke(main, ["show", "nope"])
        assert result.exit_code == 1
        assert "No trade with id nope" in result.output


def test_load_screenshot_data_url(tmp_path):
    image = tmp_path / "chart.jpg"
    image.write_bytes(b"\xff\xd8\xff")
    assert load_screenshot(str(image)) == "data:image/jpeg;base64,/9j/"


def test_add_help_lists_suggestions():
    result = CliRunner().invoke(main, ["--config", "does-not-exist.toml", "add", "--help"])
    assert result.exit_code == 0
    text = " ".join(result.output.split())
    assert "4h" in text
    assert "deepzone dc" in text
