"""Tests for the command line host."""

from datetime import datetime
from io import StringIO
from pathlib import Path
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from pushup_challenge.cli import main
from pushup_challenge.utils.time import ManualClock

CET = ZoneInfo("CET")


class TestCli:
    """Run one-shot commands against a temporary database."""

    @pytest.fixture(autouse=True)
    def fixed_clock(self):
        clock = ManualClock(datetime(2024, 3, 4, 10, 0, tzinfo=CET), zone=CET)
        with patch("pushup_challenge.engine.SystemClock", return_value=clock):
            yield clock

    @pytest.fixture
    def run(self, tmp_path: Path):
        db_path = str(tmp_path / "settings.db")

        def invoke(*argv: str) -> tuple[int, str]:
            out = StringIO()
            code = main(["--config-dir", str(tmp_path), "--db-path", db_path, *argv], out=out)
            return code, out.getvalue()

        return invoke

    def test_status_of_new_install(self, run):
        code, output = run("status")
        assert code == 0
        assert "Mode: welcome" in output

    def test_start_asks_for_max_test(self, run):
        code, output = run("start")
        assert code == 0
        assert "Mode: awaiting_max_test" in output

    def test_max_test_starts_session(self, run):
        run("start")
        code, output = run("max-test", "40")

        assert code == 0
        assert "Mode: active_session" in output
        assert "Next set: 40 pushups every 60 minutes" in output
        assert "Today: 40 pushups" in output

    def test_state_survives_between_invocations(self, run):
        run("start")
        run("max-test", "40")

        code, output = run("status")

        assert "Mode: active_session" in output
        assert "Week 1 - Day 1" in output

    def test_rejected_max_test(self, run):
        run("start")
        code, output = run("max-test", "0")
        assert code == 2
        assert "Max test must be a positive number." in output
        assert "Mode: awaiting_max_test" in output

    def test_history(self, run):
        code, output = run("history")
        assert output.strip() == "No pushups logged yet."

        run("start")
        run("max-test", "40")
        code, output = run("history")
        assert code == 0
        assert output.strip() == "Mar 04, 2024: 40 pushups"

    def test_done_for_today(self, run):
        run("start")
        run("max-test", "40")
        code, output = run("done")
        assert "Mode: done_for_today" in output

        code, output = run("status")
        assert "Mode: done_for_today" in output

    def test_done_hint_names_resume_hour(self, run):
        run("start")
        run("max-test", "40")
        code, output = run("done")
        assert "Reminders resume at 09:00 CET." in output

    def test_done_hint_follows_configured_window(self, run, tmp_path: Path):
        (tmp_path / "challenge.yaml").write_text("time:\n  restricted_end_hour: 8\n")
        run("start")
        run("max-test", "40")
        code, output = run("done")
        assert "Reminders resume at 08:00 CET." in output

    def test_pause_without_session(self, run):
        code, output = run("pause")
        assert "No running session to pause." in output

    def test_pause_and_resume(self, run):
        run("start")
        run("max-test", "40")

        code, output = run("pause")
        assert "(paused)" in output

        code, output = run("resume")
        assert "(running)" in output

    def test_reset_requires_confirmation(self, run):
        run("start")
        run("max-test", "40")

        code, output = run("reset")
        assert code == 1
        code, output = run("status")
        assert "Mode: active_session" in output

        code, output = run("reset", "--yes")
        assert code == 0
        code, output = run("status")
        assert "Mode: welcome" in output

    def test_invalid_config_exits(self, tmp_path: Path, run):
        (tmp_path / "challenge.yaml").write_text("notification:\n  sink: carrier_pigeon\n")
        with pytest.raises(SystemExit) as exc_info:
            run("status")
        assert "sink" in str(exc_info.value)

    def test_new_day_from_status(self, run, fixed_clock):
        run("start")
        run("max-test", "40")
        fixed_clock.set(datetime(2024, 3, 5, 10, 0, tzinfo=CET))

        code, output = run("status")

        assert "Mode: awaiting_next_day" in output
        assert "Next set: 20 pushups every 60 minutes" in output
