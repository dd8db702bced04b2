"""End-to-end runs of the command line front end against a temp config."""

from datetime import date

import pytest

from sticker_habits import cli
from sticker_habits.controllers.ticket_timer import DailyTicketTimer


@pytest.fixture
def run(tmp_path, capsys):
    cfg = str(tmp_path / "config.yaml")

    def _run(*args):
        code = cli.main(["--config", cfg, *args])
        return code, capsys.readouterr().out

    return _run


def _habit_id(run):
    _, out = run("habits")
    return out.split()[1]


class TestCli:
    def test_fresh_status(self, run):
        code, out = run("status")
        assert code == 0
        assert "Tickets: 1" in out
        assert "Collection: 0/21 (0%)" in out

    def test_draw_then_no_tickets(self, run):
        code, out = run("draw")
        assert code == 0
        assert "You got" in out

        code, out = run("draw")
        assert code == 1
        assert out.startswith("Error:")

    def test_habit_flow(self, run):
        assert run("add-habit", "Read", "--icon", "📚")[0] == 0
        habit_id = _habit_id(run)
        run("draw")

        code, out = run("complete", habit_id)
        assert code == 0
        assert "Streak 1" in out

        _, out = run("habits")
        assert out.startswith("[x]")
        assert "streak 1, total 1" in out

        _, out = run("stickers", "--filter", "used")
        assert "used" in out

        _, out = run("calendar", habit_id)
        assert "1/" in out
        assert date.today().isoformat() in out

        assert run("remove-habit", habit_id)[0] == 0
        _, out = run("habits")
        assert "No habits yet." in out

    def test_complete_without_stickers(self, run):
        run("add-habit", "Read")
        code, out = run("complete", _habit_id(run))
        assert code == 1
        assert "No unused stickers" in out

    def test_invalid_habit_name(self, run):
        code, out = run("add-habit", "x" * 31)
        assert code == 1
        assert "at most 30" in out

    def test_bad_date(self, run):
        run("add-habit", "Read")
        habit_id = _habit_id(run)
        run("draw")
        with pytest.raises(SystemExit):
            run("complete", habit_id, "--date", "10/05/2024")

    def test_unknown_log_level_is_reported(self, run, tmp_path):
        (tmp_path / "config.yaml").write_text("key: abc\nlog_level: loud\n", encoding="utf-8")
        code, out = run("status")
        assert code == 1
        assert out.startswith("Error:")
        assert "log_level" in out

    def test_watch_runs_the_daily_ticket_timer(self, run, monkeypatch):
        seen = []

        def run_blocking(timer, stop_event):
            seen.append(timer.interval_seconds)
            timer.check()
            raise KeyboardInterrupt

        monkeypatch.setattr(DailyTicketTimer, "run_blocking", run_blocking)
        code, _ = run("watch")
        assert code == 0
        assert seen == [60]
