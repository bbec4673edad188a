"""Integration tests for the minirt demo CLI entry point."""

from __future__ import annotations

import json

import pytest

from minirt import __main__ as cli


def test_demo_prints_progress_in_order(capsys):
    exit_code = cli.main(["demo", "--first", "0.01", "--second", "0.02"])

    assert exit_code == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == [
        "Main task starting...",
        "Task 1 started",
        "Task 2 started",
        "Task 1 done",
        "Task 2 done",
    ]


def test_demo_json_summary(capsys):
    exit_code = cli.main(
        ["demo", "--first", "0.01", "--second", "0.02", "--idle", "spin", "--format", "json"]
    )

    assert exit_code == 0
    lines = capsys.readouterr().out.splitlines()
    payload = json.loads(lines[-1])

    assert payload["status"] == "ok"
    assert payload["elapsed"] >= 0.02
    assert payload["stats"]["completed"] == 1
    assert payload["stats"]["idle_waits"] == 0
    assert payload["stats"]["timers_registered"] == 2


def test_demo_rejects_bad_environment(capsys, monkeypatch):
    monkeypatch.setenv("MINIRT_IDLE", "bogus")

    exit_code = cli.main(["demo", "--first", "0", "--second", "0"])

    assert exit_code == 1
    assert "idle must be one of" in capsys.readouterr().err


def test_demo_rejects_unknown_idle_flag():
    with pytest.raises(SystemExit):
        cli.main(["demo", "--idle", "nap"])


def test_requires_subcommand():
    with pytest.raises(SystemExit):
        cli.main([])
