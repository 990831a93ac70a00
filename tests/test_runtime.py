"""Unit tests for runtime helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from order_export.core.runtime import load_env, log_event


def test_log_event_prints_and_appends(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    """Messages go to the console and to the logfile."""
    logfile = tmp_path / "run.log"

    log_event(str(logfile), "first")
    log_event(str(logfile), "second")

    assert "first" in capsys.readouterr().out
    lines = logfile.read_text(encoding="utf-8").splitlines()
    assert [line.split(" ", 2)[2] for line in lines] == ["first", "second"]


def test_log_event_ignores_unwritable_logfile(tmp_path: Path) -> None:
    """A logfile in a missing directory never raises."""
    log_event(str(tmp_path / "nope" / "run.log"), "still fine")


def test_load_env_parses_key_values(tmp_path: Path) -> None:
    """Comments and blank lines are skipped; values may contain '='."""
    env_path = tmp_path / "app.env"
    env_path.write_text("# comment\n\nINPUT_FILE = in.csv\nLOGFILE=a=b\nnoise\n", encoding="utf-8")

    assert load_env(str(env_path)) == {"INPUT_FILE": "in.csv", "LOGFILE": "a=b"}


def test_load_env_missing_file_is_empty(tmp_path: Path) -> None:
    """No app.env means no overrides."""
    assert load_env(str(tmp_path / "app.env")) == {}
