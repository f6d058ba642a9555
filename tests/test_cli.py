"""Tests for the putioarr command line."""

from __future__ import annotations

from pathlib import Path

import pytest

from putioarr import main as cli


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_run_accepts_config_path() -> None:
    args = cli.build_parser().parse_args(["run", "-c", "/etc/putioarr.toml"])

    assert args.command == "run"
    assert args.config_path == "/etc/putioarr.toml"


def test_run_with_invalid_config_exits_nonzero(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda loglevel="info": None)

    assert cli.main(["run", "--config", str(tmp_path / "missing.toml")]) == 1


def test_generate_config_uses_token(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(cli, "get_token", lambda: "linked-token")
    config_path = tmp_path / "config.toml"

    assert cli.main(["generate-config", "-c", str(config_path)]) == 0
    assert 'api_key = "linked-token"' in config_path.read_text()


def test_get_token_polls_until_linked(monkeypatch, capsys) -> None:
    from putioarr.apps.putio import api as putio_api
    from putioarr.utils import token

    answers = iter([None, "tok"])
    monkeypatch.setattr(putio_api, "get_oob", lambda: "CODE1")
    monkeypatch.setattr(putio_api, "check_oob", lambda code: next(answers))

    assert token.get_token(check_interval=0) == "tok"
    assert "enter the code: CODE1" in capsys.readouterr().out
