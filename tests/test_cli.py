"""Tests for the command-line entry point."""

from unittest.mock import MagicMock

import pytest

from ollama_repl import cli, fmt
from ollama_repl.config import _UNSET
from ollama_repl.errors import ConnectivityError


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run main() with no config files and a clean environment."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    for var in ("OLLAMA_HOST", "OLLAMA_MODEL", "DEBUG"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(fmt, "_debug", False)
    # init() rebuilds the consoles; keep test capture in place instead.
    monkeypatch.setattr(fmt, "init", lambda **kw: None)


@pytest.fixture
def fake_session(monkeypatch):
    session = MagicMock()
    factory = MagicMock(return_value=session)
    monkeypatch.setattr(cli, "Session", factory)
    return factory, session


class TestParser:
    def test_unset_by_default(self):
        args = cli.build_parser().parse_args([])
        assert args.model is _UNSET
        assert args.host is _UNSET
        assert args.debug is _UNSET

    def test_color_flags_exclusive(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--color", "--no-color"])

    def test_numeric_flags(self):
        args = cli.build_parser().parse_args(["--cache-duration", "10", "--request-timeout", "5"])
        assert args.cache_duration == 10.0
        assert args.request_timeout == 5.0


class TestMain:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--version"])
        assert excinfo.value.code == 0
        assert capsys.readouterr().out.strip()

    def test_init_config(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--init-config"])
        assert excinfo.value.code == 0
        assert "# ollama-repl configuration file" in capsys.readouterr().out

    def test_missing_model_exits_1(self, isolated, captured_output, fake_session):
        with pytest.raises(SystemExit) as excinfo:
            cli.main([])
        assert excinfo.value.code == 1
        assert "OLLAMA_MODEL" in captured_output[1].getvalue()
        fake_session[0].assert_not_called()

    def test_bad_host_exits_1(self, isolated, captured_output, fake_session):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--model", "llama3", "--host", "localhost"])
        assert excinfo.value.code == 1
        assert "OLLAMA_HOST must be a valid URL" in captured_output[1].getvalue()

    def test_unreachable_server_exits_1(self, isolated, captured_output, fake_session):
        _, session = fake_session
        session.startup_check.side_effect = ConnectivityError(
            "Error connecting to Ollama at http://localhost:11434: refused"
        )
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--model", "llama3"])
        assert excinfo.value.code == 1
        err = captured_output[1].getvalue()
        assert "Error connecting to Ollama" in err
        assert "ensure Ollama is running" in err
        session.run.assert_not_called()

    def test_runs_session(self, isolated, captured_output, fake_session, monkeypatch):
        factory, session = fake_session
        monkeypatch.setenv("OLLAMA_MODEL", "llama3")
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--host", "http://box:11434/", "--cache-duration", "60"])
        assert excinfo.value.code == 0
        client = factory.call_args[0][0]
        assert client.host == "http://box:11434"
        assert client.current_model == "llama3"
        assert factory.call_args[1]["cache_duration"] == 60.0
        session.startup_check.assert_called_once()
        session.run.assert_called_once()
