"""Tests for the command-line interface."""
import io

import httpx
import pytest
import yaml
from rich.console import Console
from rich.text import Text
from typer.testing import CliRunner

import parley.cli.app as cli_app
from parley.app import MainLoop
from parley.chat import ConversationAccumulator
from parley.events import EventBus, Notification, NotificationLevel, Tick
from parley.llm import LLamacppClient

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for var in ("PARLEY_CONFIG", "OPENAI_API_KEY", "GEMINI_API_KEY", "XAI_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "llm": "ollama",
        "ollama": {"url": "http://localhost:11434/api/chat", "model": "llama3.2"},
    }), encoding="utf-8")
    return path


class TestBackendsCommand:
    def test_lists_backends(self, config_file):
        result = runner.invoke(cli_app.app, ["backends", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "ollama *" in result.output
        assert "llama3.2" in result.output
        assert "xai" in result.output

    def test_bad_config_exits_with_error(self, tmp_path):
        result = runner.invoke(cli_app.app, ["backends", "--config", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1


class TestAskCommand:
    def test_streams_answer(self, config_file, monkeypatch, scripted_llm):
        llm = scripted_llm(chunks=["Four", "."])
        monkeypatch.setattr(cli_app, "get_llm", lambda config, backend, console: llm)

        result = runner.invoke(cli_app.app, ["ask", "What is 2+2?", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "Four." in result.output
        assert llm.closed
        assert llm.requests[0][-1].content == "What is 2+2?"

    def test_missing_api_key_exits(self, tmp_path, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"llm": "chatgpt"}), encoding="utf-8")

        result = runner.invoke(cli_app.app, ["ask", "hi", "--config", str(path)])

        assert result.exit_code == 1

    def test_connection_failure_exits_with_error(self, config_file, monkeypatch, stream_server):
        server = stream_server([], error=httpx.ConnectError("All connection attempts failed"))
        llm = LLamacppClient(url="http://127.0.0.1:1/v1/chat/completions", transport=server.transport)
        monkeypatch.setattr(cli_app, "get_llm", lambda config, backend, console: llm)

        result = runner.invoke(cli_app.app, ["ask", "hi", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "ConnectError: All connection attempts failed" in result.output


class TestConsoleView:
    """Tests for the one-shot answer printer."""

    def test_each_notification_printed_once(self, scripted_llm, capsys):
        loop = MainLoop(bus=EventBus(), llm=scripted_llm(), accumulator=ConversationAccumulator(formatter=Text))
        view = cli_app.ConsoleView(Console(file=io.StringIO()))

        loop.notifications.push(Notification("first", NotificationLevel.WARNING, ttl=1))
        view.render(loop)
        view.render(loop)
        loop.dispatch(Tick())
        loop.notifications.push(Notification("second", NotificationLevel.WARNING, ttl=1))
        view.render(loop)

        err = capsys.readouterr().err
        assert err.count("first") == 1
        assert err.count("second") == 1
        assert loop.running
