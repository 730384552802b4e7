"""Tests for the command line, config resolution and console output."""
import io
import json
import os

from agent_pulse import build_parser, config_from_args
from pulse.config import Config, claude_projects_root, codex_sessions_root
from pulse.events import ConsoleSink, agent_status, tool_start
from pulse.session_state import Status


def _config(*argv):
    return config_from_args(build_parser().parse_args(list(argv)))


class TestConfigFromArgs:

    def test_defaults(self):
        config = _config()
        assert config.claude_root is None
        assert config.codex_root is None
        assert config.watch_files is True
        assert config.idle_timeout == 300
        assert config.permission_delay == 7.0

    def test_codex_only_disables_claude(self, tmp_path):
        config = _config("--codex-only", "--codex-dir", str(tmp_path))
        assert config.resolved_claude_root() is None
        assert config.resolved_codex_root() == str(tmp_path)

    def test_claude_only_disables_codex(self):
        config = _config("--claude-only")
        assert config.resolved_codex_root() is None
        assert config.resolved_claude_root()

    def test_timings_and_no_watch(self):
        config = _config("--idle-timeout", "60", "--idle-delay", "2",
                         "--permission-delay", "3.5", "--no-watch")
        assert config.idle_timeout == 60
        assert config.idle_delay == 2
        assert config.permission_delay == 3.5
        assert config.watch_files is False


class TestRoots:

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CLAUDE_CONFIG_DIR", str(tmp_path / "claude"))
        monkeypatch.setenv("CODEX_HOME", str(tmp_path / "codex"))
        assert claude_projects_root() == os.path.join(str(tmp_path / "claude"),
                                                      "projects")
        assert codex_sessions_root() == os.path.join(str(tmp_path / "codex"),
                                                     "sessions")

    def test_home_defaults(self, monkeypatch):
        monkeypatch.delenv("CLAUDE_CONFIG_DIR", raising=False)
        monkeypatch.delenv("CODEX_HOME", raising=False)
        home = os.path.expanduser("~")
        assert Config().resolved_claude_root() == os.path.join(
            home, ".claude", "projects")
        assert Config().resolved_codex_root() == os.path.join(
            home, ".codex", "sessions")


class TestConsoleSink:

    def test_text_lines(self):
        out = io.StringIO()
        sink = ConsoleSink(stream=out)
        sink.send(tool_start(3, "toolu_1", "Reading app.py"))
        sink.send(agent_status(3, Status.WAITING))
        assert out.getvalue() == (
            "[agent 3] + Reading app.py\n"
            "[agent 3] waiting\n"
        )

    def test_json_lines(self):
        out = io.StringIO()
        ConsoleSink(stream=out, as_json=True).send(agent_status(1, Status.ACTIVE))
        assert json.loads(out.getvalue()) == {
            "event": "agent_status", "agent_id": 1, "status": "active"}
