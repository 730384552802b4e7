"""Tests for Codex rollout transcript interpretation."""
import json

from transcripts import (
    codex_event,
    codex_exec,
    codex_item,
    codex_message,
    codex_output,
    codex_patch,
)


class TestCodexTools:
    """function_call / custom_tool_call lifecycle."""

    def test_exec_command_start_and_output(self, harness, codex_session):
        sid = codex_session.id
        harness.append(codex_session, codex_exec("call_1", "cargo build --release"))

        assert harness.sink.events == [
            {"event": "agent_status", "agent_id": sid, "status": "active"},
            {"event": "tool_start", "agent_id": sid, "tool_id": "call_1",
             "status": "Running: cargo build --release"},
        ]
        assert codex_session.active_tools["call_1"].kind == "Bash"
        assert codex_session.had_tools_in_turn is True
        assert harness.timers.permission_pending(sid)

        harness.append(codex_session, codex_output("call_1"))
        assert codex_session.active_tools == {}
        assert codex_session.had_tools_in_turn is False
        harness.advance(0.3)
        assert harness.sink.of_type("tool_done") == [
            {"event": "tool_done", "agent_id": sid, "tool_id": "call_1"},
        ]

    def test_apply_patch_custom_tool(self, harness, codex_session):
        patch = "*** Begin Patch\n*** Update File: src/lib/parser.rs\n@@\n-a\n+b\n"
        harness.append(codex_session, codex_patch("call_p", patch))

        assert harness.sink.of_type("tool_start")[0]["status"] == "Editing parser.rs"
        assert codex_session.active_tools["call_p"].kind == "Edit"

        harness.append(codex_session, codex_output("call_p", custom=True))
        assert codex_session.active_tools == {}

    def test_custom_tool_defaults_name(self, harness, codex_session):
        harness.append(codex_session,
                       codex_item("custom_tool_call", call_id="c1", input="x"))
        assert harness.sink.of_type("tool_start")[0]["status"] == "Using custom_tool"

    def test_call_without_id_is_ignored(self, harness, codex_session):
        harness.append(codex_session,
                       codex_item("function_call", name="exec_command",
                                  arguments=json.dumps({"cmd": "ls"})),
                       codex_item("function_call_output", output="x"))
        assert harness.sink.events == []

    def test_silent_tool_triggers_permission_prompt(self, harness, codex_session):
        harness.append(codex_session, codex_exec("call_1", "rm -rf build"))
        harness.advance(7)
        assert harness.sink.of_type("permission_prompt") == [
            {"event": "permission_prompt", "agent_id": codex_session.id},
        ]

    def test_user_input_tool_is_exempt(self, harness, codex_session):
        harness.append(codex_session,
                       codex_item("function_call", name="request_user_input",
                                  call_id="q1", arguments="{}"))
        assert not harness.timers.permission_pending(codex_session.id)
        assert harness.sink.of_type("tool_start")[0]["status"] == \
            "Waiting for your answer"


class TestCodexTurns:
    """event_msg lifecycle records."""

    def test_task_started_resets_tracking(self, harness, codex_session):
        harness.append(codex_session, codex_exec("call_1", "sleep 10"))
        harness.append(codex_session, codex_event("task_started"))

        sid = codex_session.id
        assert codex_session.active_tools == {}
        assert codex_session.is_waiting is False
        assert codex_session.had_tools_in_turn is False
        assert harness.sink.events[-2:] == [
            {"event": "tools_cleared", "agent_id": sid},
            {"event": "agent_status", "agent_id": sid, "status": "active"},
        ]
        assert not harness.timers.permission_pending(sid)

    def test_reasoning_marks_active(self, harness, codex_session):
        codex_session.is_waiting = True
        harness.append(codex_session, codex_event("agent_reasoning", text="hmm"))
        assert codex_session.is_waiting is False
        assert harness.sink.events == [
            {"event": "agent_status", "agent_id": codex_session.id,
             "status": "active"},
        ]

    def test_reasoning_item_marks_active(self, harness, codex_session):
        harness.append(codex_session, codex_item("reasoning", summary=[]))
        assert harness.sink.names() == ["agent_status"]

    def test_user_message_marks_waiting(self, harness, codex_session):
        harness.append(codex_session, codex_event("user_message", message="hi"))
        assert codex_session.is_waiting is True
        assert harness.sink.events[-1]["status"] == "waiting"

    def test_task_complete_ends_turn(self, harness, codex_session):
        harness.append(codex_session, codex_exec("call_1", "ls"))
        harness.append(codex_session, codex_event("task_complete"))
        assert codex_session.active_tools == {}
        assert codex_session.is_waiting is True
        assert harness.sink.events[-1] == {
            "event": "agent_status", "agent_id": codex_session.id,
            "status": "waiting"}

    def test_assistant_message_without_tools_starts_idle_timer(self, harness,
                                                                codex_session):
        harness.append(codex_session, codex_message())
        harness.advance(5)
        assert harness.sink.events == [
            {"event": "agent_status", "agent_id": codex_session.id,
             "status": "waiting"},
        ]

    def test_assistant_message_during_tools_does_not(self, harness,
                                                     codex_session):
        harness.append(codex_session, codex_exec("call_1", "ls"),
                       codex_message("running ls"))
        harness.advance(5)
        statuses = [e["status"] for e in harness.sink.of_type("agent_status")]
        assert statuses == ["active"]

    def test_user_role_message_ignored(self, harness, codex_session):
        harness.append(codex_session,
                       codex_item("message", role="user", content=[]))
        harness.advance(10)
        assert harness.sink.events == []

    def test_records_without_payload_are_ignored(self, harness, codex_session):
        harness.append(codex_session,
                       {"type": "session_meta"},
                       {"type": "event_msg", "payload": "x"},
                       {"timestamp": "2025-01-01T00:00:00Z", "type": "turn_context",
                        "payload": {"cwd": "/tmp"}})
        assert harness.sink.events == []


class TestCodexRobustness:
    """Odd but valid JSON in tool records."""

    def test_non_string_names_and_ids_are_skipped(self, harness, codex_session):
        harness.append(codex_session,
                       codex_item("function_call", name=["shell"],
                                  call_id="c1", arguments="{}"),
                       codex_item("function_call", name="exec_command",
                                  call_id=["c2"], arguments="{}"),
                       codex_item("function_call_output", call_id={"a": 1}),
                       codex_item("custom_tool_call", name={"x": 1},
                                  call_id="c4", input="x"),
                       codex_exec("c3", "ls"))

        assert set(codex_session.active_tools) == {"c1", "c3", "c4"}
        statuses = [e["status"] for e in harness.sink.of_type("tool_start")]
        assert statuses == ["Using ", "Using custom_tool", "Running: ls"]
