from pulse import events
from pulse.session_state import Status
from pulse.tool_status import codex_tool_kind, format_codex_tool_status
from pulse.watchers import BaseWatcher, as_str

TOOL_CALL_TYPES = ("function_call", "custom_tool_call")
TOOL_OUTPUT_TYPES = ("function_call_output", "custom_tool_call_output")


class CodexWatcher(BaseWatcher):
    """Interpret OpenAI Codex CLI rollout-*.jsonl transcripts.

    Every record is ``{"type": ..., "payload": {"type": ..., ...}}``.
    ``event_msg`` records carry turn lifecycle (task_started, user_message,
    agent_reasoning, task_complete); ``response_item`` records carry model
    output, including tool calls and their outputs keyed by ``call_id``.
    """

    SOURCE_NAME = "CODEX"

    def process_record(self, session, record):
        rec_type = record.get("type", "")
        payload = record.get("payload")
        if not isinstance(payload, dict):
            return
        item_type = payload.get("type", "")

        if rec_type == "event_msg":
            if item_type == "task_started":
                self.reset_turn(session, waiting=False)
            elif item_type == "task_complete":
                self.end_turn(session)
            elif item_type == "agent_reasoning":
                self.mark_active(session)
            elif item_type == "user_message":
                # Prompt submitted; the model has not picked it up yet.
                session.is_waiting = True
                self.sink.send(events.agent_status(session.id, Status.WAITING))

        elif rec_type == "response_item":
            if item_type in TOOL_CALL_TYPES:
                self._on_tool_call(session, payload)
            elif item_type in TOOL_OUTPUT_TYPES:
                call_id = as_str(payload.get("call_id"))
                if not call_id:
                    return
                self.finish_tool(session, call_id)
                if not session.active_tools:
                    session.had_tools_in_turn = False
            elif item_type == "reasoning":
                self.mark_active(session)
            elif (item_type == "message"
                  and payload.get("role") == "assistant"
                  and not session.had_tools_in_turn):
                self.timers.start_waiting(session.id)

    def _on_tool_call(self, session, payload):
        call_id = as_str(payload.get("call_id"))
        if not call_id:
            return
        if payload.get("type") == "custom_tool_call":
            tool_name = as_str(payload.get("name")) or "custom_tool"
            arguments = payload.get("input") or ""
        else:
            tool_name = as_str(payload.get("name"))
            arguments = payload.get("arguments") or ""

        status = format_codex_tool_status(
            tool_name, arguments, command_max=self.config.command_display_max)
        session.had_tools_in_turn = True
        self.mark_active(session)
        if self.start_tool(session, call_id, codex_tool_kind(tool_name), status):
            self.timers.start_permission(session.id)
