import logging

from pulse import events
from pulse.scheduler import has_non_exempt_subagent_tool
from pulse.session_state import ToolInfo
from pulse.tool_status import (
    SUBTASK_TOOLS,
    format_tool_status,
    is_permission_exempt,
)
from pulse.watchers import BaseWatcher, as_str

logger = logging.getLogger(__name__)

SUBPROCESS_PROGRESS_TYPES = ("bash_progress", "mcp_progress")


def _content_blocks(record):
    message = record.get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")


def _blocks_of(content, block_type):
    if not isinstance(content, list):
        return []
    return [b for b in content
            if isinstance(b, dict) and b.get("type") == block_type]


class ClaudeWatcher(BaseWatcher):
    """Interpret Claude Code JSONL transcripts."""

    SOURCE_NAME = "CLAUDE CODE"

    def process_record(self, session, record):
        rec_type = record.get("type")

        if rec_type == "assistant":
            self._on_assistant(session, record)
        elif rec_type == "progress":
            self._on_progress(session, record)
        elif rec_type == "user":
            self._on_user(session, record)
        elif (rec_type == "system"
              and record.get("subtype") == "turn_duration"):
            self.end_turn(session)

    def _status_for(self, block):
        return format_tool_status(
            as_str(block.get("name")), block.get("input") or {},
            command_max=self.config.command_display_max,
            description_max=self.config.description_display_max,
        )

    def _on_assistant(self, session, record):
        content = _content_blocks(record)
        tool_uses = _blocks_of(content, "tool_use")

        if tool_uses:
            session.had_tools_in_turn = True
            self.mark_active(session)
            needs_permission = False
            for block in tool_uses:
                if not as_str(block.get("id")):
                    continue
                kind = as_str(block.get("name"))
                if self.start_tool(session, block["id"], kind,
                                   self._status_for(block)):
                    needs_permission = True
            if needs_permission:
                self.timers.start_permission(session.id)
        elif _blocks_of(content, "text") and not session.had_tools_in_turn:
            self.timers.start_waiting(session.id)

    def _on_user(self, session, record):
        content = _content_blocks(record)
        results = _blocks_of(content, "tool_result")

        if results:
            for block in results:
                tool_id = as_str(block.get("tool_use_id"))
                if not tool_id:
                    continue
                info = session.active_tools.get(tool_id)
                if info is not None and info.kind in SUBTASK_TOOLS:
                    session.active_subagent_tools.pop(tool_id, None)
                    self.sink.send(events.subagent_clear(session.id, tool_id))
                self.finish_tool(session, tool_id)
            if not session.active_tools:
                session.had_tools_in_turn = False
        elif (isinstance(content, list) and content) or (
                isinstance(content, str) and content.strip()):
            # The user typed something: whatever was running is over.
            self.reset_turn(session, waiting=False)

    # -- subagent progress ---------------------------------------------------

    def _on_progress(self, session, record):
        parent_id = as_str(record.get("parentToolUseID"))
        data = record.get("data")
        if not parent_id or not isinstance(data, dict):
            return

        if data.get("type") in SUBPROCESS_PROGRESS_TYPES:
            if parent_id in session.active_tools:
                self.timers.start_permission(session.id)
            return

        parent = session.active_tools.get(parent_id)
        if parent is None or parent.kind not in SUBTASK_TOOLS:
            return

        msg = data.get("message")
        if not isinstance(msg, dict):
            return
        content = _content_blocks(msg)
        if not isinstance(content, list):
            return

        if msg.get("type") == "assistant":
            self._on_subagent_tool_use(session, parent_id, content)
        elif msg.get("type") == "user":
            self._on_subagent_tool_result(session, parent_id, content)

    def _on_subagent_tool_use(self, session, parent_id, content):
        needs_permission = False
        for block in _blocks_of(content, "tool_use"):
            tool_id = as_str(block.get("id"))
            if not tool_id:
                continue
            kind = as_str(block.get("name"))
            status = self._status_for(block)
            logger.debug(f"Agent {session.id} subagent tool start: {tool_id} "
                         f"{status} (parent: {parent_id})")
            nested = session.active_subagent_tools.setdefault(parent_id, {})
            nested[tool_id] = ToolInfo(status=status, kind=kind)
            if not is_permission_exempt(kind):
                needs_permission = True
            self.sink.send(events.subagent_tool_start(
                session.id, parent_id, tool_id, status))
        if needs_permission:
            self.timers.start_permission(session.id)

    def _on_subagent_tool_result(self, session, parent_id, content):
        for block in _blocks_of(content, "tool_result"):
            tool_id = as_str(block.get("tool_use_id"))
            if not tool_id:
                continue
            logger.debug(f"Agent {session.id} subagent tool done: {tool_id} "
                         f"(parent: {parent_id})")
            nested = session.active_subagent_tools.get(parent_id)
            if nested is not None:
                nested.pop(tool_id, None)
            self.timers.emit_later(session.id, events.subagent_tool_done(
                session.id, parent_id, tool_id))
        if has_non_exempt_subagent_tool(session):
            self.timers.start_permission(session.id)
