"""Outbound events and the sinks that carry them to the presentation layer.

Events are plain dicts with an ``event`` name and the session id under
``agent_id``::

    {"event": "agent_discovered", "agent_id": 1, "family": "claude", "path": "..."}
    {"event": "agent_status",     "agent_id": 1, "status": "active"}
    {"event": "tool_start",       "agent_id": 1, "tool_id": "toolu_1", "status": "Reading app.py"}
    {"event": "tool_done",        "agent_id": 1, "tool_id": "toolu_1"}
    {"event": "permission_prompt", "agent_id": 1}

Delivery is fire-and-forget; consumers must tolerate duplicates.
"""
import json
import sys

AGENT_DISCOVERED = "agent_discovered"
AGENT_DORMANT = "agent_dormant"
AGENT_STATUS = "agent_status"
TOOL_START = "tool_start"
TOOL_DONE = "tool_done"
TOOLS_CLEARED = "tools_cleared"
SUBAGENT_TOOL_START = "subagent_tool_start"
SUBAGENT_TOOL_DONE = "subagent_tool_done"
SUBAGENT_CLEAR = "subagent_clear"
PERMISSION_PROMPT = "permission_prompt"
PERMISSION_PROMPT_CLEARED = "permission_prompt_cleared"


def agent_discovered(session):
    return {"event": AGENT_DISCOVERED, "agent_id": session.id,
            "family": session.family.label, "path": session.source_path}


def agent_dormant(agent_id):
    return {"event": AGENT_DORMANT, "agent_id": agent_id}


def agent_status(agent_id, status):
    return {"event": AGENT_STATUS, "agent_id": agent_id,
            "status": status.value}


def tool_start(agent_id, tool_id, status):
    return {"event": TOOL_START, "agent_id": agent_id, "tool_id": tool_id,
            "status": status}


def tool_done(agent_id, tool_id):
    return {"event": TOOL_DONE, "agent_id": agent_id, "tool_id": tool_id}


def tools_cleared(agent_id):
    return {"event": TOOLS_CLEARED, "agent_id": agent_id}


def subagent_tool_start(agent_id, parent_tool_id, tool_id, status):
    return {"event": SUBAGENT_TOOL_START, "agent_id": agent_id,
            "parent_tool_id": parent_tool_id, "tool_id": tool_id,
            "status": status}


def subagent_tool_done(agent_id, parent_tool_id, tool_id):
    return {"event": SUBAGENT_TOOL_DONE, "agent_id": agent_id,
            "parent_tool_id": parent_tool_id, "tool_id": tool_id}


def subagent_clear(agent_id, parent_tool_id):
    return {"event": SUBAGENT_CLEAR, "agent_id": agent_id,
            "parent_tool_id": parent_tool_id}


def permission_prompt(agent_id):
    return {"event": PERMISSION_PROMPT, "agent_id": agent_id}


def permission_prompt_cleared(agent_id):
    return {"event": PERMISSION_PROMPT_CLEARED, "agent_id": agent_id}


class EventSink:
    """One-way push channel to whoever renders agent activity."""

    def send(self, event: dict) -> None:
        raise NotImplementedError


class CollectingSink(EventSink):
    """Keeps every event in order. Handy for tests and embedding."""

    def __init__(self):
        self.events = []

    def send(self, event):
        self.events.append(event)

    def of_type(self, name, agent_id=None):
        return [e for e in self.events
                if e["event"] == name
                and (agent_id is None or e["agent_id"] == agent_id)]

    def names(self):
        return [e["event"] for e in self.events]

    def clear(self):
        self.events = []


# Human-readable rendering used by ConsoleSink.
_EVENT_LABELS = {
    AGENT_DISCOVERED: lambda e: f"discovered {e['family']} {e['path']}",
    AGENT_DORMANT: lambda e: "dormant",
    AGENT_STATUS: lambda e: e["status"],
    TOOL_START: lambda e: f"+ {e['status']}",
    TOOL_DONE: lambda e: f"- {e['tool_id']}",
    TOOLS_CLEARED: lambda e: "tools cleared",
    SUBAGENT_TOOL_START: lambda e: f"  + {e['status']}",
    SUBAGENT_TOOL_DONE: lambda e: f"  - {e['tool_id']}",
    SUBAGENT_CLEAR: lambda e: f"  subagent {e['parent_tool_id']} done",
    PERMISSION_PROMPT: lambda e: "HELP! permission needed?",
    PERMISSION_PROMPT_CLEARED: lambda e: "permission resolved",
}


class ConsoleSink(EventSink):
    """Writes one line per event, as text or as JSON lines."""

    def __init__(self, stream=None, as_json=False):
        self.stream = stream if stream is not None else sys.stdout
        self.as_json = as_json

    def send(self, event):
        if self.as_json:
            line = json.dumps(event)
        else:
            label = _EVENT_LABELS.get(event["event"])
            text = label(event) if label else event["event"]
            line = f"[agent {event['agent_id']}] {text}"
        self.stream.write(line + "\n")
        self.stream.flush()
