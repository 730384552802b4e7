import json
import os
import re

from pulse.config import (
    BASH_COMMAND_DISPLAY_MAX_LENGTH,
    TASK_DESCRIPTION_DISPLAY_MAX_LENGTH,
)

# Fixed phrases for tools whose arguments add nothing worth showing.
TOOL_PHRASES = {
    "Glob": "Searching files",
    "Grep": "Searching code",
    "WebFetch": "Fetching web content",
    "WebSearch": "Searching the web",
    "AskUserQuestion": "Waiting for your answer",
    "EnterPlanMode": "Planning",
    "NotebookEdit": "Editing notebook",
    "TodoWrite": "Updating todos",
}

FILE_TOOL_VERBS = {
    "Read": "Reading",
    "Edit": "Editing",
    "Write": "Writing",
}

# Delegated-subtask tool; newer Claude Code releases call it "Agent".
SUBTASK_TOOLS = {"Task", "Agent"}

# Tools that never need user approval
PERMISSION_EXEMPT_TOOLS = SUBTASK_TOOLS | {"AskUserQuestion"}

# Map Codex tool names to the Claude tool kinds above
CODEX_TOOL_KINDS = {
    "shell_command": "Bash",
    "shell": "Bash",
    "local_shell": "Bash",
    "exec_command": "Bash",
    "apply_patch": "Edit",
    "write_file": "Write",
    "read_file": "Read",
    "update_plan": "TodoWrite",
    "web_search": "WebSearch",
    "view_image": "Read",
    "request_user_input": "AskUserQuestion",
}

CODEX_SHELL_TOOLS = {"exec_command", "shell", "shell_command", "local_shell"}

_PATCH_UPDATE = re.compile(r"Update File:\s*(\S+)")
_PATCH_CREATE = re.compile(r"(?:Add|Create) File:\s*(\S+)")


def truncate(text, limit):
    if len(text) > limit:
        return text[:limit] + "…"
    return text


def is_permission_exempt(kind):
    return kind in PERMISSION_EXEMPT_TOOLS


def _basename(value):
    return os.path.basename(value) if isinstance(value, str) else ""


def format_tool_status(tool_name, tool_input,
                       command_max=BASH_COMMAND_DISPLAY_MAX_LENGTH,
                       description_max=TASK_DESCRIPTION_DISPLAY_MAX_LENGTH):
    """Status line for a Claude Code tool_use block."""
    if not isinstance(tool_name, str):
        tool_name = ""
    if not isinstance(tool_input, dict):
        tool_input = {}
    if tool_name in FILE_TOOL_VERBS:
        return f"{FILE_TOOL_VERBS[tool_name]} {_basename(tool_input.get('file_path'))}"
    if tool_name == "Bash":
        command = tool_input.get("command")
        if not isinstance(command, str):
            command = ""
        return f"Running: {truncate(command, command_max)}"
    if tool_name in SUBTASK_TOOLS:
        desc = tool_input.get("description")
        if isinstance(desc, str) and desc:
            return f"Subtask: {truncate(desc, description_max)}"
        return "Running subtask"
    if tool_name in TOOL_PHRASES:
        return TOOL_PHRASES[tool_name]
    return f"Using {tool_name}"


def codex_tool_kind(tool_name):
    if not isinstance(tool_name, str):
        return ""
    return CODEX_TOOL_KINDS.get(tool_name, tool_name)


def _file_argument(arguments):
    try:
        parsed = json.loads(arguments)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed.get("path") or parsed.get("file_path")


def _shell_command(arguments):
    parsed = json.loads(arguments)
    if not isinstance(parsed, dict):
        raise ValueError("arguments are not an object")
    command = parsed.get("cmd") or parsed.get("command") or ""
    if isinstance(command, list):
        # ["bash", "-lc", "ls -la"] -> the script is what matters
        if len(command) >= 3 and command[1] in ("-c", "-lc"):
            command = command[2]
        else:
            command = " ".join(str(part) for part in command)
    return str(command)


def format_codex_tool_status(tool_name, arguments,
                             command_max=BASH_COMMAND_DISPLAY_MAX_LENGTH):
    """Status line for a Codex function_call / custom_tool_call.

    ``arguments`` is the raw string Codex logs: a JSON object for
    function calls, free text (the patch body) for apply_patch.
    """
    if not isinstance(tool_name, str):
        tool_name = ""
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments) if arguments is not None else ""
    if tool_name in CODEX_SHELL_TOOLS:
        try:
            command = _shell_command(arguments)
        except ValueError:
            # json.JSONDecodeError is a ValueError
            return "Running command"
        return f"Running: {truncate(command, command_max)}"
    if tool_name == "apply_patch":
        match = _PATCH_UPDATE.search(arguments)
        if match:
            return f"Editing {os.path.basename(match.group(1))}"
        match = _PATCH_CREATE.search(arguments)
        if match:
            return f"Creating {os.path.basename(match.group(1))}"
        return "Applying patch"
    kind = codex_tool_kind(tool_name)
    if kind in FILE_TOOL_VERBS:
        return f"{FILE_TOOL_VERBS[kind]} {_basename(_file_argument(arguments))}"
    if kind in TOOL_PHRASES:
        return TOOL_PHRASES[kind]
    return f"Using {tool_name}"
