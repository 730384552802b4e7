"""Agent Pulse -- live status of coding-agent sessions from their transcripts."""

__version__ = "0.1.0"
