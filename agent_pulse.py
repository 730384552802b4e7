#!/usr/bin/env python3
"""Agent Pulse -- watch coding-agent transcripts and report live status."""
import argparse
import logging
import sys

from pulse.config import (
    AGENT_IDLE_TIMEOUT,
    PERMISSION_TIMER_DELAY,
    TEXT_IDLE_DELAY,
    Config,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser():
    parser = argparse.ArgumentParser(
        description="Report what Claude Code and Codex sessions are doing"
    )
    parser.add_argument(
        "--claude-dir", type=str, default=None,
        help="Claude Code projects dir (default: ~/.claude/projects)"
    )
    parser.add_argument(
        "--codex-dir", type=str, default=None,
        help="Codex sessions dir (default: ~/.codex/sessions)"
    )

    # Source selectors
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--claude-only", action="store_true",
        help="Only watch Claude Code sessions"
    )
    source.add_argument(
        "--codex-only", action="store_true",
        help="Only watch Codex sessions"
    )

    parser.add_argument(
        "--json", action="store_true",
        help="Print events as JSON lines"
    )
    parser.add_argument(
        "--no-watch", action="store_true",
        help="Disable file change notifications and rely on polling"
    )
    parser.add_argument(
        "--idle-timeout", type=float, default=AGENT_IDLE_TIMEOUT,
        help="Seconds without writes before a session is dormant"
    )
    parser.add_argument(
        "--idle-delay", type=float, default=TEXT_IDLE_DELAY,
        help="Seconds after a text-only reply before declaring waiting"
    )
    parser.add_argument(
        "--permission-delay", type=float, default=PERMISSION_TIMER_DELAY,
        help="Seconds a tool may run silently before flagging a permission prompt"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Debug logging"
    )
    parser.add_argument(
        "--log-file", type=str, default=None,
        help="Write logs to this file instead of stderr"
    )
    return parser


def config_from_args(args):
    config = Config(
        idle_timeout=args.idle_timeout,
        idle_delay=args.idle_delay,
        permission_delay=args.permission_delay,
        claude_root=args.claude_dir,
        codex_root=args.codex_dir,
        watch_files=not args.no_watch,
    )
    if args.codex_only:
        config.claude_root = ""
    elif args.claude_only:
        config.codex_root = ""
    return config


def setup_logging(args):
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
        filename=args.log_file,
    )


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args)

    from pulse.app import Monitor
    from pulse.events import ConsoleSink

    monitor = Monitor(config_from_args(args), sink=ConsoleSink(as_json=args.json))
    try:
        monitor.run()
    except KeyboardInterrupt:
        pass
    print(monitor.get_status(), file=sys.stderr)


if __name__ == "__main__":
    main()
