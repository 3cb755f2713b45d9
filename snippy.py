"""Select a snippet file from a menu, then type it, copy it, or paste it."""

from __future__ import annotations

import argparse
import os
import shutil
import subprocess
import sys
from typing import Any, List, Optional

from snippy_core.action_executor import ActionExecutor
from snippy_core.cli_adapter import CommandRunner, debug
from snippy_core.config_manager import ConfigManager, Settings
from snippy_core.content_normalizer import normalize, staged_payload
from snippy_core.environment import EnvironmentDetector
from snippy_core.errors import SnippyError
from snippy_core.menu_adapter import ACTION_CLIP, ACTION_PASTE, ACTION_TYPE, select
from snippy_core.snippet_store import SnippetStore

EPILOG = """\
Selection keys (rofi and fzf):
  Enter         Perform default action.
  Ctrl+Y        Force clipboard copy.
  Ctrl+T        Force typing.
  Ctrl+P        Force paste.

Environment:
  SNIPPY_DIR            Snippet directory.
  SNIPPY_PROMPT_SYMBOL  Menu prompt text.
  SNIPPY_MENU           Menu tool (same values as --menu).
  SNIPPY_PASTE_KEY      Key combination sent for paste (default: ctrl+v).
  SNIPPY_TRACE=1        Print debug output to stderr.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snippy",
        description="Select a snippet file, strip YAML front matter, trim outer blank lines, then perform an action.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    actions = parser.add_mutually_exclusive_group()
    actions.add_argument("--type", dest="action", action="store_const", const=ACTION_TYPE,
                         help="Type into focused window (default).")
    actions.add_argument("--clip", "--clipboard", "--yank", dest="action", action="store_const", const=ACTION_CLIP,
                         help="Yank to clipboard.")
    actions.add_argument("--paste", dest="action", action="store_const", const=ACTION_PASTE,
                         help="Copy to clipboard then paste keystroke (fallback: type).")
    parser.add_argument("--dir", metavar="DIR", help="Override snippet directory (default: $XDG_CONFIG_HOME/snippets).")
    parser.add_argument("--prompt", metavar="STR", help='Override menu prompt text (default: "❯ ").')
    parser.add_argument("--text-only", action="store_true", default=None,
                        help="Include only *.txt and *.md files (default: include all files).")
    parser.add_argument("--no-follow", action="store_true", default=None,
                        help="Disable symlink following in file discovery (default: follow).")
    parser.add_argument("--alpha", action="store_true", default=None,
                        help="Sort alphabetically (default: most recently modified first).")
    parser.add_argument("--menu", metavar="TOOL",
                        help="Force menu tool: rofi|rofi-wayland|wofi|fzf|auto (default: auto).")
    return parser


def run(settings: Settings, detector: Optional[EnvironmentDetector] = None, runner: Optional[Any] = None) -> int:
    """Perform one snippet action. Returns the exit code; fatal conditions raise SnippyError."""
    detector = detector or EnvironmentDetector()
    runner = runner or CommandRunner()

    backends = detector.detect(settings.menu)
    debug(f"backends: {backends}")

    store = SnippetStore(
        settings.snippet_dir,
        follow_symlinks=settings.follow_symlinks,
        include_all=not settings.text_only,
        sort_recent=settings.sort_recent,
    )
    entries = store.list_snippets()
    debug(f"{len(entries)} snippets under {store.root}")

    selection = select(backends.menu, entries, settings.prompt, settings.action, runner=runner)
    if selection.cancelled:
        debug("selection cancelled")
        return 0

    payload = normalize(store.read(selection.entry))
    executor = ActionExecutor(backends, runner=runner, paste_key=settings.paste_key)
    with staged_payload(payload) as payload_path:
        executor.execute(selection.action, payload_path)
    return 0


def notify_error(message: str) -> None:
    """Mirror a fatal error as a desktop notification when launched without a terminal."""
    if sys.stdin is not None and sys.stdin.isatty():
        return
    if not os.environ.get("DBUS_SESSION_BUS_ADDRESS") or shutil.which("notify-send") is None:
        return
    try:
        subprocess.run(["notify-send", "--urgency=critical", "snippy", message], check=False)
    except OSError as exc:
        debug(f"notify-send failed: {exc}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    overrides = {
        "action": args.action,
        "dir": args.dir,
        "prompt": args.prompt,
        "menu": args.menu,
        "text_only": args.text_only,
        "no_follow": args.no_follow,
        "alpha": args.alpha,
    }
    try:
        settings = ConfigManager().resolve(overrides)
        debug(f"settings: {settings}")
        return run(settings)
    except SnippyError as exc:
        print(f"Error: {exc}", file=sys.stderr, flush=True)
        notify_error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
