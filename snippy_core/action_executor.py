from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import sys

from snippy_core.cli_adapter import CommandRunner
from snippy_core.environment import BackendSet
from snippy_core.errors import ClipboardUnavailable, PasteFailed, TypingFailed, UnknownAction
from snippy_core.menu_adapter import ACTION_CLIP, ACTION_PASTE, ACTION_TYPE

DEFAULT_PASTE_KEY = "ctrl+v"

CLIPBOARD_ARGS: Dict[str, Tuple[str, ...]] = {
    "wl-copy": (),
    "pbcopy": (),
    "xsel": ("--clipboard", "--input"),
    "xclip": ("-selection", "clipboard", "-in"),
}
# X selection owners must stay alive after snippy exits to keep serving the content
DETACHED_CLIPBOARD = {"xsel", "xclip"}

# xdotool leaves modifiers pressed when the hotkey is still held while typing
STUCK_MODIFIERS = (
    "Meta_L", "Meta_R", "Alt_L", "Alt_R", "Super_L", "Super_R",
    "Control_L", "Control_R", "Shift_L", "Shift_R",
)


class ActionExecutor:
    """Perform type / clip / paste with the backends resolved for this run.

    Accepts an optional `runner` for injection in tests. The payload is always
    handed over as a file path so backends read it from stdin.
    """

    def __init__(self, backends: BackendSet, runner: Optional[Any] = None, paste_key: str = DEFAULT_PASTE_KEY) -> None:
        self.backends = backends
        self.runner = runner or CommandRunner()
        self.paste_key = paste_key or DEFAULT_PASTE_KEY

    def execute(self, action: str, payload: Path) -> None:
        if action == ACTION_CLIP:
            if not self.copy_to_clipboard(payload):
                raise ClipboardUnavailable("Clipboard tool not available (wl-copy/xsel/xclip/pbcopy)")
        elif action == ACTION_PASTE:
            if self.copy_to_clipboard(payload):
                self.send_paste_keystroke()
            else:
                print("[WARNING] Clipboard copy failed; typing the snippet instead", file=sys.stderr, flush=True)
                self.type_text(payload)
        elif action == ACTION_TYPE:
            self.type_text(payload)
        else:
            raise UnknownAction(f"Unknown action: {action}")

    # -------------------------
    # Clipboard
    # -------------------------
    def copy_to_clipboard(self, payload: Path) -> bool:
        tool = self.backends.clipboard
        if tool not in CLIPBOARD_ARGS:
            return False
        cmd = [tool, *CLIPBOARD_ARGS[tool]]
        if tool in DETACHED_CLIPBOARD:
            try:
                self.runner.start_background(cmd, stdin_path=payload)
            except OSError:
                return False
            return True
        return self.runner.run(cmd, stdin_path=payload).returncode == 0

    def send_paste_keystroke(self) -> None:
        tool = self.backends.paste
        if tool == "xdotool":
            cmd = ["xdotool", "key", "--clearmodifiers", self.paste_key]
        elif tool == "wtype":
            self._require_default_paste_key(tool)
            cmd = ["wtype", "-M", "ctrl", "-k", "v", "-m", "ctrl"]
        elif tool == "ydotool":
            self._require_default_paste_key(tool)
            # evdev codes: 29 = KEY_LEFTCTRL, 47 = KEY_V
            cmd = ["ydotool", "key", "29:1", "47:1", "47:0", "29:0"]
        else:
            raise PasteFailed("No paste keystroke tool available")
        if self.runner.run(cmd).returncode != 0:
            raise PasteFailed("Paste keystroke failed")

    def _require_default_paste_key(self, tool: str) -> None:
        if self.paste_key != DEFAULT_PASTE_KEY:
            raise PasteFailed(f"{tool} paste supports only SNIPPY_PASTE_KEY={DEFAULT_PASTE_KEY}")

    # -------------------------
    # Typing
    # -------------------------
    def type_text(self, payload: Path) -> None:
        tool = self.backends.typing
        if tool == "xdotool":
            self._type_xdotool(payload)
        elif tool == "wtype":
            self._type_stdin(["wtype", "-"], payload)
        elif tool == "ydotool":
            self._type_stdin(["ydotool", "type", "--file", "-"], payload)
        elif not tool:
            raise TypingFailed("No typing tool available")
        else:
            raise TypingFailed(f"Unknown typing tool: {tool}")

    def _type_stdin(self, cmd: List[str], payload: Path) -> None:
        if self.runner.run(cmd, stdin_path=payload).returncode != 0:
            raise TypingFailed(f"{cmd[0]} typing failed")

    def _type_xdotool(self, payload: Path) -> None:
        """Type line by line with explicit Return presses between lines.

        xdotool's own newline handling is unreliable across applications.
        """
        text = payload.read_bytes().decode("utf-8", errors="replace")
        if text.endswith("\n"):
            text = text[:-1]
        lines = text.split("\n")

        commands = [["xdotool", "sleep", "0.1", "type", "--clearmodifiers", "--delay", "10", "--", lines[0]]]
        for line in lines[1:]:
            commands.append(["xdotool", "key", "Return"])
            commands.append(["xdotool", "type", "--clearmodifiers", "--delay", "1", "--", line])

        for cmd in commands:
            if self.runner.run(cmd).returncode != 0:
                raise TypingFailed("xdotool typing failed")

        self.runner.run(["xdotool", "sleep", "0.4", "keyup", *STUCK_MODIFIERS])
