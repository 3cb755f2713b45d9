"""Present snippet entries through one of the supported selector programs.

Each selector reports "use another action" differently: rofi through
dedicated exit codes for its custom key bindings, fzf through a leading line
naming the `--expect`ed key, and wofi not at all. `select` folds all of them
into one `Selection(action, entry)` so the executor never needs to know which
selector ran.
"""

from __future__ import annotations

from typing import Any, List, NamedTuple, Optional, Sequence

from snippy_core.cli_adapter import CommandRunner, debug
from snippy_core.errors import NoMenuTool

ACTION_TYPE = "type"
ACTION_CLIP = "clip"
ACTION_PASTE = "paste"
ACTIONS = (ACTION_TYPE, ACTION_CLIP, ACTION_PASTE)

ROFI_TOOLS = ("rofi", "rofi-wayland")

# rofi exit status for -kb-custom-N is 9 + N
ROFI_EXIT_ACTIONS = {10: ACTION_CLIP, 11: ACTION_TYPE, 12: ACTION_PASTE}
FZF_KEY_ACTIONS = {"ctrl-y": ACTION_CLIP, "ctrl-t": ACTION_TYPE, "ctrl-p": ACTION_PASTE}


class Selection(NamedTuple):
    action: Optional[str]
    entry: Optional[str]

    @property
    def cancelled(self) -> bool:
        return self.action is None or self.entry is None


CANCELLED = Selection(None, None)


def select(
    backend: str,
    entries: Sequence[str],
    prompt: str,
    default_action: str,
    runner: Optional[Any] = None,
) -> Selection:
    """Show `entries` in their given order and return the user's decision."""
    runner = runner or CommandRunner()
    menu_input = "".join(f"{entry}\n" for entry in entries).encode("utf-8")

    if backend in ROFI_TOOLS:
        selection = _select_rofi(backend, menu_input, prompt, default_action, runner)
    elif backend == "wofi":
        selection = _select_wofi(menu_input, prompt, default_action, runner)
    elif backend == "fzf":
        selection = _select_fzf(menu_input, prompt, default_action, runner)
    else:
        raise NoMenuTool(f"Unknown menu tool: {backend}")

    debug(f"menu {backend} returned action={selection.action!r} entry={selection.entry!r}")
    return selection


def _output_lines(stdout: Optional[bytes]) -> List[str]:
    return (stdout or b"").decode("utf-8", errors="replace").splitlines()


def _selection(action: Optional[str], entry: Optional[str]) -> Selection:
    if not action or not entry:
        return CANCELLED
    return Selection(action, entry)


def _select_rofi(tool: str, menu_input: bytes, prompt: str, default_action: str, runner: Any) -> Selection:
    args = [
        tool, "-dmenu", "-i", "-sort", "-matching", "fuzzy", "-p", prompt,
        "-kb-custom-1", "Control+y",
        "-kb-custom-2", "Control+t",
        "-kb-custom-3", "Control+p",
    ]
    result = runner.run(args, input_data=menu_input, capture_output=True)
    if result.returncode == 0:
        action = default_action
    else:
        action = ROFI_EXIT_ACTIONS.get(result.returncode)
    lines = _output_lines(result.stdout)
    return _selection(action, lines[0] if lines else None)


def _select_wofi(menu_input: bytes, prompt: str, default_action: str, runner: Any) -> Selection:
    args = ["wofi", "--dmenu", "--insensitive", "--matching", "fuzzy", "-p", prompt]
    result = runner.run(args, input_data=menu_input, capture_output=True)
    if result.returncode != 0:
        return CANCELLED
    lines = _output_lines(result.stdout)
    return _selection(default_action, lines[0] if lines else None)


def _select_fzf(menu_input: bytes, prompt: str, default_action: str, runner: Any) -> Selection:
    args = [
        "fzf", f"--prompt={prompt}", "--layout=reverse", "--height=40%",
        "--expect=ctrl-y,ctrl-t,ctrl-p",
    ]
    result = runner.run(args, input_data=menu_input, capture_output=True)
    if result.returncode != 0:
        return CANCELLED
    lines = _output_lines(result.stdout)
    key = lines[0] if lines else ""
    entry = lines[1] if len(lines) > 1 else None
    return _selection(FZF_KEY_ACTIONS.get(key, default_action), entry)
