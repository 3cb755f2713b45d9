"""Detect the display session and resolve one backend per role for this run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence
import os
import shutil

from snippy_core.errors import NoMenuTool, NoSessionDetected, NoTypingTool

SESSION_WAYLAND = "wayland"
SESSION_X11 = "x11"

MENU_TOOLS = ("rofi-wayland", "rofi", "wofi", "fzf")
# Selectors that only make sense under a compositor when probing automatically
WAYLAND_ONLY_MENUS = {"rofi-wayland", "wofi"}

WAYLAND_TYPING = ("wtype", "ydotool")
X11_TYPING = ("xdotool",)

# Native tool first, pbcopy (shimmed on many setups) as the portable last resort
WAYLAND_CLIPBOARD = ("wl-copy", "xsel", "xclip", "pbcopy")
X11_CLIPBOARD = ("xsel", "xclip", "pbcopy")


@dataclass(frozen=True)
class BackendSet:
    """Backend chosen for each role. Built once by the detector, never mutated."""

    session: str
    menu: str
    typing: str
    clipboard: Optional[str]
    paste: Optional[str]


class EnvironmentDetector:
    """Read environment signals and the search path; never executes a backend.

    Accepts an optional `env` mapping and `which` lookup for injection in tests.
    """

    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        which: Optional[Callable[[str], Optional[str]]] = None,
    ) -> None:
        self._env = env if env is not None else os.environ
        self._which = which or shutil.which

    def have(self, name: str) -> bool:
        return self._which(name) is not None

    def session_type(self) -> str:
        if self._env.get("WAYLAND_DISPLAY"):
            return SESSION_WAYLAND
        if self._env.get("DISPLAY"):
            return SESSION_X11
        if self.have("fzf"):
            raise NoSessionDetected("No GUI session detected for typing or pasting")
        raise NoSessionDetected("No Wayland or X11 display detected")

    def detect(self, menu_preference: str = "auto") -> BackendSet:
        session = self.session_type()
        if session == SESSION_WAYLAND:
            typing = self._first_available(WAYLAND_TYPING)
            clipboard = self._first_available(WAYLAND_CLIPBOARD)
        else:
            typing = self._first_available(X11_TYPING)
            clipboard = self._first_available(X11_CLIPBOARD)

        if typing is None:
            candidates = WAYLAND_TYPING if session == SESSION_WAYLAND else X11_TYPING
            raise NoTypingTool(f"No typing tool found ({'/'.join(candidates)})")

        menu = self.select_menu_tool(menu_preference, session)
        return BackendSet(
            session=session,
            menu=menu,
            typing=typing,
            clipboard=clipboard,
            # The typing tool doubles as the keystroke source for paste
            paste=typing,
        )

    def select_menu_tool(self, preference: str, session: str) -> str:
        preference = (preference or "auto").strip()
        if preference != "auto":
            if preference not in MENU_TOOLS:
                raise NoMenuTool(f"Unknown menu tool: {preference} (expected {'|'.join(MENU_TOOLS)}|auto)")
            if not self.have(preference):
                raise NoMenuTool(f"Menu tool not found: {preference}")
            return preference

        for name in MENU_TOOLS:
            if name in WAYLAND_ONLY_MENUS and session != SESSION_WAYLAND:
                continue
            if self.have(name):
                return name
        raise NoMenuTool("No menu tool found (rofi-wayland/rofi/wofi/fzf)")

    def _first_available(self, candidates: Sequence[str]) -> Optional[str]:
        for name in candidates:
            if self.have(name):
                return name
        return None
