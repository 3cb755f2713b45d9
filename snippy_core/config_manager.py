from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import os
import sys

import yaml

from snippy_core.action_executor import DEFAULT_PASTE_KEY
from snippy_core.menu_adapter import ACTION_TYPE, ACTIONS

DEFAULT_PROMPT = "❯ "
DEFAULT_MENU = "auto"
SORT_MODES = ("recent", "alpha")


@dataclass(frozen=True)
class Settings:
    snippet_dir: Path
    prompt: str
    menu: str
    action: str
    text_only: bool
    follow_symlinks: bool
    sort_recent: bool
    paste_key: str


class ConfigManager:
    """Resolve run settings from CLI overrides, environment, `config.yml` and defaults.

    The config file is optional and read-only. Tests may pass `base_dir` and
    `env` to isolate themselves from the real user profile.
    """

    def __init__(self, base_dir: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> None:
        self._env = env if env is not None else os.environ
        self._base = Path(base_dir) if base_dir is not None else self.config_home() / "snippy"
        self._config_path = self._base / "config.yml"
        self._preferences: Dict[str, Any] = self._load_preferences()

    def config_home(self) -> Path:
        xdg = self._env.get("XDG_CONFIG_HOME")
        return Path(xdg) if xdg else Path.home() / ".config"

    def _load_preferences(self) -> Dict[str, Any]:
        if not self._config_path.exists():
            return {}
        try:
            data = yaml.safe_load(self._config_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            print(f"[WARNING] Ignoring unreadable config {self._config_path}: {exc}", file=sys.stderr, flush=True)
            return {}
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"[WARNING] Ignoring config {self._config_path}: expected a mapping", file=sys.stderr, flush=True)
            return {}
        return data

    def _env_value(self, name: str) -> Optional[str]:
        # Set-but-empty counts as unset, like ${VAR:-default} in a shell
        return self._env.get(name) or None

    def default_snippet_dir(self) -> Path:
        return self.config_home() / "snippets"

    def resolve(self, overrides: Optional[Mapping[str, Any]] = None) -> Settings:
        """Apply precedence: CLI flag > environment variable > config file > default."""
        overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
        prefs = self._preferences

        snippet_dir = (
            overrides.get("dir")
            or self._env_value("SNIPPY_DIR")
            or prefs.get("dir")
            or self.default_snippet_dir()
        )
        prompt = self._first_str(overrides.get("prompt"), self._env_value("SNIPPY_PROMPT_SYMBOL"), prefs.get("prompt"), DEFAULT_PROMPT)
        menu = self._first_str(overrides.get("menu"), self._env_value("SNIPPY_MENU"), prefs.get("menu"), DEFAULT_MENU)
        paste_key = self._first_str(self._env_value("SNIPPY_PASTE_KEY"), prefs.get("paste_key"), DEFAULT_PASTE_KEY)

        action = overrides.get("action") or self._config_action()

        sort_pref = prefs.get("sort", "recent")
        if sort_pref not in SORT_MODES:
            print(f"[WARNING] Ignoring unknown sort mode in config: {sort_pref}", file=sys.stderr, flush=True)
            sort_pref = "recent"

        return Settings(
            snippet_dir=Path(str(snippet_dir)).expanduser(),
            prompt=prompt,
            menu=menu,
            action=action,
            text_only=bool(overrides.get("text_only")) or self._bool_pref("text_only", False),
            follow_symlinks=not overrides.get("no_follow") and self._bool_pref("follow_symlinks", True),
            sort_recent=not overrides.get("alpha") and sort_pref == "recent",
            paste_key=paste_key,
        )

    def _bool_pref(self, key: str, default: bool) -> bool:
        value = self._preferences.get(key, default)
        if not isinstance(value, bool):
            print(f"[WARNING] Ignoring non-boolean {key} in config: {value!r}", file=sys.stderr, flush=True)
            return default
        return value

    def _config_action(self) -> str:
        action = self._preferences.get("action")
        if action is None:
            return ACTION_TYPE
        if action not in ACTIONS:
            print(f"[WARNING] Ignoring unknown action in config: {action}", file=sys.stderr, flush=True)
            return ACTION_TYPE
        return action

    @staticmethod
    def _first_str(*values: Any) -> str:
        # An empty prompt is meaningful, so only None falls through
        for value in values:
            if value is not None:
                return str(value)
        return ""
