from __future__ import annotations

from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple
import os
import sys

from snippy_core.errors import DirectoryInvalid, NoEntriesFound, SelectionInvalid

EXCLUDED_DIRS = {".git"}
EXCLUDED_NAMES = {".gitignore"}
TEXT_SUFFIXES = {".txt", ".md"}


class SnippetStore:
    """Read-only snippet storage: one file under `root` is one snippet.

    Entries are root-relative POSIX paths. Nothing is cached between calls and
    no file is ever written.
    """

    def __init__(
        self,
        root: Path,
        follow_symlinks: bool = True,
        include_all: bool = True,
        sort_recent: bool = True,
    ) -> None:
        self.root = self._canonical_root(root)
        self.follow_symlinks = follow_symlinks
        self.include_all = include_all
        self.sort_recent = sort_recent

    @staticmethod
    def _canonical_root(root: Path) -> Path:
        path = Path(root).expanduser()
        if not path.is_dir():
            raise DirectoryInvalid(f"Snippet directory not found: {root}")
        return path.resolve()

    def list_snippets(self) -> List[str]:
        files = self._scan()
        if not files:
            raise NoEntriesFound(f"No snippet files found under: {self.root}")

        entries = [(rel, path) for rel, path in files if self.include_all or self._is_text(rel)]
        if not entries:
            raise NoEntriesFound(f"No matching snippet files found under: {self.root}", filtered=True)

        if self.sort_recent:
            by_mtime = self._sort_by_mtime(entries)
            if by_mtime is not None:
                return by_mtime
        return sorted(rel for rel, _ in entries)

    def _scan(self) -> List[Tuple[str, Path]]:
        found: List[Tuple[str, Path]] = []
        self._walk(self.root, "", frozenset({str(self.root)}), found)
        return found

    def _walk(self, directory: Path, prefix: str, ancestors: FrozenSet[str], found: List[Tuple[str, Path]]) -> None:
        """Collect files below `directory`.

        `ancestors` holds the real paths of the directories on the current
        chain; a symlinked directory pointing back into that chain is a cycle
        and is skipped. Aliases of directories elsewhere are listed under both
        names.
        """
        try:
            with os.scandir(directory) as it:
                children = sorted(it, key=lambda child: child.name)
        except OSError as exc:
            print(f"[WARNING] Skipping unreadable directory {directory}: {exc}", file=sys.stderr, flush=True)
            return

        for child in children:
            if child.is_symlink() and not self.follow_symlinks:
                continue
            rel = prefix + child.name
            if child.is_dir():
                if child.name in EXCLUDED_DIRS:
                    continue
                real = os.path.realpath(child.path)
                if real in ancestors:
                    continue
                self._walk(Path(child.path), rel + "/", ancestors | {real}, found)
            elif child.is_file():
                if child.name in EXCLUDED_NAMES:
                    continue
                found.append((rel, Path(child.path)))

    @staticmethod
    def _is_text(rel: str) -> bool:
        return Path(rel).suffix in TEXT_SUFFIXES

    @staticmethod
    def _sort_by_mtime(entries: List[Tuple[str, Path]]) -> Optional[List[str]]:
        keyed = []
        for rel, path in entries:
            try:
                mtime = path.stat().st_mtime_ns
            except OSError:
                return None
            keyed.append((-mtime, rel))
        keyed.sort()
        return [rel for _, rel in keyed]

    def resolve(self, entry: str) -> Path:
        """Map a menu selection back to a file, refusing paths outside the root.

        The guard only applies when symlink following is disabled; it runs
        before anything is read. Absolute selections are never accepted.
        """
        if os.path.isabs(entry):
            raise SelectionInvalid(f"Refuse absolute selection path: {entry}")
        candidate = self.root / entry
        if not self.follow_symlinks:
            real = Path(os.path.realpath(candidate))
            if real != self.root and self.root not in real.parents:
                raise SelectionInvalid(f"Refuse path traversal outside {self.root}: {entry}")
            candidate = real
        if not candidate.is_file():
            raise SelectionInvalid(f"Selected file not found: {candidate}")
        return candidate

    def read(self, entry: str) -> bytes:
        return self.resolve(entry).read_bytes()
