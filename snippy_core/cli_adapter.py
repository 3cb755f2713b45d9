from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Sequence
import os
import shlex
import subprocess
import sys


def trace_enabled() -> bool:
    return os.environ.get("SNIPPY_TRACE", "0") == "1"


def debug(message: str) -> None:
    if trace_enabled():
        print(f"[DEBUG] {message}", file=sys.stderr, flush=True)


class CommandRunner:
    """Thin adapter around `subprocess` to create an injectable test seam.

    Every backend program (menu, typing, clipboard) is executed through this
    class. Tests pass a fake runner with the same two methods instead.
    """

    def __init__(self, popen: Optional[Callable[..., subprocess.Popen]] = None) -> None:
        # Allow injection of a fake Popen for tests; the real one otherwise
        self._popen = popen or subprocess.Popen

    def run(
        self,
        args: Sequence[str],
        input_data: Optional[bytes] = None,
        stdin_path: Optional[Path] = None,
        capture_output: bool = False,
    ) -> subprocess.CompletedProcess:
        """Run a backend command to completion and return a CompletedProcess.

        `input_data` is fed on stdin; alternatively `stdin_path` names a file
        that becomes the child's stdin. Only stdout is captured, stderr is left
        attached to the terminal so interactive tools (fzf) can draw on it.
        A command that cannot be started yields returncode 127.
        """
        cmd = list(args)
        debug(f"run: {' '.join(shlex.quote(p) for p in cmd)}")
        stdout = subprocess.PIPE if capture_output else None
        try:
            if stdin_path is not None:
                with open(stdin_path, "rb") as handle:
                    return subprocess.run(cmd, stdin=handle, stdout=stdout, check=False)
            return subprocess.run(cmd, input=input_data, stdout=stdout, check=False)
        except OSError as exc:
            return subprocess.CompletedProcess(cmd, 127, stdout=b"", stderr=str(exc).encode())

    def start_background(self, args: Sequence[str], stdin_path: Path) -> subprocess.Popen:
        """Start a command detached from this process without waiting for completion.

        The child gets its own session and discards its output so it can keep
        running after snippy exits. Raises OSError when it cannot be started.
        """
        cmd = list(args)
        debug(f"start_background: {' '.join(shlex.quote(p) for p in cmd)}")
        with open(stdin_path, "rb") as handle:
            return self._popen(
                cmd,
                stdin=handle,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
