"""Fatal error kinds raised while preparing or running a snippet action."""

from __future__ import annotations


class SnippyError(RuntimeError):
    """Base class for every condition that terminates a run with exit code 1."""


class SessionDetectionFailure(SnippyError):
    pass


class NoSessionDetected(SessionDetectionFailure):
    pass


class DependencyMissing(SnippyError):
    pass


class NoMenuTool(DependencyMissing):
    pass


class NoTypingTool(DependencyMissing):
    pass


class DirectoryInvalid(SnippyError):
    pass


class NoEntriesFound(SnippyError):
    def __init__(self, message: str, filtered: bool = False) -> None:
        super().__init__(message)
        # True when files exist but the extension filter removed all of them
        self.filtered = filtered


class SelectionInvalid(SnippyError):
    pass


class BackendExecutionFailure(SnippyError):
    pass


class ClipboardUnavailable(BackendExecutionFailure):
    pass


class TypingFailed(BackendExecutionFailure):
    pass


class PasteFailed(BackendExecutionFailure):
    pass


class UnknownAction(SnippyError):
    pass
