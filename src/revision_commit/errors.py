"""Error taxonomy for the commit workflow.

Every failure is terminal for the current invocation. The CLI maps these
to exit codes; nothing below retries.
"""

from typing import Optional, Tuple


class CommitWorkflowError(Exception):
    """Base class for all commit workflow failures."""
    pass


class UsageError(CommitWorkflowError):
    """Raised when the command cannot be used as requested."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        message = super().__str__()
        if self.hint:
            return f"{message}\n{self.hint}"
        return message


class ConflictError(CommitWorkflowError):
    """Raised when a declared directory contains an excluded local change."""

    def __init__(self, directory: str, path: str):
        self.directory = directory
        self.path = path
        super().__init__(
            f"This commit includes the directory '{directory}', but it contains "
            f"a modified path ('{path}') which is NOT included in the commit. "
            f"Subversion can not handle this operation and will commit the path "
            f"anyway. You need to sort out the working copy changes to '{path}' "
            f"before you may proceed with the commit."
        )


class AbortError(CommitWorkflowError):
    """Raised when the operator declines to proceed past a warning."""
    pass


class EmptyCommitError(CommitWorkflowError):
    """Raised when reconciliation leaves nothing to commit."""

    def __init__(self, missing_paths: Tuple[str, ...] = ()):
        self.missing_paths = tuple(missing_paths)
        message = "There is nothing left to commit. None of the declared paths exist"
        if self.missing_paths:
            message = f"{message}: {', '.join(self.missing_paths)}"
        super().__init__(f"{message}.")


class TransportError(CommitWorkflowError):
    """Raised when a review service call fails."""
    pass


class ExternalToolError(CommitWorkflowError):
    """Raised when an external VCS command exits non-zero."""

    def __init__(self, command: str, exit_code: int, output: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.output = output
        message = f"Executing '{command}' failed (exit code {exit_code})."
        if output.strip():
            message = f"{message}\n{output.strip()}"
        super().__init__(message)
