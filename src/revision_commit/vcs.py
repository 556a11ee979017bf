"""Subversion status and commit via the `svn` binary."""

import logging
import os
import shlex
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from revision_commit.errors import ExternalToolError, UsageError
from revision_commit.status import WorkingCopyStatus, parse_svn_status

logger = logging.getLogger(__name__)


DEFAULT_ENCODING = "UTF-8"
DEFAULT_LOCALE = "en_US.UTF-8"

# Metadata directory -> VCS name
_VCS_MARKERS = (
    (".svn", "svn"),
    (".git", "git"),
    (".hg", "hg"),
)


@dataclass
class CommitOutcome:
    """Result of one `svn commit` invocation."""
    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stderr.strip(), self.stdout.strip()) if part)


def detect_vcs(root: Path) -> Optional[str]:
    """Return "svn", "git" or "hg" for the nearest VCS metadata at or above root."""
    root = Path(root).resolve()
    for directory in (root, *root.parents):
        for marker, name in _VCS_MARKERS:
            if (directory / marker).exists():
                return name
    return None


def locale_env(locale: str) -> Dict[str, str]:
    """Child-process environment with an explicit locale.

    The parent's environment is copied, never mutated.
    """
    env = dict(os.environ)
    env["LANG"] = locale
    env["LC_ALL"] = locale
    return env


def build_commit_command(
    paths: Sequence[str],
    message_file: str,
    encoding: str = DEFAULT_ENCODING,
    binary: str = "svn",
) -> List[str]:
    """Build the argv for `svn commit` of exactly `paths`."""
    return [binary, "commit", "--encoding", encoding, "-F", message_file, "--", *paths]


class SubversionClient:
    """Thin wrapper over the `svn` command line client."""

    def __init__(self, binary: str = "svn", locale: str = DEFAULT_LOCALE):
        self.binary = binary
        self.locale = locale

    def get_status(self, root: Path) -> WorkingCopyStatus:
        """
        Snapshot the working copy's status.

        Raises:
            ExternalToolError: If `svn status` cannot be run or exits non-zero
        """
        cmd = [self.binary, "status"]
        logger.debug("Running %s in %s", shlex.join(cmd), root)
        try:
            result = subprocess.run(
                cmd,
                cwd=str(root),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=locale_env(self.locale),
            )
        except OSError as e:
            raise ExternalToolError(shlex.join(cmd), -1, str(e))

        if result.returncode != 0:
            raise ExternalToolError(shlex.join(cmd), result.returncode, result.stderr)

        return parse_svn_status(result.stdout)

    def commit(
        self,
        root: Path,
        paths: Sequence[str],
        message: str,
        encoding: str = DEFAULT_ENCODING,
        locale: Optional[str] = None,
    ) -> CommitOutcome:
        """
        Commit exactly `paths` with `message`.

        The message is written to a temporary file in `encoding` and passed
        with `--encoding`, and the child gets an explicit LANG/LC_ALL, so
        multi-byte text reaches the repository unchanged. Output is streamed
        to the terminal. Never raises on a non-zero exit.

        Raises:
            UsageError: If the message cannot be represented in `encoding`
        """
        try:
            data = message.encode(encoding)
        except (UnicodeEncodeError, LookupError) as e:
            raise UsageError(
                f"The commit message cannot be encoded as {encoding}: {e}",
                hint="Fix the revision's summary on the review service and retry.",
            )

        f = tempfile.NamedTemporaryFile(
            mode="wb", suffix=".txt", prefix="revcommit-msg-", delete=False
        )
        message_file = f.name

        cmd = build_commit_command(paths, message_file, encoding=encoding, binary=self.binary)
        display = shlex.join(cmd)

        try:
            with f:
                f.write(data)

            logger.debug("Running %s in %s", display, root)
            result = subprocess.run(
                cmd,
                cwd=str(root),
                env=locale_env(locale or self.locale),
            )
            return CommitOutcome(command=display, exit_code=result.returncode)
        except OSError as e:
            return CommitOutcome(command=display, exit_code=-1, stderr=str(e))
        finally:
            os.unlink(message_file)
