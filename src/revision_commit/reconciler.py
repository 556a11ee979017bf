"""Path-set reconciliation for revision commits.

Compares the paths a revision declares against the live working copy and
decides which of them can be committed. No prompting, no subprocesses:
the only I/O goes through the injected ExistenceOracle.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from revision_commit.errors import ConflictError, EmptyCommitError
from revision_commit.status import StatusFlag, describe_flags, normalize_path

logger = logging.getLogger(__name__)


class ExistenceOracle(Protocol):
    """Read-only filesystem queries relative to the working-copy root."""

    def exists(self, path: str) -> bool:
        ...

    def is_symlink(self, path: str) -> bool:
        ...


class FilesystemOracle:
    """ExistenceOracle backed by the real filesystem.

    `exists` follows symlinks, so a dangling link answers False there and
    True from `is_symlink`. Answers are cached: the working copy is treated
    as a snapshot for the duration of one reconciliation.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._exists: Dict[str, bool] = {}
        self._links: Dict[str, bool] = {}

    def _disk_path(self, path: str) -> Path:
        return self.root / path

    def exists(self, path: str) -> bool:
        if path not in self._exists:
            self._exists[path] = os.path.exists(self._disk_path(path))
        return self._exists[path]

    def is_symlink(self, path: str) -> bool:
        if path not in self._links:
            self._links[path] = os.path.islink(self._disk_path(path))
        return self._links[path]


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of a successful reconciliation."""
    final_paths: Tuple[str, ...]
    unincluded_modifications: Tuple[str, ...] = ()
    missing_paths: Tuple[str, ...] = ()
    # Always empty here: a conflict raises instead of returning
    conflicts: Tuple[Tuple[str, str], ...] = ()


def _is_root(directory: str) -> bool:
    return directory in ("", ".", "/")


def is_descendant(path: str, directory: str) -> bool:
    """
    Check whether `path` lives strictly below `directory`.

    Comparison is by path components, so "dir2/x" is not below "dir" and a
    path is never its own descendant.
    """
    path = normalize_path(path)
    directory = normalize_path(directory)

    if _is_root(directory):
        return not _is_root(path)
    return path.startswith(directory + "/")


def _find_conflict(
    path: str,
    declared: Mapping[str, str],
) -> Optional[str]:
    """Return the declared directory that would sweep in `path`, if any."""
    for normalized in sorted(declared):
        if is_descendant(path, normalized):
            return declared[normalized]
    return None


def reconcile(
    declared: Iterable[str],
    status: Mapping[str, StatusFlag],
    exists: ExistenceOracle,
) -> ReconciliationResult:
    """
    Reconcile a revision's declared path set with working-copy state.

    Steps, in order:
    1. Any locally changed path outside the declared set that lives under a
       declared directory is a structural conflict (fatal, checked first).
    2. Other locally changed paths outside the declared set are reported as
       unincluded modifications.
    3. Declared paths that are neither on disk, a symlink, nor flagged
       DELETED are reported as missing and dropped.
    4. If nothing remains, the commit is empty.

    Args:
        declared: Paths the review service declared for the revision
        status: Working-copy status snapshot
        exists: Filesystem existence oracle bound to the working-copy root

    Returns:
        ReconciliationResult with the surviving paths and advisory lists

    Raises:
        ConflictError: If a declared directory contains an excluded change
        EmptyCommitError: If no declared path survives
    """
    # Normalized form -> declared spelling, first spelling wins
    declared_paths: Dict[str, str] = {}
    for path in declared:
        declared_paths.setdefault(normalize_path(path), path)

    local_status: Dict[str, StatusFlag] = {}
    for path, flags in status.items():
        normalized = normalize_path(path)
        local_status[normalized] = local_status.get(normalized, StatusFlag.NONE) | flags

    unincluded: List[str] = []
    for path in sorted(local_status):
        if path in declared_paths:
            continue
        directory = _find_conflict(path, declared_paths)
        if directory is not None:
            logger.debug(
                "Directory %s would sweep in excluded path %s (%s)",
                directory, path, describe_flags(local_status[path]),
            )
            raise ConflictError(directory=directory, path=path)
        unincluded.append(path)

    final: List[str] = []
    missing: List[str] = []
    for normalized, path in sorted(declared_paths.items()):
        if exists.exists(path) or exists.is_symlink(path):
            final.append(path)
            continue
        if local_status.get(normalized, StatusFlag.NONE) & StatusFlag.DELETED:
            final.append(path)
            continue
        missing.append(path)

    if not final:
        raise EmptyCommitError(missing_paths=tuple(missing))

    logger.debug(
        "Reconciled %d declared paths: %d to commit, %d unincluded, %d missing",
        len(declared_paths), len(final), len(unincluded), len(missing),
    )

    return ReconciliationResult(
        final_paths=tuple(final),
        unincluded_modifications=tuple(unincluded),
        missing_paths=tuple(missing),
    )
