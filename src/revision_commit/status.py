"""Working-copy status model and `svn status` parsing."""

import enum
from typing import Dict, List


class StatusFlag(enum.IntFlag):
    """Change flags for a single working-copy path."""
    NONE = 0
    MODIFIED = 1
    ADDED = 2
    DELETED = 4
    UNTRACKED = 8
    MISSING = 16
    CONFLICT = 32
    REPLACED = 64
    EXTERNALS = 128
    PROPERTIES = 256

    UNVERSIONED = UNTRACKED


# Repository-relative path -> flags. A snapshot taken once per commit attempt.
WorkingCopyStatus = Dict[str, StatusFlag]


# First column of `svn status` (item state)
_ITEM_FLAGS = {
    " ": StatusFlag.NONE,
    "M": StatusFlag.MODIFIED,
    "A": StatusFlag.ADDED,
    "D": StatusFlag.DELETED,
    "?": StatusFlag.UNTRACKED,
    "!": StatusFlag.MISSING,
    "C": StatusFlag.CONFLICT,
    "R": StatusFlag.REPLACED | StatusFlag.ADDED | StatusFlag.DELETED,
    "X": StatusFlag.EXTERNALS,
    "~": StatusFlag.MODIFIED,
    "I": StatusFlag.NONE,
}

# Second column (property state)
_PROPERTY_FLAGS = {
    " ": StatusFlag.NONE,
    "M": StatusFlag.PROPERTIES | StatusFlag.MODIFIED,
    "C": StatusFlag.CONFLICT,
}

# svn >= 1.6 prints seven status columns, a space, then the path
_PATH_COLUMN = 8


def normalize_path(path: str) -> str:
    """Normalize a repository-relative path for comparison.

    Backslashes become forward slashes, a leading "./" and trailing
    slashes are dropped.
    """
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def parse_svn_status(output: str) -> WorkingCopyStatus:
    """
    Parse the text output of `svn status` into a status map.

    Lines that are not per-path entries (external headers, changelist
    headers, tree-conflict details, conflict summaries) are skipped, as are
    paths whose flags collapse to NONE (e.g. only lock columns set).

    Args:
        output: Raw stdout from `svn status`

    Returns:
        Mapping from normalized path to StatusFlag
    """
    status: WorkingCopyStatus = {}

    for line in output.splitlines():
        if len(line) <= _PATH_COLUMN or line[_PATH_COLUMN - 1] != " ":
            continue
        if line[6] == ">":
            continue

        item = _ITEM_FLAGS.get(line[0])
        prop = _PROPERTY_FLAGS.get(line[1])
        if item is None or prop is None:
            continue

        flags = item | prop
        if line[6] == "C":
            # Tree conflict
            flags |= StatusFlag.CONFLICT

        if flags == StatusFlag.NONE:
            continue

        path = normalize_path(line[_PATH_COLUMN:].strip())
        if path:
            status[path] = status.get(path, StatusFlag.NONE) | flags

    return status


def describe_flags(flags: StatusFlag) -> str:
    """Render a flag set as a short comma-separated label."""
    if not flags:
        return "unchanged"

    names: List[str] = []
    for member in StatusFlag:
        if member is StatusFlag.NONE:
            continue
        if flags & member:
            names.append(member.name.lower())
    return ", ".join(names)
