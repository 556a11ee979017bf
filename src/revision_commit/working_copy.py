"""Working-copy root discovery and per-project settings."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from revision_commit.config import ConfigError
from revision_commit.vcs import detect_vcs

logger = logging.getLogger(__name__)


SETTINGS_FILENAME = ".revcommit.yml"


@dataclass
class WorkingCopy:
    """A working copy root plus the settings checked in beside it."""
    root: Path
    vcs: Optional[str] = None
    settings: Dict[str, Any] = field(default_factory=dict)

    def get_setting(self, key: str, default: Any = None) -> Any:
        return self.settings.get(key, default)

    @property
    def remote_hooks_installed(self) -> bool:
        """Whether the server marks revisions committed on its own."""
        return bool(self.get_setting("remote_hooks_installed", False))


def load_settings(settings_file: Path) -> Dict[str, Any]:
    """
    Load a settings file (YAML; JSON is accepted as a subset).

    Raises:
        ConfigError: If the file does not parse or is not a mapping
    """
    try:
        data = yaml.safe_load(settings_file.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {settings_file}: {str(e)[:200]}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{settings_file} must contain a mapping, got {type(data).__name__}")
    return data


def find_working_copy(start: Path) -> WorkingCopy:
    """
    Locate the working copy root for `start`.

    The svn root is the outermost directory in an unbroken chain of `.svn`
    directories (pre-1.7 working copies have one per directory). A settings
    file is only honoured at or below that root, and the nearest one marks
    the root. Outside svn the nearest ancestor holding a settings file wins,
    falling back to `start`.
    """
    start = Path(start).resolve()
    chain = (start, *start.parents)

    svn_root = None
    for directory in chain:
        if (directory / ".svn").is_dir():
            svn_root = directory
        elif svn_root is not None:
            break

    if svn_root is not None:
        chain = chain[: chain.index(svn_root) + 1]

    for directory in chain:
        settings_file = directory / SETTINGS_FILENAME
        if settings_file.is_file():
            logger.debug("Using settings from %s", settings_file)
            return WorkingCopy(
                root=directory,
                vcs=detect_vcs(directory),
                settings=load_settings(settings_file),
            )

    root = svn_root or start
    return WorkingCopy(root=root, vcs=detect_vcs(root))
