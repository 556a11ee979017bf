"""Decision policy for advisory warnings.

The reconciler reports discrepancies; a policy decides whether each one is
acceptable. Policies never look at working-copy state themselves.
"""

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

from revision_commit.errors import AbortError
from revision_commit.reconciler import ReconciliationResult

logger = logging.getLogger(__name__)


class WarningCategory(enum.Enum):
    SOURCE_MISMATCH = "source_mismatch"
    UNINCLUDED_MODIFICATIONS = "unincluded_modifications"
    MISSING_PATHS = "missing_paths"


class Decision(enum.Enum):
    PROCEED = "proceed"
    ABORT = "abort"


@dataclass(frozen=True)
class WarningText:
    """Rendered text for one advisory category."""
    category: WarningCategory
    prefix: str
    prompt: str
    paths: Tuple[str, ...]


# category -> (singular, plural) as (prefix, prompt) pairs
_MESSAGES = {
    WarningCategory.UNINCLUDED_MODIFICATIONS: (
        (
            "A locally modified path is not included in this revision:",
            "It will NOT be committed. Commit this revision anyway?",
        ),
        (
            "Locally modified paths are not included in this revision:",
            "They will NOT be committed. Commit this revision anyway?",
        ),
    ),
    WarningCategory.MISSING_PATHS: (
        (
            "Revision includes changes to a path that does not exist:",
            "Commit this revision anyway?",
        ),
        (
            "Revision includes changes to paths that do not exist:",
            "Commit this revision anyway?",
        ),
    ),
}


def render_warning(category: WarningCategory, paths: Sequence[str]) -> WarningText:
    """
    Build the prefix/prompt text for a warning category.

    Singular and plural forms differ only in grammar. SOURCE_MISMATCH takes
    exactly two "paths": the revision's source path and the local root.
    """
    if category is WarningCategory.SOURCE_MISMATCH:
        source, root = paths
        return WarningText(
            category=category,
            prefix=f"Revision was generated from '{source}', but the current working copy root is '{root}'.",
            prompt="Commit anyway?",
            paths=(),
        )

    singular, plural = _MESSAGES[category]
    prefix, prompt = singular if len(paths) == 1 else plural
    return WarningText(category=category, prefix=prefix, prompt=prompt, paths=tuple(paths))


class DecisionPolicy(ABC):
    """Maps an advisory warning to PROCEED or ABORT."""

    @abstractmethod
    def decide(self, category: WarningCategory, paths: Sequence[str]) -> Decision:
        """
        Decide whether to continue past a warning.

        Args:
            category: Which kind of discrepancy was found
            paths: Paths involved (non-empty)

        Returns:
            Decision.PROCEED or Decision.ABORT
        """
        pass


class ConfirmPolicy(DecisionPolicy):
    """Asks a yes/no confirmation callback for every warning.

    The prompt text is passed to `confirm` unchanged; the prefix and path
    list are shown through `echo` first.
    """

    def __init__(
        self,
        confirm: Callable[[str], bool],
        echo: Callable[[str], None] = print,
    ):
        self.confirm = confirm
        self.echo = echo

    def decide(self, category: WarningCategory, paths: Sequence[str]) -> Decision:
        warning = render_warning(category, paths)

        self.echo(warning.prefix)
        if warning.paths:
            self.echo("")
            for path in warning.paths:
                self.echo(f"    {path}")
            self.echo("")

        if self.confirm(warning.prompt):
            logger.info("Operator accepted %s warning", category.value)
            return Decision.PROCEED
        logger.info("Operator declined %s warning", category.value)
        return Decision.ABORT


class AutoProceedPolicy(DecisionPolicy):
    """Proceeds past every warning without asking (--yes)."""

    def decide(self, category: WarningCategory, paths: Sequence[str]) -> Decision:
        warning = render_warning(category, paths)
        logger.warning("%s %s (proceeding)", warning.prefix, ", ".join(warning.paths))
        return Decision.PROCEED


def check(policy: DecisionPolicy, category: WarningCategory, paths: Sequence[str]) -> None:
    """Ask the policy about one category; raise AbortError on ABORT."""
    if policy.decide(category, paths) is Decision.ABORT:
        raise AbortError(f"Commit aborted ({category.value}).")


def apply_policy(result: ReconciliationResult, policy: DecisionPolicy) -> None:
    """
    Run the policy over a reconciliation result's advisory lists.

    Unincluded modifications are always decided before missing paths; empty
    categories are skipped.

    Raises:
        AbortError: If the policy aborts on either category
    """
    if result.unincluded_modifications:
        check(policy, WarningCategory.UNINCLUDED_MODIFICATIONS, result.unincluded_modifications)
    if result.missing_paths:
        check(policy, WarningCategory.MISSING_PATHS, result.missing_paths)
