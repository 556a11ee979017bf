"""Commit an accepted revision: choose it, reconcile its paths, run svn.

Main entry point is `run_commit`. Collaborators (review service, svn,
decision policy) are passed in so the whole flow runs without a terminal.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

from revision_commit.decision import DecisionPolicy, WarningCategory, apply_policy, check
from revision_commit.errors import AbortError, ExternalToolError, UsageError
from revision_commit.reconciler import ExistenceOracle, FilesystemOracle, reconcile
from revision_commit.review_client import ReviewServiceClient, RevisionRef, parse_revision_id
from revision_commit.vcs import DEFAULT_ENCODING, CommitOutcome, SubversionClient
from revision_commit.working_copy import WorkingCopy

logger = logging.getLogger(__name__)


NOT_COMMITTABLE_HINT = "You can only commit revisions you own which have been 'accepted'."

Chooser = Callable[[Sequence[RevisionRef]], Optional[RevisionRef]]


@dataclass
class CommitReport:
    """What a commit attempt did."""
    revision: RevisionRef
    final_paths: Tuple[str, ...] = ()
    outcome: Optional[CommitOutcome] = None
    marked_committed: bool = False
    shown_only: bool = False
    message: str = field(default="", repr=False)


def choose_revision(
    revisions: Sequence[RevisionRef],
    revision_id: Optional[str] = None,
    chooser: Optional[Chooser] = None,
) -> RevisionRef:
    """
    Pick the revision to commit from the committable set.

    Args:
        revisions: Committable revisions from the review service
        revision_id: Explicit ID ("123" or "D123"), if the caller gave one
        chooser: Interactive picker used when no ID was given

    Returns:
        The chosen RevisionRef

    Raises:
        UsageError: Unknown/uncommittable ID, no committable revisions, or
                    several candidates with no way to choose
        AbortError: If the chooser declines to pick one
    """
    if revision_id is not None:
        try:
            wanted = parse_revision_id(revision_id)
        except ValueError as e:
            raise UsageError(str(e))
        for revision in revisions:
            if revision.id == wanted:
                return revision
        raise UsageError(f"Revision D{wanted} is not committable.", hint=NOT_COMMITTABLE_HINT)

    if not revisions:
        raise UsageError("You have no committable revisions.", hint=NOT_COMMITTABLE_HINT)

    if chooser is not None:
        chosen = chooser(revisions)
        if chosen is None:
            raise AbortError("No revision chosen.")
        return chosen

    if len(revisions) == 1:
        return revisions[0]

    labels = ", ".join(r.label for r in revisions)
    raise UsageError(
        f"You have several committable revisions ({labels}).",
        hint="Specify one with --revision.",
    )


def _same_path(left: str, right: str) -> bool:
    return os.path.normcase(os.path.normpath(left)) == os.path.normcase(os.path.normpath(right))


def run_commit(
    client: ReviewServiceClient,
    vcs: SubversionClient,
    working_copy: WorkingCopy,
    policy: DecisionPolicy,
    owner_id: str,
    revision_id: Optional[str] = None,
    chooser: Optional[Chooser] = None,
    show: bool = False,
    encoding: str = DEFAULT_ENCODING,
    echo: Callable[[str], None] = print,
    oracle_factory: Callable[[Path], ExistenceOracle] = FilesystemOracle,
) -> CommitReport:
    """
    Commit an accepted revision's declared paths.

    Flow:
    1. Resolve the revision (by ID or via `chooser`)
    2. Fetch its commit message; with `show`, print it and stop
    3. Confirm a mismatched source path through the policy
    4. Reconcile declared paths with `svn status` and the filesystem
    5. Run the policy over advisory warnings
    6. `svn commit` the final paths
    7. Mark the revision committed if no server hooks will do it

    Nothing is mutated before step 6 and nothing is rolled back after it.

    Raises:
        UsageError, ConflictError, EmptyCommitError, AbortError,
        TransportError, ExternalToolError
    """
    revisions = client.find_committable_revisions(owner_id)
    revision = choose_revision(revisions, revision_id, chooser)

    message = client.get_commit_message(revision.id)

    if show:
        echo(message)
        return CommitReport(revision=revision, shown_only=True, message=message)

    echo(f"Committing {revision.label} '{revision.name}'...")

    if working_copy.vcs != "svn":
        raise UsageError(
            "revcommit commit is only supported under Subversion.",
            hint="Amend and push the change with your VCS's own tooling instead.",
        )

    root = working_copy.root
    if revision.source_path and not _same_path(revision.source_path, str(root)):
        check(policy, WarningCategory.SOURCE_MISMATCH, (revision.source_path, str(root)))

    declared = client.get_commit_paths(revision.id)
    status = vcs.get_status(root)
    logger.info(
        "%s declares %d paths; working copy has %d changed paths",
        revision.label, len(declared), len(status),
    )

    result = reconcile(declared, status, oracle_factory(root))
    apply_policy(result, policy)

    outcome = vcs.commit(root, result.final_paths, message, encoding=encoding)
    if not outcome.succeeded:
        raise ExternalToolError(outcome.command, outcome.exit_code, outcome.output)

    report = CommitReport(
        revision=revision,
        final_paths=result.final_paths,
        outcome=outcome,
        message=message,
    )

    if not working_copy.remote_hooks_installed:
        echo(
            "Remote commit hooks are not installed for this project, so the "
            "revision will be marked committed now."
        )
        client.mark_committed(revision.id)
        report.marked_committed = True

    return report
