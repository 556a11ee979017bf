"""CLI entrypoint for revcommit."""

import logging
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv

from revision_commit.config import ConfigError, load_config
from revision_commit.errors import AbortError, CommitWorkflowError, TransportError
from revision_commit.logging_config import configure_logging

# Load .env file on CLI startup
load_dotenv()


def _fail(message: str, code: int = 1) -> None:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(code)


def _require_config():
    try:
        return load_config(require_all=True)
    except ConfigError as e:
        _fail(f"Configuration error:\n{e}")


def choose_interactively(revisions):
    """Prompt the operator to pick one of several revisions."""
    click.echo("Which revision do you want to commit?")
    for index, revision in enumerate(revisions, start=1):
        click.echo(f"  [{index}] {revision.label} {revision.name}")
    choice = click.prompt(
        "Revision",
        type=click.IntRange(1, len(revisions)),
        default=1 if len(revisions) == 1 else None,
    )
    return revisions[choice - 1]


@click.group()
@click.version_option(package_name="revision-commit")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def cli(verbose: bool):
    """revcommit - commit accepted review revisions to Subversion."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


@cli.command()
@click.option(
    "--revision",
    "revision_id",
    help="Commit a specific revision (e.g. D123). If omitted, you choose from your committable revisions.",
)
@click.option(
    "--show",
    is_flag=True,
    help="Show the commit message which would be used, but do not commit anything.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Proceed past advisory warnings without asking.",
)
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Path inside the working copy (default: current directory).",
)
def commit(revision_id: Optional[str], show: bool, yes: bool, root: str):
    """Commit a revision which has been accepted by a reviewer.

    Exit codes:
      0 = committed (or message shown)
      1 = usage, conflict, service or svn error
      2 = aborted at a confirmation prompt
    """
    from revision_commit.decision import AutoProceedPolicy, ConfirmPolicy
    from revision_commit.orchestrator import run_commit
    from revision_commit.review_client import get_review_client
    from revision_commit.vcs import SubversionClient
    from revision_commit.working_copy import find_working_copy

    config = _require_config()

    try:
        working_copy = find_working_copy(Path(root))

        if yes:
            policy = AutoProceedPolicy()
        else:
            policy = ConfirmPolicy(
                confirm=lambda prompt: click.confirm(prompt, default=False),
                echo=click.echo,
            )

        report = run_commit(
            client=get_review_client(config),
            vcs=SubversionClient(binary=config.svn_binary, locale=config.commit_locale),
            working_copy=working_copy,
            policy=policy,
            owner_id=config.owner_id,
            revision_id=revision_id,
            chooser=None if yes else choose_interactively,
            show=show,
            echo=click.echo,
        )

    except AbortError as e:
        click.echo(f"Aborted: {e}", err=True)
        raise SystemExit(2)
    except (CommitWorkflowError, ConfigError) as e:
        _fail(str(e))

    if report.shown_only:
        return

    click.echo()
    click.echo(f"Committed {report.revision.label} ({len(report.final_paths)} paths).")
    if report.marked_committed:
        click.echo(f"  Marked {report.revision.label} committed.")


@cli.command("mark-committed")
@click.argument("revision")
def mark_committed(revision: str):
    """Mark REVISION (e.g. D123) committed on the review service."""
    from revision_commit.review_client import get_review_client, parse_revision_id

    config = _require_config()

    try:
        revision_id = parse_revision_id(revision)
    except ValueError as e:
        _fail(str(e))

    try:
        get_review_client(config).mark_committed(revision_id)
    except TransportError as e:
        _fail(str(e))

    click.echo(f"Marked D{revision_id} committed.")


@cli.command("list")
def list_revisions():
    """List your committable revisions."""
    from revision_commit.review_client import get_review_client

    config = _require_config()

    try:
        revisions = get_review_client(config).find_committable_revisions(config.owner_id)
    except TransportError as e:
        _fail(str(e))

    if not revisions:
        click.echo("No committable revisions.")
        return

    for revision in revisions:
        click.echo(f"{revision.label}  {revision.name}")


@cli.command()
def check_config():
    """Check if required environment variables are configured."""
    try:
        config = load_config(require_all=True)
        click.echo("Configuration loaded successfully!")
        click.echo(f"  REVCOMMIT_REVIEW_URL: {config.review_url}")
        click.echo("  REVCOMMIT_API_TOKEN: [set]")
        click.echo(f"  REVCOMMIT_OWNER_ID: {config.owner_id}")
        click.echo(f"  svn binary: {config.svn_binary}")
        click.echo(f"  commit locale: {config.commit_locale}")
    except ConfigError as e:
        click.echo(f"Configuration error:\n{e}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
