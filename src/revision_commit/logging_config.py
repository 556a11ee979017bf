"""Shared logging setup for the revcommit CLI."""

import logging


def configure_logging(level: int = logging.WARNING, force: bool = False) -> None:
    """Initialise the root logger with a terse format suitable for CLI output.

    User-facing progress goes through click.echo; log records are
    diagnostics, so the default level only lets warnings through. Pass
    ``force=True`` to reconfigure in tests.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
