"""Shared utility functions for jtsync."""

import subprocess
from pathlib import Path
from typing import List, Sequence, Union

import click


BANNER_WIDTH = 71


class ExitCodes:
    """Standard exit codes for CLI operations."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_INPUT = 2
    NOT_FOUND = 3
    PERMISSION_DENIED = 4


class TrustSyncError(Exception):
    """Fatal condition that aborts the whole run."""

    def __init__(self, message: str, exit_code: int = ExitCodes.GENERAL_ERROR) -> None:
        """Initialize the error.

        Args:
            message: Human-readable failure description
            exit_code: Process exit code the CLI should use
        """
        super().__init__(message)
        self.exit_code = exit_code


def step(title: str) -> None:
    """Print a step banner."""
    click.echo()
    click.echo("=" * BANNER_WIDTH)
    click.echo(f"STEP: {title}")
    click.echo("=" * BANNER_WIDTH)


def info(message: str) -> None:
    """Print an informational message."""
    click.echo(f"  {message}")


def ok(message: str) -> None:
    """Print a success message."""
    click.echo(f"✓ {message}")


def warn(message: str) -> None:
    """Print a warning to stderr."""
    click.echo(f"⚠️  {message}", err=True)


def fail(message: str) -> None:
    """Print a failure message to stderr."""
    click.echo(f"✗ {message}", err=True)


def run_command(
    cmd: Sequence[Union[str, Path]],
    sudo: bool = False,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run an external command and capture its output as text.

    Args:
        cmd: Command and arguments
        sudo: Prefix the command with ``sudo``
        check: Raise TrustSyncError when the command exits nonzero

    Returns:
        The completed process

    Raises:
        TrustSyncError: If the executable is missing, or it fails and check is set
    """
    args: List[str] = [str(arg) for arg in cmd]
    if sudo:
        args = ["sudo"] + args

    try:
        result = subprocess.run(  # noqa: S603
            args,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise TrustSyncError(f"Command not found: {args[0]}", ExitCodes.NOT_FOUND) from exc

    if check and result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        message = f"Command failed ({result.returncode}): {' '.join(args)}"
        if detail:
            message = f"{message}\n  {detail}"
        raise TrustSyncError(message)
    return result
