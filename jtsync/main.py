"""jtsync entry points."""

import sys
import traceback
from pathlib import Path

import click
import tomllib
from tabulate import tabulate

from .config import load_settings
from .java_env import load_java_environment
from .privileged import SystemOps
from .trust_sync import ImportSummary, restore, sync
from .utils import BANNER_WIDTH, TrustSyncError, fail, info, ok, step


def get_version() -> str:
    """Get version from _version.py (built binary) or pyproject.toml (development)."""
    try:
        from ._version import __version__  # type: ignore[import-not-found]

        return __version__
    except ImportError:
        try:
            pyproject_path = Path(__file__).parent.parent / "pyproject.toml"

            with open(pyproject_path, "rb") as f:
                pyproject_data = tomllib.load(f)

            return pyproject_data["tool"]["poetry"]["version"]
        except Exception:
            return "unknown"


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def _report_failures(summary: ImportSummary) -> None:
    if not summary.failures:
        return
    click.echo()
    click.echo(f"Skipped {len(summary.failures)} certificate(s) keytool rejected:")
    rows = [[cert.name, str(cert.parent), reason] for cert, reason in summary.failures]
    click.echo(tabulate(rows, headers=["ALIAS", "DIRECTORY", "REASON"], tablefmt="github"))


@click.command(context_settings=CONTEXT_SETTINGS)
@click.option("--restore", "restore_mode", is_flag=True, help="Restore the original cacerts")
@click.option("--version", "-v", is_flag=True, help="Show version and exit")
@click.pass_context
def cli(ctx: click.Context, restore_mode: bool, version: bool) -> None:
    """Synchronize the Java trust store (cacerts) with the OS certificates.

    Without options the system Java trust store is rebuilt from the OS
    certificate files and the JDK's cacerts is replaced by a symlink to it.
    With --restore the original cacerts is copied back from its backup.
    """
    if version:
        click.echo(f"jtsync version {get_version()}")
        ctx.exit()

    settings = load_settings()
    try:
        step("Detecting Java environment")
        env = load_java_environment()
        source = "Detected" if env.detected else "Using"
        info(f"{source} JAVA_HOME: {env.java_home}")
        ops = SystemOps(use_sudo=settings.use_sudo)

        if restore_mode:
            restore(env, ops)
            return

        result = sync(env, settings, ops)
    except TrustSyncError as exc:
        fail(str(exc))
        if settings.debug:
            traceback.print_exc()
        sys.exit(exc.exit_code)

    _report_failures(result.summary)
    click.echo()
    click.echo("=" * BANNER_WIDTH)
    ok("Java trust synchronization complete!")
    click.echo("=" * BANNER_WIDTH)
