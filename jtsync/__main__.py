"""Entry point for ``python -m jtsync``."""

from jtsync.main import cli

if __name__ == "__main__":
    cli()
