"""Debian package management helpers."""

from .utils import info, run_command


def is_package_installed(name: str) -> bool:
    """Return True if dpkg reports the package as installed."""
    result = run_command(["dpkg", "-s", name], check=False)
    return result.returncode == 0


def ensure_package(name: str, use_sudo: bool = False) -> bool:
    """Install a package with apt-get unless it is already present.

    Args:
        name: Package name
        use_sudo: Run apt-get through sudo

    Returns:
        True if the package was installed by this call

    Raises:
        TrustSyncError: If apt-get fails
    """
    if is_package_installed(name):
        info(f"{name} already installed")
        return False

    info(f"Installing {name}...")
    run_command(["apt-get", "update", "-y"], sudo=use_sudo)
    run_command(["apt-get", "install", "-y", name], sudo=use_sudo)
    return True
