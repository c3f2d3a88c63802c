"""Filesystem mutations that may need root.

When sudo is in use every mutation shells out (``sudo rm``, ``sudo ln`` ...);
otherwise the same operation is done in-process.
"""

import os
import shutil
from pathlib import Path

from .utils import ExitCodes, TrustSyncError, run_command, warn


class SystemOps:
    """Performs file operations, optionally through sudo."""

    def __init__(self, use_sudo: bool = False) -> None:
        """Initialize.

        Args:
            use_sudo: Shell out through sudo instead of acting in-process
        """
        self.use_sudo = use_sudo

    def remove(self, path: Path) -> None:
        """Remove a file or symlink; missing paths are ignored."""
        if self.use_sudo:
            run_command(["rm", "-f", path], sudo=True)
            return
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise TrustSyncError(
                f"Cannot remove {path}: {exc}", ExitCodes.PERMISSION_DENIED
            ) from exc

    def copy(self, src: Path, dest: Path) -> None:
        """Copy file contents and mode bits."""
        if self.use_sudo:
            run_command(["cp", src, dest], sudo=True)
            return
        try:
            shutil.copy(src, dest)
        except OSError as exc:
            raise TrustSyncError(
                f"Cannot copy {src} to {dest}: {exc}", ExitCodes.PERMISSION_DENIED
            ) from exc

    def symlink(self, target: Path, link: Path) -> None:
        """Point ``link`` at ``target``, replacing whatever ``link`` was."""
        if self.use_sudo:
            run_command(["ln", "-sfn", target, link], sudo=True)
            return
        try:
            if link.is_symlink() or link.exists():
                link.unlink()
            link.symlink_to(target)
        except OSError as exc:
            raise TrustSyncError(
                f"Cannot link {link} to {target}: {exc}", ExitCodes.PERMISSION_DENIED
            ) from exc

    def move(self, src: Path, dest: Path) -> None:
        """Rename ``src`` over ``dest`` atomically."""
        if self.use_sudo:
            run_command(["mv", src, dest], sudo=True)
            return
        try:
            os.replace(src, dest)
        except OSError as exc:
            raise TrustSyncError(
                f"Cannot move {src} to {dest}: {exc}", ExitCodes.PERMISSION_DENIED
            ) from exc

    def makedirs(self, path: Path) -> None:
        """Create a directory and its parents."""
        if self.use_sudo:
            run_command(["mkdir", "-p", path], sudo=True)
            return
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise TrustSyncError(
                f"Cannot create {path}: {exc}", ExitCodes.PERMISSION_DENIED
            ) from exc

    def chmod(self, path: Path, mode: int) -> None:
        """Set permission bits."""
        if self.use_sudo:
            run_command(["chmod", format(mode, "o"), path], sudo=True)
            return
        try:
            path.chmod(mode)
        except OSError as exc:
            raise TrustSyncError(
                f"Cannot chmod {path}: {exc}", ExitCodes.PERMISSION_DENIED
            ) from exc

    def chown_root(self, path: Path) -> None:
        """Hand ownership to root:root, or warn when not privileged."""
        if self.use_sudo:
            run_command(["chown", "root:root", path], sudo=True)
            return
        if os.geteuid() != 0:
            warn(f"Not running as root; leaving ownership of {path} unchanged")
            return
        try:
            os.chown(path, 0, 0)
        except OSError as exc:
            raise TrustSyncError(
                f"Cannot chown {path}: {exc}", ExitCodes.PERMISSION_DENIED
            ) from exc
