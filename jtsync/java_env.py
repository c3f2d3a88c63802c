"""Java installation detection."""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .utils import ExitCodes, TrustSyncError


@dataclass(frozen=True)
class JavaEnvironment:
    """A validated Java installation."""

    java_home: Path
    keytool: Path
    detected: bool = False

    @property
    def jdk_cacerts(self) -> Path:
        """The JVM's built-in trust store."""
        return self.java_home / "lib" / "security" / "cacerts"

    @property
    def backup_path(self) -> Path:
        """Backup of the original per-JVM cacerts."""
        return self.jdk_cacerts.with_name(self.jdk_cacerts.name + ".bak")


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def detect_java_home(environ: Optional[Mapping[str, str]] = None) -> Tuple[Path, bool]:
    """Locate the Java installation directory.

    JAVA_HOME wins when set to anything non-empty. Otherwise the ``java``
    executable on PATH is resolved through symlinks and its grandparent
    directory is used
    (``<home>/bin/java`` -> ``<home>``).

    Returns:
        The directory, and whether it was derived from PATH rather than given

    Raises:
        TrustSyncError: If no Java installation can be found
    """
    environ = os.environ if environ is None else environ
    java_home = environ.get("JAVA_HOME", "")
    if java_home:
        return Path(java_home), False

    java_bin = shutil.which("java", path=environ.get("PATH"))
    if not java_bin:
        raise TrustSyncError(
            "No JAVA_HOME found. Please ensure Java is installed and on PATH.",
            ExitCodes.NOT_FOUND,
        )
    return Path(os.path.realpath(java_bin)).parent.parent, True


def load_java_environment(environ: Optional[Mapping[str, str]] = None) -> JavaEnvironment:
    """Detect and validate the Java installation and its keytool.

    Raises:
        TrustSyncError: If JAVA_HOME is invalid or keytool is missing
    """
    java_home, detected = detect_java_home(environ)

    if not _is_executable(java_home / "bin" / "java"):
        raise TrustSyncError(f"JAVA_HOME is invalid: {java_home}", ExitCodes.INVALID_INPUT)

    keytool = Path(os.path.realpath(java_home / "bin" / "keytool"))
    if not _is_executable(keytool):
        raise TrustSyncError(f"keytool not found under {java_home / 'bin'}", ExitCodes.NOT_FOUND)

    return JavaEnvironment(java_home=java_home, keytool=keytool, detected=detected)
