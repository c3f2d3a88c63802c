"""Configuration for jtsync.

Paths and the keystore password are fixed. Behaviour switches are read from
the environment:

    JAVA_HOME=<dir>    -> Java installation to repair (auto-detected if unset)
    JTSYNC_NO_SUDO=1   -> Never prefix commands with sudo
    JTSYNC_DEBUG=1     -> Print a traceback when a fatal error aborts the run
"""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

STORE_PASS = "changeit"
SYSTEM_STORE = Path("/etc/ssl/certs/java/cacerts")
JVM_DIR = Path("/usr/lib/jvm")
BRIDGE_PACKAGE = "ca-certificates-java"
SDKMAN_MARKER = ".sdkman"
SDKMAN_LINK_NAME = "sdkman-java"

# Directory and glob pattern pairs, imported in this order.
CERT_SOURCES: Tuple[Tuple[Path, str], ...] = (
    (Path("/usr/local/share/ca-certificates"), "*.crt"),
    (Path("/etc/ssl/certs"), "*.pem"),
)


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    value = environ.get(name)
    if value is None:
        return False
    return value.strip().lower() in ("1", "true", "yes")


def should_use_sudo(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when privileged commands must go through sudo.

    Sudo is used only when not already root, JTSYNC_NO_SUDO is not set,
    and a sudo executable is available.
    """
    environ = os.environ if environ is None else environ
    if _env_flag(environ, "JTSYNC_NO_SUDO"):
        return False
    if os.geteuid() == 0:
        return False
    return shutil.which("sudo") is not None


@dataclass
class SyncSettings:
    """Settings for one fix or restore run."""

    store_pass: str = STORE_PASS
    system_store: Path = SYSTEM_STORE
    jvm_dir: Path = JVM_DIR
    bridge_package: str = BRIDGE_PACKAGE
    cert_sources: Tuple[Tuple[Path, str], ...] = field(default=CERT_SOURCES)
    use_sudo: bool = False
    debug: bool = False

    @property
    def converted_store(self) -> Path:
        """Temporary destination used while converting the store to JKS."""
        return self.system_store.with_name(self.system_store.name + ".jks")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> SyncSettings:
    """Build settings from the fixed defaults and the environment switches."""
    environ = os.environ if environ is None else environ
    return SyncSettings(
        use_sudo=should_use_sudo(environ),
        debug=_env_flag(environ, "JTSYNC_DEBUG"),
    )
