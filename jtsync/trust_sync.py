"""Fix/sync and restore flows for the Java trust store."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .config import SDKMAN_LINK_NAME, SDKMAN_MARKER, SyncSettings
from .java_env import JavaEnvironment
from .keytool import Keytool
from .packages import ensure_package
from .privileged import SystemOps
from .utils import ExitCodes, TrustSyncError, info, ok, step, warn

STORE_MODE = 0o644


@dataclass
class ImportSummary:
    """Outcome of importing the OS certificate files."""

    found: List[Path] = field(default_factory=list)
    failures: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def imported(self) -> int:
        """Number of files keytool accepted."""
        return len(self.found) - len(self.failures)


@dataclass
class SyncResult:
    """Outcome of a fix/sync run."""

    summary: ImportSummary
    converted: bool = False
    backed_up: bool = False
    trusted_entries: int = 0


def collect_certificates(sources: Iterable[Tuple[Path, str]]) -> List[Path]:
    """List the certificate files in each source directory.

    Args:
        sources: (directory, glob pattern) pairs, searched in order

    Returns:
        Matching regular files; sorted within each directory
    """
    certs: List[Path] = []
    for directory, pattern in sources:
        if not directory.is_dir():
            continue
        for path in sorted(directory.glob(pattern)):
            if path.is_file():
                certs.append(path)
    return certs


def restore(env: JavaEnvironment, ops: SystemOps) -> None:
    """Put the original per-JVM cacerts back from its backup.

    Raises:
        TrustSyncError: If no backup exists; nothing is touched in that case
    """
    step("Restoring from backup")
    if not env.backup_path.is_file():
        raise TrustSyncError(
            f"No backup found at {env.backup_path}. Nothing to restore.", ExitCodes.NOT_FOUND
        )

    info(f"Restoring original cacerts from {env.backup_path}...")
    ops.remove(env.jdk_cacerts)
    ops.copy(env.backup_path, env.jdk_cacerts)
    ok(f"Restored {env.jdk_cacerts}")


def prepare_environment(env: JavaEnvironment, settings: SyncSettings, ops: SystemOps) -> None:
    """Install the bridge package and create the directories the store lives in."""
    step("Preparing environment")
    ensure_package(settings.bridge_package, use_sudo=settings.use_sudo)

    ops.makedirs(settings.jvm_dir)
    ops.makedirs(settings.system_store.parent)

    if SDKMAN_MARKER in str(env.java_home):
        link = settings.jvm_dir / SDKMAN_LINK_NAME
        info(f"Registering SDKMAN JDK under {link}")
        ops.symlink(env.java_home, link)


def build_trust_store(keytool: Keytool, settings: SyncSettings, ops: SystemOps) -> ImportSummary:
    """Recreate the system trust store and import every OS certificate.

    Individual import failures are recorded and skipped.
    Without sudo, files this process cannot read are recorded as failures
    instead of being handed to keytool.
    """
    step("Building new Java trust store")
    ops.remove(settings.system_store)

    info("Generating empty base keystore...")
    keytool.create_empty()

    info("Importing all system certificates...")
    summary = ImportSummary(found=collect_certificates(settings.cert_sources))
    for cert in summary.found:
        if not settings.use_sudo and not os.access(cert, os.R_OK):
            summary.failures.append((cert, "not readable"))
            continue
        result = keytool.import_certificate(cert, alias=cert.name)
        if result.returncode != 0:
            reason = (result.stderr or result.stdout or "").strip().splitlines()
            summary.failures.append((cert, reason[-1] if reason else f"exit {result.returncode}"))

    ok(
        f"Processed {len(summary.found)} certificates "
        f"({summary.imported} imported, {len(summary.failures)} skipped)"
    )
    return summary


def convert_to_jks(keytool: Keytool, settings: SyncSettings, ops: SystemOps) -> bool:
    """Convert a PKCS12 store to JKS in place; returns True if converted."""
    step("Converting PKCS12 to JKS (for JVM compatibility)")
    converted = False
    if keytool.store_type() == "PKCS12":
        info("Converting trust store format...")
        ops.remove(settings.converted_store)
        keytool.convert(settings.converted_store)
        ops.move(settings.converted_store, settings.system_store)
        ok("Converted to JKS format")
        converted = True
    else:
        info("Already in JKS format")

    ops.chmod(settings.system_store, STORE_MODE)
    ops.chown_root(settings.system_store)
    return converted


def link_jdk_cacerts(env: JavaEnvironment, settings: SyncSettings, ops: SystemOps) -> bool:
    """Back up the JVM's own cacerts once, then symlink it to the system store.

    Returns:
        True if a backup was taken during this call
    """
    step("Linking Java to system trust store")
    backed_up = False
    cacerts = env.jdk_cacerts
    if cacerts.is_file() and not cacerts.is_symlink() and not env.backup_path.exists():
        info(f"Backing up existing JDK cacerts to {env.backup_path}")
        ops.copy(cacerts, env.backup_path)
        backed_up = True
    elif env.backup_path.exists():
        info(f"Keeping existing backup {env.backup_path}")

    ops.remove(cacerts)
    ops.symlink(settings.system_store, cacerts)
    ok(f"Linked {cacerts} to {settings.system_store}")
    return backed_up


def verify_trust_store(keytool: Keytool, settings: SyncSettings) -> int:
    """Count trusted entries and warn when the store looks empty."""
    step("Verifying Java trust store")
    count = keytool.count_trusted_entries()
    if count > 0:
        ok(f"Java trust store contains {count} certificates")
    else:
        warn(f"Trust store appears empty. Check {settings.system_store}")
    return count


def sync(
    env: JavaEnvironment, settings: SyncSettings, ops: Optional[SystemOps] = None
) -> SyncResult:
    """Rebuild the system trust store and point the JVM at it.

    Args:
        env: Validated Java installation
        settings: Run settings
        ops: File operation backend; built from settings when omitted

    Returns:
        What the run did
    """
    ops = ops or SystemOps(use_sudo=settings.use_sudo)
    keytool = Keytool(
        env.keytool, settings.system_store, settings.store_pass, use_sudo=settings.use_sudo
    )

    prepare_environment(env, settings, ops)
    summary = build_trust_store(keytool, settings, ops)
    converted = convert_to_jks(keytool, settings, ops)
    backed_up = link_jdk_cacerts(env, settings, ops)
    count = verify_trust_store(keytool, settings)

    return SyncResult(
        summary=summary, converted=converted, backed_up=backed_up, trusted_entries=count
    )
