"""Wrapper around the JDK ``keytool`` utility for a single keystore."""

import re
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from .utils import run_command

PLACEHOLDER_ALIAS = "temp"
TRUSTED_ENTRY_MARKER = "trustedCertEntry"

_STORE_TYPE_RE = re.compile(r"^Keystore type:\s*(\S+)", re.MULTILINE)


class Keytool:
    """Runs keytool commands against one keystore file."""

    def __init__(
        self,
        path: Path,
        keystore: Path,
        storepass: str,
        use_sudo: bool = False,
    ) -> None:
        """Initialize the wrapper.

        Args:
            path: keytool executable
            keystore: Keystore file every command operates on
            storepass: Keystore password
            use_sudo: Run keytool through sudo
        """
        self.path = path
        self.keystore = keystore
        self.storepass = storepass
        self.use_sudo = use_sudo

    def _run(
        self, args: List[Union[str, Path]], check: bool = True
    ) -> subprocess.CompletedProcess:
        cmd: List[Union[str, Path]] = [self.path]
        cmd.extend(args)
        return run_command(cmd, sudo=self.use_sudo, check=check)

    def _store_args(self) -> List[Union[str, Path]]:
        return ["-keystore", self.keystore, "-storepass", self.storepass]

    def create_empty(self) -> None:
        """Create an empty keystore.

        keytool cannot create an empty store directly, so a placeholder key
        pair is generated and then deleted.
        """
        self._run(
            ["-genkey", "-alias", PLACEHOLDER_ALIAS]
            + self._store_args()
            + ["-keyalg", "RSA", "-keysize", "2048", "-dname", "CN=temp", "-noprompt"]
        )
        self._run(["-delete", "-alias", PLACEHOLDER_ALIAS] + self._store_args(), check=False)

    def import_certificate(self, cert: Path, alias: str) -> subprocess.CompletedProcess:
        """Import a certificate as a trusted entry. Never raises on keytool failure."""
        return self._run(
            ["-importcert", "-trustcacerts", "-file", cert, "-alias", alias]
            + self._store_args()
            + ["-noprompt"],
            check=False,
        )

    def list_entries(self, check: bool = True) -> str:
        """Return the ``keytool -list`` output."""
        result = self._run(["-list"] + self._store_args(), check=check)
        return (result.stdout or "") + (result.stderr or "")

    def store_type(self) -> Optional[str]:
        """Return the on-disk keystore type, e.g. ``PKCS12`` or ``JKS``."""
        match = _STORE_TYPE_RE.search(self.list_entries(check=False))
        if match is None:
            return None
        return match.group(1).upper()

    def count_trusted_entries(self) -> int:
        """Count trusted-certificate entries; 0 if the store cannot be listed."""
        result = self._run(["-list"] + self._store_args(), check=False)
        if result.returncode != 0:
            return 0
        return sum(1 for line in result.stdout.splitlines() if TRUSTED_ENTRY_MARKER in line)

    def convert(self, dest: Path, src_type: str = "PKCS12", dest_type: str = "JKS") -> None:
        """Copy every entry into a new keystore of another type."""
        self._run(
            [
                "-importkeystore",
                "-srckeystore",
                self.keystore,
                "-srcstoretype",
                src_type,
                "-srcstorepass",
                self.storepass,
                "-destkeystore",
                dest,
                "-deststoretype",
                dest_type,
                "-deststorepass",
                self.storepass,
                "-noprompt",
            ]
        )
