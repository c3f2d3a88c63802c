"""Unit test configuration.

Replaces ``subprocess.run`` inside jtsync with a fake that understands the
handful of dpkg, apt-get and keytool invocations the tool makes. Keystores
are simulated as small JSON documents on disk so the fix and restore flows
run end to end against a ``tmp_path`` tree.
"""

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import pytest

from jtsync.config import SyncSettings

ORIGINAL_CACERTS = b"\xfe\xed\xfe\xed original JDK cacerts bytes"
BAD_CERT_MARKER = "NOT A CERTIFICATE"
NOT_X509 = "keytool error: java.lang.Exception: Input not an X.509 certificate"


def _opt(args: List[str], name: str) -> Optional[str]:
    if name in args:
        return args[args.index(name) + 1]
    return None


def _load_store(path: Path) -> Dict[str, Any]:
    return json.loads(path.read_text())


def _save_store(path: Path, store: Dict[str, Any]) -> None:
    path.write_text(json.dumps(store))


@dataclass
class FakeSystem:
    """Simulated package manager and keytool."""

    installed: Set[str] = field(default_factory=lambda: {"ca-certificates-java"})
    initial_store_type: str = "PKCS12"
    commands: List[List[str]] = field(default_factory=list)

    def tool_calls(self, tool: str) -> List[List[str]]:
        """Return recorded commands whose executable name is ``tool``."""
        return [cmd for cmd in self.commands if Path(cmd[0]).name == tool]

    def run(self, args: List[str], **kwargs: Any) -> subprocess.CompletedProcess:
        """Stand-in for subprocess.run."""
        self.commands.append(list(args))
        if args[0] == "sudo":
            args = args[1:]
        name = Path(args[0]).name
        if name == "dpkg":
            rc = 0 if args[-1] in self.installed else 1
            return subprocess.CompletedProcess(args, rc, "", "")
        if name == "apt-get":
            if args[1] == "install":
                self.installed.add(args[-1])
            return subprocess.CompletedProcess(args, 0, "", "")
        if name == "keytool":
            return self._keytool(args)
        raise FileNotFoundError(args[0])

    def _keytool(self, args: List[str]) -> subprocess.CompletedProcess:
        keystore = Path(_opt(args, "-keystore") or _opt(args, "-srckeystore") or "")
        out = ""
        if "-genkey" in args:
            entries = {_opt(args, "-alias"): "PrivateKeyEntry"}
            _save_store(keystore, {"type": self.initial_store_type, "entries": entries})
        elif "-delete" in args:
            store = _load_store(keystore)
            store["entries"].pop(_opt(args, "-alias"), None)
            _save_store(keystore, store)
        elif "-importcert" in args:
            alias = _opt(args, "-alias")
            cert = Path(_opt(args, "-file") or "")
            store = _load_store(keystore)
            if BAD_CERT_MARKER in cert.read_text():
                return subprocess.CompletedProcess(args, 1, "", NOT_X509)
            if alias in store["entries"]:
                return subprocess.CompletedProcess(
                    args, 1, "", f"Certificate not imported, alias <{alias}> already exists"
                )
            store["entries"][alias] = "trustedCertEntry"
            _save_store(keystore, store)
        elif "-list" in args:
            if not keystore.exists():
                return subprocess.CompletedProcess(
                    args, 1, "", "keytool error: java.lang.Exception: Keystore file does not exist"
                )
            store = _load_store(keystore)
            lines = [
                f"Keystore type: {store['type']}",
                "Keystore provider: SUN",
                "",
                f"Your keystore contains {len(store['entries'])} entries",
                "",
            ]
            lines += [f"{alias}, Oct 17, 2026, {kind}," for alias, kind in store["entries"].items()]
            out = "\n".join(lines) + "\n"
        elif "-importkeystore" in args:
            store = _load_store(keystore)
            store["type"] = _opt(args, "-deststoretype")
            _save_store(Path(_opt(args, "-destkeystore") or ""), store)
        return subprocess.CompletedProcess(args, 0, out, "")


@pytest.fixture
def fake_system(monkeypatch: pytest.MonkeyPatch) -> FakeSystem:
    """Route jtsync's subprocess calls to a FakeSystem."""
    system = FakeSystem()
    monkeypatch.setattr("jtsync.utils.subprocess.run", system.run)
    return system


def _make_executable(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)


@pytest.fixture
def java_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A fake JDK with java, keytool and an original cacerts; exported as JAVA_HOME."""
    home = tmp_path / "jdk"
    _make_executable(home / "bin" / "java")
    _make_executable(home / "bin" / "keytool")
    cacerts = home / "lib" / "security" / "cacerts"
    cacerts.parent.mkdir(parents=True)
    cacerts.write_bytes(ORIGINAL_CACERTS)
    monkeypatch.setenv("JAVA_HOME", str(home))
    return home


@pytest.fixture
def cert_dirs(tmp_path: Path) -> Dict[str, Path]:
    """Local and distribution certificate directories with a few certificates."""
    local = tmp_path / "usr" / "local" / "share" / "ca-certificates"
    system = tmp_path / "etc" / "ssl" / "certs"
    local.mkdir(parents=True)
    system.mkdir(parents=True)
    (local / "corp-root.crt").write_text("-----BEGIN CERTIFICATE-----\ncorp\n")
    (local / "README").write_text("not a certificate file")
    (system / "ISRG_Root_X1.pem").write_text("-----BEGIN CERTIFICATE-----\nisrg\n")
    (system / "DigiCert_Global_Root_G2.pem").write_text("-----BEGIN CERTIFICATE-----\ndigi\n")
    (system / "ca-certificates.crt").write_text("bundle, wrong extension for this directory")
    return {"local": local, "system": system}


@pytest.fixture
def settings(tmp_path: Path, cert_dirs: Dict[str, Path]) -> SyncSettings:
    """Settings rooted under tmp_path, without sudo."""
    return SyncSettings(
        system_store=cert_dirs["system"] / "java" / "cacerts",
        jvm_dir=tmp_path / "usr" / "lib" / "jvm",
        cert_sources=((cert_dirs["local"], "*.crt"), (cert_dirs["system"], "*.pem")),
        use_sudo=False,
    )
