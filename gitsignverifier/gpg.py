"""Signing and verification through the ``gpg`` executable."""

from __future__ import annotations

import enum
import os
import subprocess
import tempfile
from dataclasses import dataclass, field
from typing import Iterable

from gitsignverifier.config import Config

_STATUS_PREFIX = "[GNUPG:] "
_RESULT_STATUSES = {"GOODSIG", "EXPSIG", "EXPKEYSIG", "REVKEYSIG", "BADSIG", "ERRSIG"}
_KEY_MISSING_RC = "9"


class GpgError(Exception):
    """Raised when gpg fails or a signature is not acceptable."""


class SignatureSummary(enum.Flag):
    NONE = 0
    VALID = enum.auto()
    GREEN = enum.auto()
    RED = enum.auto()
    KEY_REVOKED = enum.auto()
    KEY_EXPIRED = enum.auto()
    SIG_EXPIRED = enum.auto()
    KEY_MISSING = enum.auto()


@dataclass
class Signature:
    """One signature found while verifying."""

    fingerprint: str | None = None
    summary: SignatureSummary = field(default=SignatureSummary.NONE)


def _parse_status(output: str) -> list[Signature]:
    signatures: list[Signature] = []
    current: Signature | None = None
    has_result = False

    for line in output.splitlines():
        if not line.startswith(_STATUS_PREFIX):
            continue
        keyword, *args = line[len(_STATUS_PREFIX):].split()

        if keyword == "NEWSIG":
            current = Signature()
            signatures.append(current)
            has_result = False
            continue

        if keyword in _RESULT_STATUSES:
            if current is None or has_result:
                current = Signature()
                signatures.append(current)
            has_result = True
            if args and current.fingerprint is None:
                current.fingerprint = args[0]

        if current is None:
            continue

        if keyword == "VALIDSIG" and args:
            current.fingerprint = args[0]
        elif keyword == "EXPSIG":
            current.summary |= SignatureSummary.SIG_EXPIRED
        elif keyword == "EXPKEYSIG":
            current.summary |= SignatureSummary.KEY_EXPIRED
        elif keyword in ("REVKEYSIG", "KEYREVOKED"):
            current.summary |= SignatureSummary.KEY_REVOKED
        elif keyword == "BADSIG":
            current.summary |= SignatureSummary.RED
        elif keyword == "ERRSIG":
            if len(args) > 6 and args[6] != "-":
                current.fingerprint = args[6]
            if len(args) > 5 and args[5] == _KEY_MISSING_RC:
                current.summary |= SignatureSummary.KEY_MISSING
        elif keyword == "NO_PUBKEY":
            current.summary |= SignatureSummary.KEY_MISSING
        elif keyword in ("TRUST_FULLY", "TRUST_ULTIMATE"):
            current.summary |= SignatureSummary.VALID | SignatureSummary.GREEN
        elif keyword == "TRUST_NEVER":
            current.summary |= SignatureSummary.RED

    return signatures


class GpgContext:
    """An OpenPGP context bound to an optional GnuPG home directory."""

    def __init__(self, home_dir: str | None = None) -> None:
        self.home_dir = home_dir

    def _command(self, *args: str) -> list[str]:
        command = ["gpg", "--batch", "--no-tty"]
        if self.home_dir is not None:
            command += ["--homedir", self.home_dir]
        return [*command, *args]

    def _run(self, args: list[str], data: bytes) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                self._command(*args), input=data, capture_output=True, check=False
            )
        except FileNotFoundError as exc:
            raise GpgError("gpg executable not found") from exc

    @staticmethod
    def _stderr(proc: subprocess.CompletedProcess) -> str:
        return proc.stderr.decode("utf-8", errors="replace").strip() or "gpg failed"

    def import_keys(self, data: bytes) -> None:
        """Import public keys into the keyring."""
        proc = self._run(["--import"], data)
        if proc.returncode != 0:
            raise GpgError(self._stderr(proc))

    def sign_detached(self, data: bytes) -> str:
        """Return an armored detached signature of ``data`` made with the default key."""
        proc = self._run(["--armor", "--detach-sign"], data)
        if proc.returncode != 0:
            raise GpgError(self._stderr(proc))
        return proc.stdout.decode("utf-8")

    def verify_detached(self, signature: str, data: bytes) -> list[Signature]:
        """Check a detached signature and return what was found about each signer."""
        fd, sig_path = tempfile.mkstemp(suffix=".asc")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(signature)
            proc = self._run(["--status-fd", "1", "--verify", sig_path, "-"], data)
        finally:
            os.unlink(sig_path)
        signatures = _parse_status(proc.stdout.decode("utf-8", errors="replace"))
        if not signatures and proc.returncode != 0:
            raise GpgError(self._stderr(proc))
        return signatures


def create_gpg_context(config: Config) -> GpgContext:
    """Build a context using the configured GnuPG home, if any."""
    return GpgContext(config.gpgme_home_dir)


_SUMMARY_ERRORS = (
    (SignatureSummary.KEY_REVOKED, "GPG key revoked"),
    (SignatureSummary.KEY_EXPIRED, "GPG key expired"),
    (SignatureSummary.SIG_EXPIRED, "Signature expired"),
    (SignatureSummary.KEY_MISSING, "Unknown GPG key, missing in keyring"),
)


def verify_gpg_signature_result(signatures: Iterable[Signature]) -> None:
    """Accept when a signature is checked before any problem is seen.

    Raises GpgError with the first problem found, or when there is no signature.
    """
    errors: list[str] = []
    for sig in signatures:
        print(f"   Verify key {sig.fingerprint or ''}")
        errors.extend(
            message for flag, message in _SUMMARY_ERRORS if flag in sig.summary
        )
        if not errors:
            return
    if not errors:
        raise GpgError("No signature found")
    raise GpgError(errors[0])