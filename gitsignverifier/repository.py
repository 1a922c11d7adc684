"""Access to a git repository through the ``git`` executable."""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

_SHORTHAND_PREFIXES = ("refs/heads/", "refs/tags/", "refs/remotes/", "refs/")
_AUTHOR_PATTERN = re.compile(r"^(.*?)\s*<([^>]*)>")


class GitError(Exception):
    """Raised when a git operation fails."""


def _run_git(
    cwd: str | Path, args: Sequence[str], input_data: bytes | None = None
) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", "-C", str(cwd), *args],
            input=input_data,
            capture_output=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise GitError("git executable not found") from exc


def _checked(proc: subprocess.CompletedProcess, args: Sequence[str]) -> bytes:
    if proc.returncode != 0:
        message = proc.stderr.decode("utf-8", errors="replace").strip()
        raise GitError(message or f"git {args[0]} failed")
    return proc.stdout


@dataclass(frozen=True)
class Reference:
    """A named reference and the object id it points to."""

    name: str
    target: str

    @property
    def shorthand(self) -> str:
        for prefix in _SHORTHAND_PREFIXES:
            if self.name.startswith(prefix):
                return self.name[len(prefix):]
        return self.name


@dataclass(frozen=True)
class Commit:
    """A commit object split into its raw header and raw message."""

    oid: str
    raw_header: bytes
    message_raw: bytes

    def header_field(self, name: str) -> str:
        """Return a header value, continuation lines joined by newlines."""
        key = name.encode("utf-8") + b" "
        parts: list[bytes] | None = None
        for line in self.raw_header.split(b"\n"):
            if parts is None:
                if line.startswith(key):
                    parts = [line[len(key):]]
            elif line.startswith(b" "):
                parts.append(line[1:])
            else:
                break
        if parts is None:
            raise GitError(f"no such field '{name}' in commit {self.oid}")
        return b"\n".join(parts).decode("utf-8", errors="replace")

    def _author(self) -> tuple[str, str]:
        try:
            value = self.header_field("author")
        except GitError:
            return "", ""
        match = _AUTHOR_PATTERN.match(value)
        if match is None:
            return "", ""
        return match.group(1), match.group(2)

    @property
    def author_name(self) -> str:
        return self._author()[0]

    @property
    def author_email(self) -> str:
        return self._author()[1]

    @property
    def message(self) -> str:
        return self.message_raw.decode("utf-8", errors="replace")


def parse_commit(oid: str, raw: bytes) -> Commit:
    """Split raw commit bytes into header (with its final newline) and message."""
    end = raw.find(b"\n\n")
    if end == -1:
        return Commit(oid=oid, raw_header=raw, message_raw=b"")
    return Commit(oid=oid, raw_header=raw[: end + 1], message_raw=raw[end + 2:])


class Repository:
    """A non-bare git repository opened at its working directory."""

    def __init__(self, path: str | Path) -> None:
        args = ("rev-parse", "--show-toplevel")
        out = _checked(_run_git(path, args), args)
        toplevel = Path(out.decode("utf-8").strip()).resolve()
        if toplevel != Path(path).resolve():
            raise GitError(f"could not find repository at '{path}'")
        self.workdir = toplevel

    def run(self, *args: str, input_data: bytes | None = None) -> bytes:
        """Run a git command in the repository and return its output."""
        return _checked(_run_git(self.workdir, args, input_data), args)

    def _try(self, *args: str) -> str | None:
        proc = _run_git(self.workdir, args)
        if proc.returncode != 0:
            return None
        return proc.stdout.decode("utf-8").strip()

    def config_get(self, key: str) -> str | None:
        args = ("config", "--local", "--get", key)
        proc = _run_git(self.workdir, args)
        if proc.returncode == 1:
            return None
        return _checked(proc, args).decode("utf-8").rstrip("\n")

    def config_set(self, key: str, value: str) -> None:
        self.run("config", "--local", key, value)

    def find_reference(self, name: str) -> Reference | None:
        out = self.run("for-each-ref", "--format=%(refname) %(objectname)", name)
        for line in out.decode("utf-8").splitlines():
            refname, _, target = line.partition(" ")
            if refname == name:
                return Reference(name=refname, target=target)
        return None

    def head(self) -> Reference:
        target = self._try("rev-parse", "--verify", "--quiet", "HEAD")
        if not target:
            raise GitError("reference 'HEAD' does not point to a commit")
        name = self._try("symbolic-ref", "--quiet", "HEAD") or "HEAD"
        return Reference(name=name, target=target)

    def object_type(self, oid: str) -> str:
        return self.run("cat-file", "-t", oid).decode("utf-8").strip()

    def find_commit(self, oid: str) -> Commit:
        if self.object_type(oid) != "commit":
            raise GitError(f"object {oid} is not a commit")
        full = self.run("rev-parse", "--verify", oid).decode("utf-8").strip()
        return parse_commit(full, self.run("cat-file", "commit", full))

    def peel_to_commit(self, oid: str) -> Commit:
        full = self.run("rev-parse", "--verify", f"{oid}^{{commit}}")
        return self.find_commit(full.decode("utf-8").strip())

    def read_object(self, oid: str) -> bytes:
        return self.run("cat-file", self.object_type(oid), oid)

    def write_object(self, kind: str, data: bytes) -> str:
        out = self.run("hash-object", "-t", kind, "-w", "--stdin", input_data=data)
        return out.decode("utf-8").strip()

    def update_reference(self, name: str, oid: str, message: str) -> None:
        self.run("update-ref", "-m", message, name, oid)

    def rev_list(self, from_oid: str, to_oid: str) -> list[str]:
        out = self.run("rev-list", "--reverse", f"{from_oid}..{to_oid}")
        return out.decode("utf-8").split()

    def file_from_commit(self, oid: str, path: str) -> bytes | None:
        entry = self._try("rev-parse", "--verify", "--quiet", f"{oid}:{path}")
        if not entry or self.object_type(entry) != "blob":
            return None
        return self.run("cat-file", "blob", entry)


def open_repo(repo_path: str | Path) -> Repository:
    """Open the repository whose working directory is ``repo_path``."""
    try:
        return Repository(repo_path)
    except GitError as exc:
        raise GitError(f"Erreur lors de l'accès au dépôt : {exc}") from exc