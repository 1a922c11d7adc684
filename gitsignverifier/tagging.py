"""Helpers around commits and the signed verification tag."""

from __future__ import annotations

import sys
import time
from datetime import datetime

from gitsignverifier.config import TAG_NAME, read_or_update_local_config
from gitsignverifier.gpg import GpgError, create_gpg_context
from gitsignverifier.repository import Commit, GitError, Reference, Repository

TAG_MESSAGE = "Verification tag managed by git-sign-verifier"


def check_tag_exists(repo: Repository) -> Reference | None:
    """Return the verification tag reference, if present."""
    return repo.find_reference(f"refs/tags/{TAG_NAME}")


def get_last_commit(repo: Repository) -> Commit:
    """Return the commit HEAD points to."""
    return repo.peel_to_commit(repo.head().target)


def get_file_content_from_commit(
    repo: Repository, commit: Commit, file_path: str
) -> bytes | None:
    """Return a file's bytes in ``commit``, or None if it is missing or not a file."""
    return repo.file_from_commit(commit.oid, file_path)


def print_commit(commit: Commit) -> None:
    print(f"  commit {commit.oid}")
    print(f"  author: {commit.author_name} <{commit.author_email}>")
    print(f"\n  {commit.message}")


def build_tag_content(
    commit_oid: str,
    name: str,
    email: str,
    seconds: int,
    offset_minutes: int,
    message: str,
) -> str:
    """Build the unsigned tag object text as git expects it."""
    scaled = offset_minutes * 100
    offset = abs(scaled) // 60 * (1 if scaled >= 0 else -1)
    return (
        f"object {commit_oid}\ntype commit\ntag {TAG_NAME}\n"
        f"tagger {name} <{email}> {seconds} {offset:+05d}\n\n{message}\n"
    )


def _read_user(repo: Repository) -> tuple[str, str]:
    values = []
    for key in ("user.name", "user.email"):
        value = repo.config_get(key)
        if value is None:
            raise GitError(f"config value '{key}' was not found")
        values.append(value)
    return values[0], values[1]


def _local_offset_minutes() -> int:
    offset = datetime.now().astimezone().utcoffset()
    return int(offset.total_seconds() // 60) if offset else 0


def add_tag(repo: Repository, commit: Commit) -> None:
    """Create or move the signed verification tag onto ``commit``."""
    name, email = _read_user(repo)
    config = read_or_update_local_config(repo, None)
    gpg_ctx = create_gpg_context(config)

    tag_content = build_tag_content(
        commit.oid, name, email, int(time.time()), _local_offset_minutes(), TAG_MESSAGE
    )
    try:
        signature = gpg_ctx.sign_detached(tag_content.encode("utf-8"))
    except GpgError as exc:
        print(f"⚠️ Failed to sign tag content: {exc}", file=sys.stderr)
        raise GitError("Failed to sign tag") from exc

    tag_oid = repo.write_object("tag", (tag_content + signature).encode("utf-8"))
    repo.update_reference(
        f"refs/tags/{TAG_NAME}", tag_oid, f"{TAG_MESSAGE} on {commit.oid}"
    )