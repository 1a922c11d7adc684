"""Verification of the signatures of every commit since the verification tag."""

from __future__ import annotations

import contextlib
import io
import sys

from gitsignverifier.config import (
    AUTHORIZED_KEYS_FILE,
    TAG_NAME,
    read_or_update_local_config,
)
from gitsignverifier.gpg import (
    GpgContext,
    GpgError,
    create_gpg_context,
    verify_gpg_signature_result,
)
from gitsignverifier.repository import GitError, Reference, Repository, open_repo
from gitsignverifier.tagging import (
    add_tag,
    check_tag_exists,
    get_file_content_from_commit,
    print_commit,
)

_PGP_BEGIN = "-----BEGIN PGP SIGNATURE-----"
_SSH_BEGIN = "-----BEGIN SSH SIGNATURE-----"


def _warn(message: str) -> None:
    print(message, file=sys.stderr)


def verify_command(repo_path: str) -> bool:
    """Check every commit from the verification tag to HEAD.

    Returns True and moves the tag to HEAD when all commits are trusted,
    False when a tag or commit signature is not acceptable.
    """
    repo = open_repo(repo_path)
    config = read_or_update_local_config(repo, None)
    gpg_ctx = create_gpg_context(config)

    from_ref = check_tag_exists(repo)
    if from_ref is None:
        raise GitError(f"Tag {TAG_NAME} doesn't exist!")
    if not verify_tag(repo, gpg_ctx, from_ref.target):
        return False

    tag_commit = repo.peel_to_commit(from_ref.target)
    authorized_keys = get_file_content_from_commit(
        repo, tag_commit, AUTHORIZED_KEYS_FILE
    )
    if authorized_keys is None:
        raise GitError(
            f"File '{AUTHORIZED_KEYS_FILE}' not found in commit {tag_commit.oid}. "
            "This commit cannot be verified."
        )

    # A failed import is not fatal: verification then reports missing keys.
    with contextlib.suppress(GpgError):
        gpg_ctx.import_keys(authorized_keys)

    to_ref = repo.head()
    all_valid = verify_from_ref(repo, from_ref, to_ref, gpg_ctx)

    if all_valid:
        print("🎉 All commits were signed and trusted.")
        to_commit = repo.peel_to_commit(to_ref.target)
        add_tag(repo, to_commit)
        print(f"Tag {TAG_NAME} moved to {to_commit.oid}")

    return all_valid


def signed_commit_data(raw_header: bytes, message: bytes) -> bytes:
    """Rebuild the payload a commit signature covers: headers without gpgsig, then the message."""
    kept: list[bytes] = []
    in_gpgsig = False
    for line in io.BytesIO(raw_header):
        if line.startswith(b"gpgsig "):
            in_gpgsig = True
        elif in_gpgsig and line.startswith(b" "):
            continue
        else:
            in_gpgsig = False
            kept.append(line)
    return b"".join(kept) + b"\n" + message


def verify_detached_signature(
    signature: str, data: bytes, gpg_ctx: GpgContext, identifier: str
) -> bool:
    """Return whether ``signature`` is a trusted OpenPGP signature of ``data``."""
    first_line = signature.split("\n", 1)[0]
    if first_line.endswith("\r"):
        first_line = first_line[:-1]

    if first_line == _PGP_BEGIN:
        try:
            signatures = gpg_ctx.verify_detached(signature, data)
        except GpgError as exc:
            _warn(
                f"⚠️ Error in GPG signature verification for reference {identifier}. "
                f"Error: {exc}"
            )
            return False
        try:
            verify_gpg_signature_result(signatures)
        except GpgError as exc:
            _warn(f"🔴 {identifier} GPG signature is invalid: {exc}")
            return False
        print(f"✅ Ref {identifier} GPG signature is trusted")
        return True

    if first_line == _SSH_BEGIN:
        _warn(f"⚠️ Unsupported SSH signature on reference {identifier}")
    else:
        _warn(
            f"⚠️ Unknown signature type on reference {identifier}: "
            f"(first line is `{first_line}`)"
        )
    return False


def verify_tag(repo: Repository, gpg_ctx: GpgContext, oid: str) -> bool:
    """Return whether the annotated tag object ``oid`` carries a trusted signature."""
    if repo.object_type(oid) != "tag":
        _warn(
            "🔴 Lightweight tag or tag not signed: impossible to verify its "
            f"authenticity. {oid}"
        )
        return False

    try:
        raw_tag = repo.read_object(oid).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise GitError(f"Invalid UTF-8 in tag: {exc}") from exc

    start = raw_tag.find("-----BEGIN")
    if start == -1:
        message = raw_tag.partition("\n\n")[2]
        _warn(f"🔴 Signature not found in annotated tag. {message}")
        return False

    content, signature = raw_tag[:start], raw_tag[start:]
    return verify_detached_signature(signature, content.encode("utf-8"), gpg_ctx, oid)


def verify_commit(repo: Repository, gpg_ctx: GpgContext, commit_oid: str) -> bool:
    """Return whether a commit is signed by a trusted key.

    Raises GitError when the commit has no signature at all.
    """
    commit = repo.find_commit(commit_oid)
    # GPG and SSH signatures both live under the gpgsig header.
    signature = commit.header_field("gpgsig")
    payload = signed_commit_data(commit.raw_header, commit.message_raw)

    if verify_detached_signature(signature, payload, gpg_ctx, commit_oid):
        return True
    print_commit(commit)
    return False


def verify_from_ref(
    repo: Repository, from_ref: Reference, to_ref: Reference, gpg_ctx: GpgContext
) -> bool:
    """Return whether every commit reachable from ``to_ref`` but not ``from_ref`` is trusted."""
    from_oid = from_ref.target
    from_commit_oid = repo.peel_to_commit(from_oid).oid
    to_oid = to_ref.target

    commits = repo.rev_list(from_oid, to_oid)

    print(
        f"Verifying commits from {from_ref.shorthand}={from_commit_oid} "
        f"to {to_ref.shorthand}={to_oid}"
    )

    for commit_oid in commits:
        try:
            trusted = verify_commit(repo, gpg_ctx, commit_oid)
        except GitError:
            _warn(f"🔴 Commit {commit_oid} is not signed with GPG")
            return False
        if not trusted:
            return False

    return True