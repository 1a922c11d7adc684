"""Creation of the first verification tag."""

from __future__ import annotations

from gitsignverifier.config import (
    AUTHORIZED_KEYS_FILE,
    TAG_NAME,
    read_or_update_local_config,
)
from gitsignverifier.repository import GitError, open_repo
from gitsignverifier.tagging import (
    add_tag,
    check_tag_exists,
    get_file_content_from_commit,
    get_last_commit,
    print_commit,
)


def init_command(repo_path: str, gpgme_home_dir: str | None = None) -> None:
    """Place the signed verification tag on the HEAD commit.

    Raises GitError when the tag already exists, when HEAD lacks the
    authorized keys file, or when tagging fails.
    """
    repo = open_repo(repo_path)

    if check_tag_exists(repo) is not None:
        raise GitError(f"Le tag '{TAG_NAME}' existe déjà!")

    commit = get_last_commit(repo)

    if get_file_content_from_commit(repo, commit, AUTHORIZED_KEYS_FILE) is None:
        raise GitError(
            "Authorized keys file not found. You must first commit a "
            f"{AUTHORIZED_KEYS_FILE} file containing allowed keys."
        )

    read_or_update_local_config(repo, gpgme_home_dir)
    add_tag(repo, commit)

    print(f"Tag '{TAG_NAME}' initialized on commit:")
    print_commit(commit)