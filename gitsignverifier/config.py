"""Constants and the repository-local configuration of the verifier."""

from __future__ import annotations

from dataclasses import dataclass

from gitsignverifier.repository import Repository

TAG_NAME = "SIGN_VERIFIED"
AUTHORIZED_KEYS_FILE = ".gpg_authorized_keys"
EXIT_INVALID_SIGNATURE = 127
GPGME_HOME_DIR_KEY = "git-sign-verifier.gpgmehomedir"


@dataclass(frozen=True)
class Config:
    """Resolved verifier settings."""

    gpgme_home_dir: str | None = None


def read_or_update_local_config(
    repo: Repository, gpgme_home_dir: str | None = None
) -> Config:
    """Store the given GnuPG home in the local git config, or read the stored one.

    The directory is kept relative to the working directory in the config and
    returned as an absolute path.
    """
    if gpgme_home_dir is not None:
        repo.config_set(GPGME_HOME_DIR_KEY, gpgme_home_dir)
        directory: str | None = gpgme_home_dir
    else:
        directory = repo.config_get(GPGME_HOME_DIR_KEY)

    if directory is None:
        return Config(gpgme_home_dir=None)
    return Config(gpgme_home_dir=str(repo.workdir / directory))