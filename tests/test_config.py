import subprocess

import pytest

from gitsignverifier.config import (
    GPGME_HOME_DIR_KEY,
    read_or_update_local_config,
)
from gitsignverifier.repository import open_repo


@pytest.fixture
def repo(tmp_path):
    directory = tmp_path / "repo"
    directory.mkdir()
    subprocess.run(["git", "init"], cwd=directory, check=True, capture_output=True)
    return open_repo(str(directory))


def test_no_configured_home_dir(repo):
    assert read_or_update_local_config(repo, None).gpgme_home_dir is None


def test_relative_home_dir_is_stored_and_resolved(repo):
    config = read_or_update_local_config(repo, "gpg")
    assert config.gpgme_home_dir == str(repo.workdir / "gpg")
    assert repo.config_get(GPGME_HOME_DIR_KEY) == "gpg"


def test_stored_home_dir_is_read_back(repo):
    read_or_update_local_config(repo, "../keys")
    config = read_or_update_local_config(repo, None)
    assert config.gpgme_home_dir == str(repo.workdir / "../keys")


def test_absolute_home_dir_is_kept(repo, tmp_path):
    absolute = str(tmp_path / "gpg")
    config = read_or_update_local_config(repo, absolute)
    assert config.gpgme_home_dir == absolute
    assert repo.config_get(GPGME_HOME_DIR_KEY) == absolute