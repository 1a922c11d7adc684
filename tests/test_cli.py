import subprocess

import pytest

from gitsignverifier.cli import main
from gitsignverifier.config import AUTHORIZED_KEYS_FILE, EXIT_INVALID_SIGNATURE, TAG_NAME


def _git(repo, *args, data=None):
    proc = subprocess.run(
        ["git", "-C", str(repo), *args],
        input=data.encode("utf-8") if data is not None else None,
        capture_output=True,
        check=True,
    )
    return proc.stdout.decode("utf-8").strip()


@pytest.fixture
def repo_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GNUPGHOME", str(tmp_path / "gnupg-empty"))
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "config", "user.name", "Test User")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "commit.gpgsign", "false")
    (repo / "README").write_text("hello\n")
    _git(repo, "add", "README")
    _git(repo, "commit", "-q", "-m", "initial")
    return repo


def test_verify_without_tag_exits_with_error(repo_dir, capsys):
    assert main(["verify", "-d", str(repo_dir)]) == 1
    err = capsys.readouterr().err
    assert "Erreur lors de la vérification" in err
    assert f"Tag {TAG_NAME} doesn't exist!" in err


def test_verify_unknown_tag_signature_is_invalid(repo_dir):
    head = _git(repo_dir, "rev-parse", "HEAD")
    raw = (
        f"object {head}\ntype commit\ntag {TAG_NAME}\n"
        "tagger Test User <test@example.com> 1750782139 +0200\n\nmessage\n"
        "-----BEGIN FOO SIGNATURE-----\nAAAA\n"
    )
    oid = _git(repo_dir, "hash-object", "-t", "tag", "-w", "--stdin", data=raw)
    _git(repo_dir, "update-ref", f"refs/tags/{TAG_NAME}", oid)
    assert main(["verify", "--directory", str(repo_dir)]) == EXIT_INVALID_SIGNATURE


def test_verify_uses_current_directory_by_default(repo_dir, monkeypatch, capsys):
    monkeypatch.chdir(repo_dir)
    assert main(["verify"]) == 1
    assert "doesn't exist" in capsys.readouterr().err


def test_init_without_authorized_keys(repo_dir, capsys):
    assert main(["init", "-d", str(repo_dir), "-g", "gpg"]) == 1
    err = capsys.readouterr().err
    assert "Erreur lors de l'initialisation" in err
    assert AUTHORIZED_KEYS_FILE in err


def test_missing_subcommand_is_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


def test_version_option(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert "git-sign-verifier" in capsys.readouterr().out