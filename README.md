# gitsignverifier

Check that every commit added to a git repository carries a GPG signature
from a trusted key.

The tool keeps a signed reference tag, `SIGN_VERIFIED`, on the last commit
it verified. Each run first checks the signature on that tag. It then checks
every commit between the tag and `HEAD` against the public keys in
`.gpg_authorized_keys`, read from the tagged commit. When every commit is
signed by a trusted key, the tag is signed again and moved to `HEAD`.

All work is done by running the `git` and `gpg` executables.

## Requirements

- `git` and `gpg` available on `PATH`
- `user.name` and `user.email` set in the repository's local git config
  (`git config --local`), because the tool signs the tag it writes
- a secret key in the GnuPG keyring that can sign that tag

## Installation

```
pip install .
```

## Usage

First commit a `.gpg_authorized_keys` file that holds the ASCII-armoured
public keys you trust. Then create the reference tag on the `HEAD` commit:

```
git-sign-verifier init --directory path/to/repo --gpgme-home-dir gpg
```

`init` fails if the `SIGN_VERIFIED` tag already exists or if the `HEAD`
commit has no `.gpg_authorized_keys` file.

`--gpgme-home-dir` (`-g`) is optional. It names a GnuPG home directory,
relative to the working tree. The value is stored in the local git config
under `git-sign-verifier.gpgmehomedir`, so later runs use it without being
told again. Without it, gpg's default home is used.

After new commits arrive, verify them:

```
git-sign-verifier verify --directory path/to/repo
```

`--directory` (`-d`) defaults to the current directory for both commands and
must be the top of a working tree. `git-sign-verifier --version` prints the
version.

## Exit status

- `0`: every commit is signed by a trusted key and the tag has moved to
  `HEAD` (or, for `init`, the tag was created)
- `127`: a commit or the reference tag is unsigned, signed by an unknown,
  revoked or expired key, or signed with SSH
- `1`: the check could not run, for example because the repository is
  missing, the tag does not exist, `.gpg_authorized_keys` is absent, or the
  tag could not be signed

## Use from Python

```python
from gitsignverifier.init import init_command
from gitsignverifier.verify import verify_command

init_command("path/to/repo", None)
trusted = verify_command("path/to/repo")
```

`verify_command` returns `True` when every commit is trusted and `False` when
a signature is not acceptable. Both functions raise
`gitsignverifier.repository.GitError` when the work cannot be carried out.
`gitsignverifier.cli.main(argv)` runs the command line and returns the exit
status.

## What it does not do

- SSH commit signatures are reported as unsupported and fail verification.
- Bare repositories cannot be opened; a working tree is required.