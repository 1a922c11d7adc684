"""Command line entry point."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from gitsignverifier.config import EXIT_INVALID_SIGNATURE
from gitsignverifier.init import init_command
from gitsignverifier.repository import GitError
from gitsignverifier.verify import verify_command

_VERSION = "0.1.0"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-sign-verifier",
        description="Verify git commits are signed by trusted keys",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {_VERSION}")
    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser(
        "init",
        help="Create the reference tag on the last commit of the current branch.",
    )
    init.add_argument("-d", "--directory", default=".", help="Path of repository")
    init.add_argument(
        "-g",
        "--gpgme-home-dir",
        default=None,
        help="GnuPG home dir (relative path to workdir), in which trusted "
        "public keys are stored (in pubring.kbx file).",
    )

    verify = commands.add_parser(
        "verify",
        help="Verify the commits since last tags are signed with authenticated "
        "signing keys.",
    )
    verify.add_argument("-d", "--directory", default=".", help="Path of repository")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the process exit status."""
    args = _build_parser().parse_args(argv)

    if args.command == "init":
        try:
            init_command(args.directory, args.gpgme_home_dir)
        except GitError as exc:
            print(f"Erreur lors de l'initialisation: {exc}", file=sys.stderr)
            return 1
        return 0

    try:
        valid = verify_command(args.directory)
    except GitError as exc:
        print(f"Erreur lors de la vérification: {exc}", file=sys.stderr)
        return 1
    return 0 if valid else EXIT_INVALID_SIGNATURE


if __name__ == "__main__":
    sys.exit(main())