"""Verify that git commits are signed by trusted GPG keys, using a signed reference tag."""

__version__ = "0.1.0"