[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gitsignverifier"
version = "0.1.0"
description = "Verify git commits are signed by trusted keys"
requires-python = ">=3.10"
dependencies = []
keywords = ["git", "gpg", "signature", "verification", "commits", "security"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
git-sign-verifier = "gitsignverifier.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gitsignverifier"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
