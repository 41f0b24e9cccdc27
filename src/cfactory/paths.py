"""
Path and tool configuration for cfactory.

All locations are relative to the project directory the build runs in.
Each default can be overridden through an environment variable, which is
handy for CI and for keeping fetched dependencies outside the source tree.

Environment:
- CFACTORY_BUILD_DIR: build root (default: build)
- CFACTORY_EXT_DIR: scratch root for fetched dependencies (default: ext)
- CFACTORY_CC: C compiler executable (default: gcc)
- CFACTORY_GIT: git executable (default: git)
"""

import os
from pathlib import Path

# Name of the project descriptor file, both at the root and inside fetched dependencies
DESCRIPTOR_FILE_NAME = "factory.json"

DEFAULT_BUILD_DIR = "build"
DEFAULT_EXT_DIR = "ext"
DEFAULT_CC = "gcc"
DEFAULT_GIT = "git"


def get_build_root() -> Path:
    """Get the build root directory, respecting CFACTORY_BUILD_DIR."""
    return Path(os.environ.get("CFACTORY_BUILD_DIR") or DEFAULT_BUILD_DIR)


def get_ext_root() -> Path:
    """Get the scratch directory for fetched dependencies, respecting CFACTORY_EXT_DIR."""
    return Path(os.environ.get("CFACTORY_EXT_DIR") or DEFAULT_EXT_DIR)


def get_c_compiler() -> str:
    """Get the C compiler executable, respecting CFACTORY_CC."""
    return os.environ.get("CFACTORY_CC") or DEFAULT_CC


def get_git_executable() -> str:
    """Get the git executable, respecting CFACTORY_GIT."""
    return os.environ.get("CFACTORY_GIT") or DEFAULT_GIT
