"""Build Target Configuration.

Every run builds two targets, ``debug`` and ``release``. Each target is a
BuildTarget enum member mapped to a frozen ProfileFlags record holding the
compile flags that target adds to every compiler invocation. The choice is
made once per target; nothing else in cfactory compares target names.

Target layout:
    build/debug/...     objects and executables built with -g
    build/release/...   objects and executables built with -O3
"""

from dataclasses import dataclass
from enum import Enum


class BuildTarget(Enum):
    """Build target enum for type-safe profile selection."""

    DEBUG = "debug"
    RELEASE = "release"

    def __str__(self) -> str:
        """Return the string value for directory names and display."""
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "BuildTarget":
        """Look up a target by name; unknown names fall back to RELEASE."""
        try:
            return cls(name)
        except ValueError:
            return cls.RELEASE


@dataclass(frozen=True)
class ProfileFlags:
    """Flags a build target adds to compiler invocations.

    Attributes:
        name: Target identifier (matches BuildTarget enum value)
        description: Human-readable description
        compile_flags: Flags placed after ``-c`` in every compile command
    """

    name: str
    description: str
    compile_flags: tuple[str, ...]


PROFILES: dict[BuildTarget, ProfileFlags] = {
    BuildTarget.DEBUG: ProfileFlags(
        name="debug",
        description="Debug symbols, warnings as errors",
        compile_flags=("-g", "-Werror"),
    ),
    BuildTarget.RELEASE: ProfileFlags(
        name="release",
        description="Optimized build, warnings as errors",
        compile_flags=("-O3", "-Werror"),
    ),
}

# Targets built by every run, in build order
DEFAULT_TARGETS: tuple[BuildTarget, ...] = (BuildTarget.DEBUG, BuildTarget.RELEASE)


def get_profile(target: BuildTarget) -> ProfileFlags:
    return PROFILES[target]


def format_profile_banner(target: BuildTarget, compiler: str | None = None) -> str:
    """Format a target banner such as ``TARGET=debug COMPILER=gcc``."""
    parts = [f"TARGET={target.value}"]
    if compiler:
        parts.append(f"COMPILER={compiler}")
    return " ".join(parts)
