"""GCC command rendering.

The compiler abstraction renders command lines and nothing else; the
orchestrator decides when to run them and what a failure means.

Command shapes:
    compile: gcc <source> -c <target flags> -I<dir>... -o <object>
    link:    gcc <objects...> -l<lib>... -o <executable><exe-extension>

Standard libraries requested through a project's stdlib mask are translated
into ``-l`` flags through a per-host table; a library with no mapping on the
current host (sockets outside Windows) contributes no flag.
"""

import sys
from typing import Optional, Sequence

from ..paths import get_c_compiler
from ..project.stdlib_names import StandardLibrary, iter_mask
from .build_profiles import BuildTarget, ProfileFlags, get_profile

OBJECT_EXTENSION = ".o"


def get_exe_extension() -> str:
    """Executable file extension of the current host."""
    return ".exe" if sys.platform == "win32" else ""


def get_stdlib_link_names() -> dict[StandardLibrary, Optional[str]]:
    """Linker library name for each standard library on the current host."""
    return {
        StandardLibrary.THREADS: "pthread",
        StandardLibrary.MATH: "m",
        StandardLibrary.SOCKETS: "ws2_32" if sys.platform == "win32" else None,
    }


class GccCompiler:
    """Renders gcc compile and link commands for one build target.

    Args:
        profile: Flags of the build target
        cc: Compiler executable (defaults to CFACTORY_CC or "gcc")
    """

    def __init__(self, profile: ProfileFlags, cc: Optional[str] = None):
        self.profile = profile
        self.cc = cc or get_c_compiler()

    @property
    def exe_extension(self) -> str:
        return get_exe_extension()

    def include_args(self, header_dirs: Sequence[str]) -> list[str]:
        return [f"-I{d}" for d in header_dirs]

    def render_include_flags(self, header_dirs: Sequence[str]) -> str:
        """Render ``-I<dir>`` tokens, space separated; empty for no directories."""
        return " ".join(self.include_args(header_dirs))

    def compile_command(self, source: str, include_args: Sequence[str], object_file: str) -> list[str]:
        """Build the command that compiles one source file into one object file.

        Args:
            source: Source file path
            include_args: Output of include_args()
            object_file: Object file path

        Returns:
            Command and arguments
        """
        return [self.cc, source, "-c", *self.profile.compile_flags, *include_args, "-o", object_file]

    def library_flags(self, stdlib_mask: int) -> list[str]:
        """Translate a stdlib mask into ``-l`` flags, in table order."""
        names = get_stdlib_link_names()
        flags = []
        for library in iter_mask(stdlib_mask):
            name = names.get(library)
            if name:
                flags.append(f"-l{name}")
        return flags

    def link_command(self, object_files: Sequence[str], stdlib_mask: int, executable: str) -> list[str]:
        """Build the command that links an executable.

        Args:
            object_files: Object files, in link order
            stdlib_mask: Bitmask of StandardLibrary entries
            executable: Output path without the host executable extension

        Returns:
            Command and arguments
        """
        return [self.cc, *object_files, *self.library_flags(stdlib_mask), "-o", executable + self.exe_extension]


def get_compiler(target: BuildTarget | str, cc: Optional[str] = None) -> GccCompiler:
    """Select the compiler for a target; unrecognized names get the release profile."""
    if isinstance(target, str):
        target = BuildTarget.from_name(target)
    return GccCompiler(get_profile(target), cc=cc)
