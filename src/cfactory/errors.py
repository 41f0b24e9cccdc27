"""Error taxonomy for cfactory.

Every failure the build can report derives from FactoryError, so callers
(the orchestrator and the CLI) can turn any of them into a single
diagnostic line.

Hierarchy:
    FactoryError
    ├── FormatError        malformed or missing descriptor data
    ├── DependencyError    a dependency cannot be resolved
    ├── SourceError        a declared source file is missing
    ├── BuildFolderError   an output directory cannot be created
    └── ExternalToolError  a fetch/compile/link process failed
"""

from typing import Optional, Sequence


class FactoryError(Exception):
    """Base class for all cfactory errors."""

    pass


class FormatError(FactoryError):
    """Raised when a project descriptor is malformed.

    Attributes:
        file_name: Descriptor file the error was found in (may be empty)
    """

    def __init__(self, message: str, file_name: str = ""):
        self.file_name = file_name
        if file_name:
            message = f"'{file_name}', {message}"
        super().__init__(message)


class DependencyError(FactoryError):
    """Raised when a project or one of its dependencies cannot be resolved."""

    def __init__(self, message: str, project_name: str = ""):
        self.project_name = project_name
        super().__init__(message)


class SourceError(FactoryError):
    """Raised when a non-wildcard source file does not exist."""

    def __init__(self, message: str, file_path: str = ""):
        self.file_path = file_path
        super().__init__(message)


class BuildFolderError(FactoryError):
    """Raised when an output directory cannot be created."""

    pass


class ExternalToolError(FactoryError):
    """A spawned tool (git, compiler, linker) exited with a non-zero code.

    Compile and link failures are recorded rather than raised, so this
    carries enough context to be reported later.
    """

    def __init__(
        self,
        tool: str,
        command: Sequence[str],
        returncode: int,
        project_name: str = "",
        file_path: Optional[str] = None,
    ):
        self.tool = tool
        self.command = list(command)
        self.returncode = returncode
        self.project_name = project_name
        self.file_path = file_path
        subject = file_path or project_name
        super().__init__(f"{tool} failed for '{subject}' (exit code {returncode})")
