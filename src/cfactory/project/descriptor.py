"""Project descriptor model.

Defines the records that make up the project graph:
- ProjectType: application or library
- SourceEntry: one (subdirectory, filename-or-pattern) item of ``"sources"``
- ProjectDescriptor: one buildable project, shared by every parent that depends on it
- ProjectRegistry: the name -> descriptor store that guarantees one instance per name
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def fixed_name(name: str) -> str:
    """Transliterate a project name into a filesystem-safe identifier.

    Every character outside ``[A-Za-z0-9_-]`` becomes ``_``, one for one,
    so the result has the same length as the input.

    Examples:
        >>> fixed_name("libfoo")
        'libfoo'
        >>> fixed_name("my lib/2.0")
        'my_lib_2_0'
    """
    return _UNSAFE_CHARS.sub("_", name)


def normalize_separators(path: str) -> str:
    """Use forward slashes regardless of how the descriptor spelled the path."""
    return path.replace("\\", "/")


def join_path(*parts: str) -> str:
    """Join path fragments with ``/``, dropping empty and ``.`` fragments."""
    kept = [p.rstrip("/") for p in parts if p and p != "."]
    return "/".join(kept) if kept else "."


class ProjectType(Enum):
    """Kind of artifact a project produces."""

    APPLICATION = "application"
    LIBRARY = "library"


@dataclass(frozen=True)
class SourceEntry:
    """One entry of a project's ``"sources"`` list.

    Attributes:
        subdirectory: Directory relative to the project path ("" for the project root)
        pattern: File name, possibly containing wildcards
    """

    subdirectory: str
    pattern: str

    @classmethod
    def from_string(cls, value: str) -> "SourceEntry":
        """Split ``"src/util/*.c"`` into ``("src/util", "*.c")``."""
        value = normalize_separators(value)
        subdirectory, _, pattern = value.rpartition("/")
        segments = [s for s in subdirectory.split("/") if s and s != "."]
        return cls(subdirectory="/".join(segments), pattern=pattern)

    @property
    def has_wildcard(self) -> bool:
        return any(c in self.pattern for c in "*?[")

    def __str__(self) -> str:
        return join_path(self.subdirectory, self.pattern)


@dataclass(eq=False)
class ProjectDescriptor:
    """A buildable project and its place in the dependency graph.

    Descriptors compare and hash by identity: the graph shares one instance
    per project name, and graph walks key their visited-sets on the instance.

    Attributes:
        name: Display name, unique across the graph
        fixed_name: Filesystem-safe form of name
        type: Application (linked into an executable) or library
        sources: Ordered source entries
        headers: Include directories relative to path
        depends: Ordered shared references to dependency descriptors
        path: Project location, None until resolved
        url: Ordered remote locations to fetch the project from
        stdlib_mask: Bitmask of requested StandardLibrary entries
        unresolved: True while path/sources/headers are still missing
        description: Optional free text
        author: Optional free text
    """

    name: str
    type: ProjectType
    fixed_name: str = ""
    sources: list[SourceEntry] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)
    depends: list["ProjectDescriptor"] = field(default_factory=list)
    path: Optional[str] = None
    url: list[str] = field(default_factory=list)
    stdlib_mask: int = 0
    unresolved: bool = False
    description: Optional[str] = None
    author: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.fixed_name:
            self.fixed_name = fixed_name(self.name)

    @property
    def is_application(self) -> bool:
        return self.type == ProjectType.APPLICATION

    @property
    def is_library(self) -> bool:
        return self.type == ProjectType.LIBRARY

    def adopt(self, donor: "ProjectDescriptor") -> None:
        """Take over the build data of a temporary descriptor.

        Used when a fetched dependency's own descriptor file fills in what
        the referencing descriptor left out. The donor is emptied so that
        the lists end up owned by exactly one descriptor.
        """
        self.sources, donor.sources = donor.sources, []
        self.headers, donor.headers = donor.headers, []
        self.depends, donor.depends = donor.depends, []
        self.stdlib_mask, donor.stdlib_mask = donor.stdlib_mask, 0

    def __repr__(self) -> str:
        state = "unresolved" if self.unresolved else "resolved"
        return f"ProjectDescriptor({self.name!r}, {self.type.value}, {state})"


class ProjectRegistry:
    """Name-keyed store of every non-temporary descriptor of a run.

    Write-once per name: registering a second descriptor under a name that
    is already present is a programming error.
    """

    def __init__(self) -> None:
        self._projects: dict[str, ProjectDescriptor] = {}

    def get(self, name: str) -> Optional[ProjectDescriptor]:
        return self._projects.get(name)

    def register(self, project: ProjectDescriptor) -> None:
        """Add a descriptor.

        Raises:
            ValueError: If a descriptor with the same name is already registered.
        """
        if project.name in self._projects:
            raise ValueError(f"Duplicate project name: {project.name}")
        self._projects[project.name] = project

    def __contains__(self, name: object) -> bool:
        return name in self._projects

    def __len__(self) -> int:
        return len(self._projects)

    def __iter__(self) -> Iterator[ProjectDescriptor]:
        return iter(self._projects.values())
