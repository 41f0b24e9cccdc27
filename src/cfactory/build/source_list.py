"""Source enumeration.

Turns a resolved project's ``"sources"`` entries into concrete compile
jobs. Each job is a SourceDescriptor pairing the file handed to the compiler
with the object file it produces, relative to the target directory:

    compile path:  <project path>/<subdirectory>/<file>
    object path:   <fixed_name>/<subdirectory>/<stem>.o

While enumerating, the directories that will receive object files are
recorded in the target's FolderTree and the objects to link are appended to
the target's ObjectFileList. A wildcard entry contributes a single
``<fixed_name>/<subdirectory>/*.o`` pattern instead of one entry per file;
the pattern is expanded right before linking.
"""

import fnmatch
import glob
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from ..errors import SourceError
from ..project.descriptor import ProjectDescriptor, SourceEntry, join_path
from .compiler import OBJECT_EXTENSION
from .folder_tree import FolderTree

logger = logging.getLogger(__name__)


def object_file_name(file_name: str) -> str:
    """Map a source file name to its object file name.

    A ``.c`` extension (or a missing one) is replaced; any other name keeps
    its extension so that ``foo.c`` and ``foo.cpp`` can't collide.

    Examples:
        >>> object_file_name("main.c")
        'main.o'
        >>> object_file_name("foo.cpp")
        'foo.cpp.o'
    """
    stem, dot, extension = file_name.rpartition(".")
    if not dot:
        return file_name + OBJECT_EXTENSION
    if extension in ("c", ""):
        return stem + OBJECT_EXTENSION
    return file_name + OBJECT_EXTENSION


@dataclass(frozen=True)
class SourceDescriptor:
    """One compile job.

    Attributes:
        project: Project the source belongs to
        compile_path: Source file, relative to the project directory of the run
        object_path: Object file, relative to the target directory
    """

    project: ProjectDescriptor
    compile_path: str
    object_path: str


class SourceList:
    """Compile jobs of one project, keyed and ordered by compile path."""

    def __init__(self) -> None:
        self._sources: dict[str, SourceDescriptor] = {}

    def add(self, source: SourceDescriptor) -> bool:
        """Register a source; returns False if its compile path is already present."""
        if source.compile_path in self._sources:
            return False
        self._sources[source.compile_path] = source
        return True

    def __contains__(self, compile_path: object) -> bool:
        return compile_path in self._sources

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self) -> Iterator[SourceDescriptor]:
        for compile_path in sorted(self._sources):
            yield self._sources[compile_path]


@dataclass(frozen=True)
class ObjectEntry:
    """One link input: a concrete object path or a ``*.o`` pattern."""

    project: ProjectDescriptor
    path: str
    is_pattern: bool = False


class ObjectFileList:
    """Append-only list of link inputs for one build target."""

    def __init__(self) -> None:
        self.entries: list[ObjectEntry] = []

    def append(self, project: ProjectDescriptor, path: str, is_pattern: bool = False) -> None:
        self.entries.append(ObjectEntry(project, path, is_pattern))

    def for_projects(self, projects: Iterable[ProjectDescriptor]) -> list[ObjectEntry]:
        """Entries owned by any of the given projects, in append order."""
        wanted = {id(p) for p in projects}
        return [e for e in self.entries if id(e.project) in wanted]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ObjectEntry]:
        return iter(self.entries)


def expand_object_entries(entries: Iterable[ObjectEntry], base_dir: Path, target_dir: Path) -> list[str]:
    """Turn link entries into object file paths.

    Concrete entries are prefixed with target_dir. Patterns are globbed
    under ``base_dir / target_dir`` and their matches added in sorted order.
    A file reached both ways is listed once.

    Args:
        entries: Link entries, in link order
        base_dir: Directory commands run in
        target_dir: Target directory, relative to base_dir (or absolute)

    Returns:
        Object paths as handed to the linker
    """
    objects: list[str] = []
    seen: set[str] = set()

    def add(path: str) -> None:
        if path not in seen:
            seen.add(path)
            objects.append(path)

    search_root = base_dir / target_dir
    for entry in entries:
        if not entry.is_pattern:
            add((target_dir / entry.path).as_posix())
            continue
        matches = sorted(search_root.glob(entry.path))
        if not matches:
            logger.debug("No objects match %s under %s", entry.path, search_root)
        for match in matches:
            add((target_dir / match.relative_to(search_root)).as_posix())
    return objects


def _list_files(directory: Path) -> list[str]:
    if not directory.is_dir():
        return []
    return sorted(p.name for p in directory.iterdir() if p.is_file())


def build_source_list(
    project: ProjectDescriptor,
    object_files: ObjectFileList,
    folder_tree: FolderTree,
    base_dir: Path,
) -> SourceList:
    """Enumerate the compile jobs of a resolved project.

    Args:
        project: Project with a known path
        object_files: Target object list; receives this project's link entries
        folder_tree: Target folder tree; receives this project's object directories
        base_dir: Directory the project path is relative to

    Returns:
        The project's SourceList

    Raises:
        SourceError: If a file named without wildcards does not exist
    """
    if project.path is None:
        raise ValueError(f"Project '{project.name}' has no path")

    sources = SourceList()
    folder_tree.ensure_subtree(project.fixed_name)

    for entry in project.sources:
        object_dir = join_path(project.fixed_name, entry.subdirectory)
        if entry.has_wildcard:
            _add_wildcard_entry(project, entry, object_dir, sources, object_files, folder_tree, base_dir)
            continue

        compile_path = join_path(project.path, entry.subdirectory, entry.pattern)
        if not (base_dir / compile_path).is_file():
            raise SourceError(f"File '{compile_path}' not found", compile_path)
        object_path = join_path(object_dir, object_file_name(entry.pattern))
        if sources.add(SourceDescriptor(project, compile_path, object_path)):
            object_files.append(project, object_path)
        folder_tree.ensure_subtree(object_dir)

    logger.debug("%s: %d source(s)", project.name, len(sources))
    return sources


def _add_wildcard_entry(
    project: ProjectDescriptor,
    entry: SourceEntry,
    object_dir: str,
    sources: SourceList,
    object_files: ObjectFileList,
    folder_tree: FolderTree,
    base_dir: Path,
) -> None:
    source_dir = join_path(project.path or ".", entry.subdirectory)
    matches = [name for name in _list_files(base_dir / source_dir) if fnmatch.fnmatchcase(name, entry.pattern)]
    if not matches:
        logger.debug("%s: '%s' matched no files", project.name, entry)
        return

    for name in matches:
        sources.add(
            SourceDescriptor(
                project,
                join_path(source_dir, name),
                join_path(object_dir, object_file_name(name)),
            )
        )
    folder_tree.ensure_subtree(object_dir)
    # The directory part is literal; only the file name is a pattern.
    object_files.append(project, join_path(glob.escape(object_dir), "*" + OBJECT_EXTENSION), is_pattern=True)
