"""Dependency resolution.

After parsing, some descriptors are only references: a name and a list of
URLs. The resolver repeatedly picks the first unresolved descriptor in
pre-order, fetches its sources into ``<ext-root>/<fixed_name>`` when it has
no path, then reads the ``factory.json`` shipped with those sources and
adopts its sources, headers, dependencies and stdlib mask.

Adopted dependencies go through the shared registry, so the newly
discovered part of the graph is deduplicated against the existing one. The
loop ends when no unresolved descriptor is reachable from the root; each
pass resolves one descriptor for good or raises.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from ..errors import DependencyError, FormatError
from ..output import log, log_detail
from ..packages.fetcher import SourceFetcher
from ..paths import DESCRIPTOR_FILE_NAME, get_ext_root
from .descriptor import ProjectDescriptor, ProjectRegistry
from .parser import load_project_file

logger = logging.getLogger(__name__)


def find_first_unresolved(root: ProjectDescriptor) -> Optional[ProjectDescriptor]:
    """Return the first unresolved descriptor in pre-order, or None.

    Shared descriptors are visited once, so diamonds are walked in linear
    time and a cyclic graph does not recurse forever.
    """
    visited: set[int] = set()

    def visit(project: ProjectDescriptor) -> Optional[ProjectDescriptor]:
        if id(project) in visited:
            return None
        visited.add(id(project))
        if project.unresolved:
            return project
        for dependency in project.depends:
            found = visit(dependency)
            if found is not None:
                return found
        return None

    return visit(root)


class DependencyResolver:
    """Fills in unresolved descriptors by fetching and merging them.

    Args:
        registry: Registry shared by the whole run
        project_dir: Directory the build runs in; relative paths resolve against it
        ext_root: Scratch root for fetched sources (defaults to CFACTORY_EXT_DIR or "ext")
        fetcher: Fetches one URL into a directory
    """

    def __init__(
        self,
        registry: ProjectRegistry,
        project_dir: Path,
        ext_root: Optional[Path] = None,
        fetcher: Optional[SourceFetcher] = None,
    ):
        self.registry = registry
        self.project_dir = project_dir
        self.ext_root = ext_root if ext_root is not None else get_ext_root()
        self.fetcher = fetcher if fetcher is not None else SourceFetcher()

    def resolve_all(self, root: ProjectDescriptor) -> list[ProjectDescriptor]:
        """Resolve every descriptor reachable from root.

        Returns:
            The descriptors that were resolved, in resolution order

        Raises:
            DependencyError: If any descriptor cannot be resolved
        """
        resolved: list[ProjectDescriptor] = []
        project = find_first_unresolved(root)
        while project is not None:
            self.resolve(project)
            resolved.append(project)
            project = find_first_unresolved(root)
        return resolved

    def resolve(self, project: ProjectDescriptor) -> None:
        """Resolve a single descriptor.

        Raises:
            DependencyError: If the project can't be fetched, has no usable
                descriptor, or is still incomplete afterwards
        """
        if not project.unresolved:
            return

        log(f"Resolving project {project.name}...")
        path = project.path if project.path is not None else self._fetch(project)
        project.path = path

        if not project.headers:
            self._merge_nested_descriptor(project, path)

        if not project.sources and not (project.is_library and project.headers):
            raise DependencyError(
                f"The project '{project.fixed_name}' contains unresolved dependencies",
                project.name,
            )

        project.unresolved = False
        log_detail(f"{project.name} -> {project.path}", verbose_only=True)

    def _fetch(self, project: ProjectDescriptor) -> str:
        """Make the project's sources available under the scratch root.

        Returns:
            The project path, relative to the project directory when the
            scratch root is relative
        """
        if not project.url:
            raise DependencyError(
                f"The project '{project.fixed_name}' contains no URL where to download it",
                project.name,
            )

        ext_dir = self.project_dir / self.ext_root
        folder = ext_dir / project.fixed_name
        relative_path = (self.ext_root / project.fixed_name).as_posix()

        if not self._needs_fetch(folder):
            logger.debug("Reusing fetched sources of %s in %s", project.name, folder)
            return relative_path

        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DependencyError(f"Couldn't create folder '{folder}': {e}", project.name) from e

        for url in project.url:
            if self.fetcher.fetch(url, folder):
                return relative_path
            logger.debug("Fetching %s from %s failed", project.name, url)
            self._reset_folder(folder)

        raise DependencyError(
            f"Couldn't download sources of the project '{project.fixed_name}': no working source location",
            project.name,
        )

    @staticmethod
    def _needs_fetch(folder: Path) -> bool:
        if not folder.is_dir():
            return True
        if not any(folder.iterdir()):
            return True
        return not (folder / DESCRIPTOR_FILE_NAME).is_file()

    @staticmethod
    def _reset_folder(folder: Path) -> None:
        """Clear what a failed attempt left behind so the next URL starts clean."""
        if folder.is_dir() and any(folder.iterdir()):
            shutil.rmtree(folder)
            folder.mkdir(parents=True)

    def _merge_nested_descriptor(self, project: ProjectDescriptor, path: str) -> None:
        descriptor_path = self.project_dir / path / DESCRIPTOR_FILE_NAME
        display_name = f"{path}/{DESCRIPTOR_FILE_NAME}"
        try:
            temporary = load_project_file(descriptor_path, self.registry, is_temporary=True, display_name=display_name)
        except FormatError as e:
            raise DependencyError(f"The project '{project.fixed_name}' has no usable descriptor: {e}", project.name) from e

        project.adopt(temporary)
        logger.debug(
            "Adopted %d sources, %d headers, %d dependencies for %s",
            len(project.sources),
            len(project.headers),
            len(project.depends),
            project.name,
        )
