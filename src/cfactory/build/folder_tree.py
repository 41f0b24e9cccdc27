"""Output directory tree.

Object files land in nested directories under ``<build-root>/<target>``
that mirror each project's source layout. Rather than creating directories
one compile at a time, the source enumerator records every directory it
needs in a FolderTree, and the whole tree is created in one pass before the
first compiler invocation.
"""

import logging
from pathlib import Path
from typing import Iterator

from ..errors import BuildFolderError

logger = logging.getLogger(__name__)


class FolderTree:
    """A directory node: maps each child segment to its own FolderTree."""

    def __init__(self) -> None:
        self.children: dict[str, "FolderTree"] = {}

    def ensure_subtree(self, path: str) -> "FolderTree":
        """Insert every segment of path below this node if absent.

        Empty and ``.`` segments are ignored, so ``ensure_subtree("")``
        returns this node.

        Args:
            path: ``/``-separated relative path

        Returns:
            The node of the deepest segment
        """
        node = self
        for segment in path.replace("\\", "/").split("/"):
            if not segment or segment == ".":
                continue
            child = node.children.get(segment)
            if child is None:
                child = FolderTree()
                node.children[segment] = child
            node = child
        return node

    def iter_paths(self, prefix: str = "") -> Iterator[str]:
        """Yield the relative path of every node below this one, parents first."""
        for segment, child in self.children.items():
            path = f"{prefix}/{segment}" if prefix else segment
            yield path
            yield from child.iter_paths(path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FolderTree):
            return NotImplemented
        return self.children == other.children

    def __repr__(self) -> str:
        return f"FolderTree({sorted(self.iter_paths())})"


def materialize(root_dir: Path, tree: FolderTree) -> None:
    """Create root_dir (with any missing parents) and every directory of tree below it.

    Stops at the first directory that can't be created; directories made
    before that point are left in place.

    Raises:
        BuildFolderError: If a directory can't be created
    """
    if not root_dir.is_dir():
        try:
            root_dir.mkdir(parents=True)
        except OSError as e:
            raise BuildFolderError(f"Couldn't create folder '{root_dir}': {e}") from e
        logger.debug("Created %s", root_dir)
    for segment, child in tree.children.items():
        materialize(root_dir / segment, child)
