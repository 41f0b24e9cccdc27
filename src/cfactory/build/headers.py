"""Header and standard library aggregation.

A project compiles against its own include directories and those of every
project it depends on, directly or not, and links against the union of
their standard libraries. The walks below visit each shared dependency once,
so a diamond contributes its headers a single time.
"""

from ..project.descriptor import ProjectDescriptor, join_path


def collect_dependency_closure(project: ProjectDescriptor) -> list[ProjectDescriptor]:
    """Return project and everything it depends on, in pre-order, each once."""
    visited: set[int] = set()
    closure: list[ProjectDescriptor] = []

    def visit(node: ProjectDescriptor) -> None:
        if id(node) in visited:
            return
        visited.add(id(node))
        closure.append(node)
        for dependency in node.depends:
            visit(dependency)

    visit(project)
    return closure


def collect_headers(project: ProjectDescriptor) -> tuple[list[str], int]:
    """Collect include directories and the stdlib mask of a project's closure.

    Header directories are prefixed with their project's path (unless the
    path is ``.``) and kept in discovery order.

    Returns:
        Tuple of (header directories, OR of every stdlib mask)
    """
    headers: list[str] = []
    mask = 0
    for node in collect_dependency_closure(project):
        path = node.path or "."
        headers.extend(join_path(path, h) for h in node.headers)
        mask |= node.stdlib_mask
    return headers, mask
