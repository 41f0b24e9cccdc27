"""Build ordering over the project dependency graph.

The graph is a DAG of shared ProjectDescriptor instances rooted at the
top-level project. topological_sort() returns every reachable project once,
dependencies before dependents, so that compiling and linking in list order
always finds a project's inputs already built.
"""

from ..errors import DependencyError
from .descriptor import ProjectDescriptor


class CyclicDependencyError(DependencyError):
    """Raised when the dependency graph contains a cycle."""

    pass


def topological_sort(root: ProjectDescriptor) -> list[ProjectDescriptor]:
    """Post-order DFS over ``depends`` with white/gray/black colouring.

    A project is appended only after all of its dependencies have been
    appended; a project reached again while it is still on the DFS path
    (gray) closes a cycle.

    Args:
        root: Top-level project

    Returns:
        Every reachable project exactly once, dependencies first, root last

    Raises:
        CyclicDependencyError: If a project depends on itself, directly or transitively
    """
    WHITE, GRAY, BLACK = 0, 1, 2
    color: dict[int, int] = {}
    order: list[ProjectDescriptor] = []
    path: list[ProjectDescriptor] = []

    def dfs(project: ProjectDescriptor) -> None:
        color[id(project)] = GRAY
        path.append(project)
        for dependency in project.depends:
            state = color.get(id(dependency), WHITE)
            if state == GRAY:
                cycle_start = next(i for i, p in enumerate(path) if p is dependency)
                cycle = [p.name for p in path[cycle_start:]] + [dependency.name]
                raise CyclicDependencyError(f"Cyclic dependency detected: {' -> '.join(cycle)}", dependency.name)
            if state == WHITE:
                dfs(dependency)
        path.pop()
        color[id(project)] = BLACK
        order.append(project)

    dfs(root)
    return order
