"""Tests for build ordering and cycle detection."""

import pytest

from cfactory.errors import DependencyError
from cfactory.project.descriptor import ProjectDescriptor, ProjectType
from cfactory.project.graph import CyclicDependencyError, topological_sort


def make(name, *depends, type=ProjectType.LIBRARY):
    return ProjectDescriptor(name=name, type=type, path=name, depends=list(depends))


@pytest.fixture
def diamond():
    """A -> B, A -> C, B -> D, C -> D."""
    d = make("D")
    b = make("B", d)
    c = make("C", d)
    a = make("A", b, c, type=ProjectType.APPLICATION)
    return a, b, c, d


class TestTopologicalSort:
    def test_single_project(self):
        root = make("app")
        assert topological_sort(root) == [root]

    def test_dependencies_first(self, diamond):
        a, b, c, d = diamond
        assert topological_sort(a) == [d, b, c, a]

    def test_every_project_once(self, diamond):
        order = topological_sort(diamond[0])
        assert len(order) == len({id(p) for p in order}) == 4

    def test_every_edge_respected(self, diamond):
        root = diamond[0]
        position = {id(p): i for i, p in enumerate(topological_sort(root))}
        for dependent in topological_sort(root):
            for dependency in dependent.depends:
                assert position[id(dependency)] < position[id(dependent)]

    def test_root_last(self, diamond):
        assert topological_sort(diamond[0])[-1] is diamond[0]

    def test_cycle_detected(self):
        a = make("a", type=ProjectType.APPLICATION)
        b = make("b", a)
        a.depends.append(b)

        with pytest.raises(CyclicDependencyError, match="a -> b -> a"):
            topological_sort(a)

    def test_self_dependency(self):
        a = make("a")
        a.depends.append(a)
        with pytest.raises(DependencyError, match="Cyclic dependency detected: a -> a"):
            topological_sort(a)
