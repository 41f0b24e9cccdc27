"""
Project graph for cfactory.

This package covers everything between a ``factory.json`` file and a fully
resolved, ordered dependency graph:
- Descriptor model and name registry
- Descriptor parsing
- Dependency resolution (fetch + merge)
- Topological build order
"""

from .descriptor import (
    ProjectDescriptor,
    ProjectRegistry,
    ProjectType,
    SourceEntry,
    fixed_name,
)
from .graph import CyclicDependencyError, topological_sort
from .parser import DescriptorParser, load_project_file, parse_project_descriptor, read_descriptor_file
from .resolver import DependencyResolver, find_first_unresolved
from .stdlib_names import StandardLibrary, parse_stdlib_name

__all__ = [
    "CyclicDependencyError",
    "DependencyResolver",
    "DescriptorParser",
    "ProjectDescriptor",
    "ProjectRegistry",
    "ProjectType",
    "SourceEntry",
    "StandardLibrary",
    "find_first_unresolved",
    "fixed_name",
    "load_project_file",
    "parse_project_descriptor",
    "parse_stdlib_name",
    "read_descriptor_file",
    "topological_sort",
]
