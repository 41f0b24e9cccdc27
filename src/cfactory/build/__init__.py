"""Compilation and linking for cfactory.

This module turns a resolved project graph into object files and
executables: build targets and their flags, gcc command rendering, source
enumeration, output folders, and the orchestrator that ties them together.
"""

from .build_context import BuildParams, BuildResult, ProjectBuildInfo, ProjectBuildResult
from .build_profiles import DEFAULT_TARGETS, BuildTarget, ProfileFlags, get_profile
from .compiler import GccCompiler, get_compiler
from .folder_tree import FolderTree, materialize
from .headers import collect_dependency_closure, collect_headers
from .orchestrator import BuildOrchestrator, clean_build_root
from .source_list import ObjectFileList, SourceDescriptor, SourceList, build_source_list

__all__ = [
    "BuildOrchestrator",
    "BuildParams",
    "BuildResult",
    "BuildTarget",
    "DEFAULT_TARGETS",
    "FolderTree",
    "GccCompiler",
    "ObjectFileList",
    "ProfileFlags",
    "ProjectBuildInfo",
    "ProjectBuildResult",
    "SourceDescriptor",
    "SourceList",
    "build_source_list",
    "clean_build_root",
    "collect_dependency_closure",
    "collect_headers",
    "get_compiler",
    "get_profile",
    "materialize",
]
