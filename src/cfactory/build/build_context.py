"""Build Context - parameters, per-project build info and results.

This module defines:
- BuildParams: What to build, as given by the CLI
- ProjectBuildInfo: Per-project, per-target compile inputs computed before the first compile
- ProjectBuildResult: What happened to one project in one target
- BuildResult: Outcome of a whole run

Design:
    BuildParams flows from the CLI into BuildOrchestrator.build(). For each
    target the orchestrator computes one ProjectBuildInfo per project (in
    build order) before running any compiler, so that a missing source file
    fails the run up front. Compile and link outcomes are collected in
    ProjectBuildResult records rather than raised.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..errors import ExternalToolError
from ..paths import DESCRIPTOR_FILE_NAME
from ..project.descriptor import ProjectDescriptor
from .build_profiles import DEFAULT_TARGETS, BuildTarget
from .source_list import SourceList


@dataclass(frozen=True)
class BuildParams:
    """Build parameters from the CLI.

    Attributes:
        project_dir: Directory containing the root descriptor; every command runs here
        descriptor_file: Root descriptor file name, relative to project_dir
        targets: Targets to build, in order
        build_root: Build root relative to project_dir (None: CFACTORY_BUILD_DIR or "build")
        ext_root: Scratch root for fetched dependencies (None: CFACTORY_EXT_DIR or "ext")
        verbose: Whether to enable verbose output
    """

    project_dir: Path
    descriptor_file: str = DESCRIPTOR_FILE_NAME
    targets: tuple[BuildTarget, ...] = DEFAULT_TARGETS
    build_root: Optional[Path] = None
    ext_root: Optional[Path] = None
    verbose: bool = False

    @property
    def descriptor_path(self) -> Path:
        return self.project_dir / self.descriptor_file


@dataclass
class ProjectBuildInfo:
    """Compile inputs of one project for one target.

    Attributes:
        project: The project
        sources: Compile jobs
        headers: Include directories of the project and its dependencies
        stdlib_mask: OR of the stdlib masks of the project and its dependencies
    """

    project: ProjectDescriptor
    sources: SourceList
    headers: list[str]
    stdlib_mask: int


@dataclass
class ProjectBuildResult:
    """What happened to one project in one target.

    Attributes:
        project_name: Project display name
        target: Build target
        compiled: Compile paths that compiled successfully
        failed: Compile failures, one per failed source
        linked: True once the executable has been linked
        link_error: Link failure, if linking ran and failed
        executable: Path of the linked executable
    """

    project_name: str
    target: BuildTarget
    compiled: list[str] = field(default_factory=list)
    failed: list[ExternalToolError] = field(default_factory=list)
    linked: bool = False
    link_error: Optional[ExternalToolError] = None
    executable: Optional[Path] = None

    @property
    def success(self) -> bool:
        return not self.failed and self.link_error is None


@dataclass
class BuildResult:
    """Outcome of a whole run.

    Attributes:
        success: True when every project of every target built
        message: One-line summary or the fatal diagnostic
        build_time: Elapsed seconds
        projects: Per-target, per-project results in build order
        build_order: Project names, dependencies first
    """

    success: bool
    message: str
    build_time: float = 0.0
    projects: list[ProjectBuildResult] = field(default_factory=list)
    build_order: list[str] = field(default_factory=list)

    @property
    def executables(self) -> list[Path]:
        return [r.executable for r in self.projects if r.executable is not None]
