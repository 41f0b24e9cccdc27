"""
Build orchestration.

Runs one complete build of a project directory:

1. Load the root descriptor
2. Resolve dependencies (fetching what has no local path)
3. Compute the build order
4. For each target (debug, then release):
   - compute the build info of every project in build order
   - create the output folder tree
   - compile every project's sources and link every application

Fatal errors (descriptor, dependency, missing source and output folder
errors) end the run with a failed BuildResult. Compiler and linker failures
are recorded per project: a failed compile doesn't stop the remaining
sources of that project, but the project is not linked.
"""

import logging
import shutil
import time
from pathlib import Path
from typing import Optional

from ..errors import ExternalToolError, FactoryError
from ..output import TimedLogger, log, log_detail, log_error, log_phase, log_success, set_verbose
from ..packages.fetcher import SourceFetcher
from ..paths import get_build_root
from ..project.descriptor import ProjectDescriptor, ProjectRegistry
from ..project.graph import topological_sort
from ..project.parser import load_project_file
from ..project.resolver import DependencyResolver
from ..subprocess_utils import CommandRunner, run_command
from .build_context import BuildParams, BuildResult, ProjectBuildInfo, ProjectBuildResult
from .build_profiles import BuildTarget, format_profile_banner
from .compiler import GccCompiler, get_compiler
from .folder_tree import FolderTree, materialize
from .headers import collect_dependency_closure, collect_headers
from .source_list import ObjectFileList, build_source_list, expand_object_entries

logger = logging.getLogger(__name__)


class BuildOrchestrator:
    """
    Orchestrates a full cfactory build.

    Every external command goes through the injected runner, so tests can
    observe compile and link commands without a C toolchain.
    """

    def __init__(
        self,
        runner: CommandRunner = run_command,
        fetcher: Optional[SourceFetcher] = None,
        cc: Optional[str] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            runner: Executes a command in a directory and returns its exit code
            fetcher: Fetches remote dependencies (defaults to a SourceFetcher using runner)
            cc: Compiler executable (defaults to CFACTORY_CC or "gcc")
        """
        self.runner = runner
        self.fetcher = fetcher if fetcher is not None else SourceFetcher(runner=runner)
        self.cc = cc

    def build(self, params: BuildParams) -> BuildResult:
        """Execute the complete build.

        Args:
            params: What to build

        Returns:
            BuildResult; success is False on a fatal error or any compile/link failure
        """
        start_time = time.time()
        if params.verbose:
            set_verbose(True)
        total_phases = 3 + len(params.targets)
        result = BuildResult(success=False, message="")

        try:
            with TimedLogger("Loading project descriptor", phase=(1, total_phases)):
                registry = ProjectRegistry()
                root = load_project_file(params.descriptor_path, registry, display_name=params.descriptor_file)

            with TimedLogger("Resolving dependencies", phase=(2, total_phases)) as timed:
                resolver = DependencyResolver(registry, params.project_dir, params.ext_root, self.fetcher)
                resolved = resolver.resolve_all(root)
                timed.detail(f"{len(registry)} project(s), {len(resolved)} resolved from descriptors")

            with TimedLogger("Computing build order", phase=(3, total_phases)) as timed:
                order = topological_sort(root)
                result.build_order = [p.name for p in order]
                timed.detail(" -> ".join(result.build_order))

            build_root = params.build_root if params.build_root is not None else get_build_root()
            for index, target in enumerate(params.targets, start=4):
                log_phase(index, total_phases, f"Building {target}...")
                result.projects.extend(self._build_target(params.project_dir, build_root, target, order))

        except FactoryError as e:
            log_error(str(e))
            result.message = str(e)
            result.build_time = time.time() - start_time
            return result

        result.build_time = time.time() - start_time
        failures = [r for r in result.projects if not r.success]
        if failures:
            names = sorted({f"{r.project_name} ({r.target})" for r in failures})
            result.message = f"Build failed for {', '.join(names)}"
            log_error(result.message)
        else:
            result.success = True
            result.message = f"Built {len(order)} project(s) in {result.build_time:.2f}s"
            log_success(result.message)
        return result

    def _build_target(
        self,
        project_dir: Path,
        build_root: Path,
        target: BuildTarget,
        order: list[ProjectDescriptor],
    ) -> list[ProjectBuildResult]:
        """Compile and link every project for one target.

        Build info is computed for all projects before the first compile,
        so a missing source aborts the target without running the compiler.
        """
        compiler = get_compiler(target, cc=self.cc)
        log_detail(format_profile_banner(target, compiler.cc), verbose_only=True)

        target_dir = build_root / target.value
        object_files = ObjectFileList()
        folder_tree = FolderTree()
        infos = [self._compute_build_info(p, object_files, folder_tree, project_dir) for p in order]

        materialize(project_dir / target_dir, folder_tree)

        results = []
        for info in infos:
            project_result = ProjectBuildResult(info.project.name, target)
            self._compile_project(info, compiler, project_dir, target_dir, project_result)
            if info.project.is_application:
                if project_result.failed:
                    log_detail(f"Skipping link of {info.project.name}: compilation failed")
                else:
                    self._link_project(info, compiler, object_files, project_dir, target_dir, project_result)
            results.append(project_result)
        return results

    @staticmethod
    def _compute_build_info(
        project: ProjectDescriptor,
        object_files: ObjectFileList,
        folder_tree: FolderTree,
        project_dir: Path,
    ) -> ProjectBuildInfo:
        sources = build_source_list(project, object_files, folder_tree, project_dir)
        headers, stdlib_mask = collect_headers(project)
        return ProjectBuildInfo(project, sources, headers, stdlib_mask)

    def _compile_project(
        self,
        info: ProjectBuildInfo,
        compiler: GccCompiler,
        project_dir: Path,
        target_dir: Path,
        project_result: ProjectBuildResult,
    ) -> None:
        include_args = compiler.include_args(info.headers)
        if info.headers:
            logger.debug("%s includes: %s", info.project.name, compiler.render_include_flags(info.headers))

        for source in info.sources:
            object_file = (target_dir / source.object_path).as_posix()
            cmd = compiler.compile_command(source.compile_path, include_args, object_file)
            returncode = self.runner(cmd, project_dir)
            if returncode == 0:
                project_result.compiled.append(source.compile_path)
                continue
            error = ExternalToolError("Compiler", cmd, returncode, info.project.name, source.compile_path)
            log_error(str(error))
            project_result.failed.append(error)

    def _link_project(
        self,
        info: ProjectBuildInfo,
        compiler: GccCompiler,
        object_files: ObjectFileList,
        project_dir: Path,
        target_dir: Path,
        project_result: ProjectBuildResult,
    ) -> None:
        project = info.project
        entries = object_files.for_projects(collect_dependency_closure(project))
        objects = expand_object_entries(entries, project_dir, target_dir)
        executable = (target_dir / project.fixed_name).as_posix()
        cmd = compiler.link_command(objects, info.stdlib_mask, executable)

        returncode = self.runner(cmd, project_dir)
        if returncode != 0:
            project_result.link_error = ExternalToolError("Linker", cmd, returncode, project.name)
            log_error(str(project_result.link_error))
            return

        project_result.linked = True
        project_result.executable = target_dir / (project.fixed_name + compiler.exe_extension)
        log(f"Linked {project_result.executable.as_posix()}")


def clean_build_root(project_dir: Path, build_root: Optional[Path] = None) -> bool:
    """Remove the build root of a project directory.

    Returns:
        True if something was removed, False if there was nothing to clean
    """
    root = project_dir / (build_root if build_root is not None else get_build_root())
    if not root.exists():
        return False
    shutil.rmtree(root)
    log_detail(f"Removed {root}")
    return True
