"""Pytest configuration and fixtures for cfactory tests.

This conftest addresses Python 3.13 compatibility issues with pytest's capture fixtures.
Python 3.13 changed how stdout/stderr are handled, causing "I/O operation on closed file"
errors during test teardown. This is a known issue: https://github.com/pytest-dev/pytest/issues/11439

It also provides the fakes shared by the build tests: a command runner that
records commands instead of spawning gcc/git, and a helper that writes
factory.json files.
"""

import io
import json
import sys
import warnings
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

import pytest

from cfactory import output

# Suppress ResourceWarnings from file cleanup in Python 3.13
if sys.version_info >= (3, 13):
    warnings.filterwarnings("ignore", category=ResourceWarning)


class FakeRunner:
    """Records commands instead of running them.

    A command succeeds unless one of its arguments is listed in fail_on.
    On success, the file named after ``-o`` is created (relative to cwd) so
    that later link steps can glob the objects a compile "produced".
    """

    def __init__(self) -> None:
        self.commands: list[tuple[list[str], Optional[Path]]] = []
        self.fail_on: set[str] = set()

    def __call__(self, cmd: Sequence[str], cwd: Optional[Path] = None) -> int:
        cmd = list(cmd)
        self.commands.append((cmd, cwd))
        if self.fail_on.intersection(cmd):
            return 1
        if "-o" in cmd and cwd is not None:
            produced = Path(cwd) / cmd[cmd.index("-o") + 1]
            produced.parent.mkdir(parents=True, exist_ok=True)
            produced.write_bytes(b"")
        return 0

    @property
    def compile_commands(self) -> list[list[str]]:
        return [cmd for cmd, _ in self.commands if "-c" in cmd]

    @property
    def link_commands(self) -> list[list[str]]:
        return [cmd for cmd, _ in self.commands if "-c" not in cmd]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def write_descriptor() -> Callable[..., Path]:
    """Return a helper that writes a descriptor dict as ``<directory>/factory.json``."""

    def _write(directory: Path, data: Any, file_name: str = "factory.json") -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / file_name
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):  # noqa: PT004
    """Keep CFACTORY_* settings of the developer's shell out of the tests."""
    for name in ("CFACTORY_BUILD_DIR", "CFACTORY_EXT_DIR", "CFACTORY_CC", "CFACTORY_GIT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def build_log():
    """Capture the timestamped build log in a buffer for the duration of a test."""
    stream = io.StringIO()
    output.init_timer(stream)
    output.set_verbose(False)
    yield stream
    output.set_verbose(False)
    output.set_output_stream(sys.stdout)


@pytest.fixture(autouse=True)
def _restore_stdio():  # noqa: PT004
    """Ensure stdout/stderr are always restored after each test.

    This prevents "I/O operation on closed file" errors in Python 3.13
    when tests raise exceptions that close stdout/stderr.
    """
    yield

    # Restore if they were closed during the test
    if sys.stdout.closed:
        sys.stdout = sys.__stdout__
    if sys.stderr.closed:
        sys.stderr = sys.__stderr__


@pytest.hookimpl(hookwrapper=True, trylast=True)
def pytest_runtest_teardown(item):  # noqa: ARG001
    """Ensure streams are restored during teardown phase."""
    yield

    if hasattr(sys.stdout, "closed") and sys.stdout.closed:
        sys.stdout = sys.__stdout__
    if hasattr(sys.stderr, "closed") and sys.stderr.closed:
        sys.stderr = sys.__stderr__
