"""Unit tests for logging compliance across the codebase.

These tests enforce that production code reports through cfactory.output or
the logging module instead of print() statements.
"""

import re
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).parent.parent.parent / "src" / "cfactory"


def iter_source_files():
    for file_path in sorted(SRC_DIR.rglob("*.py")):
        if "__pycache__" in file_path.parts:
            continue
        yield file_path


class TestLoggingCompliance:
    """Test cases for logging vs print statement compliance."""

    def test_no_print_statements_in_production_code(self):
        """Verify no print() calls exist in non-CLI code.

        Note: the CLI writes user-facing output through rich and is exempt.
        """
        assert SRC_DIR.exists(), f"Source directory not found: {SRC_DIR}"

        violations = []
        for file_path in iter_source_files():
            if file_path.name == "cli.py":
                continue

            for line_num, line in enumerate(file_path.read_text(encoding="utf-8").split("\n"), start=1):
                if line.strip().startswith("#"):
                    continue
                if re.search(r"(?<![\w.])print\s*\(", line):
                    violations.append(f"{file_path}:{line_num}: {line.strip()}")

        if violations:
            violation_report = "\n".join(violations)
            pytest.fail(f"Found {len(violations)} print() statements in production code:\n{violation_report}\n\nUse cfactory.output or logging instead.")

    def test_loggers_are_module_scoped(self):
        """Verify every logger is created with logging.getLogger(__name__)."""
        violations = []
        for file_path in iter_source_files():
            for line_num, line in enumerate(file_path.read_text(encoding="utf-8").split("\n"), start=1):
                match = re.search(r"logging\.getLogger\((.*?)\)", line)
                if match and match.group(1) != "__name__":
                    violations.append(f"{file_path}:{line_num}: {line.strip()}")

        if violations:
            pytest.fail("Loggers must be created with logging.getLogger(__name__):\n" + "\n".join(violations))

    def test_no_direct_stdout_writes(self):
        """Verify only cfactory.output and the CLI write to stdout directly."""
        violations = []
        for file_path in iter_source_files():
            if file_path.name in ("cli.py", "output.py"):
                continue
            for line_num, line in enumerate(file_path.read_text(encoding="utf-8").split("\n"), start=1):
                if re.search(r"sys\.(stdout|stderr)\.write", line):
                    violations.append(f"{file_path}:{line_num}: {line.strip()}")

        if violations:
            pytest.fail("Direct stdout/stderr writes found:\n" + "\n".join(violations))
