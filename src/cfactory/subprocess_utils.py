"""Process execution for fetch, compile and link commands.

Every external tool cfactory runs goes through run_command(), which echoes
the command to the build log, applies the platform flags that keep Windows
from flashing a console window, and reports only the exit code back. The
core never inspects tool output: the compiler's own diagnostics stream
straight to the terminal.
"""

import logging
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from .output import log_command

logger = logging.getLogger(__name__)

# Signature shared by run_command and the fakes used in tests
CommandRunner = Callable[[Sequence[str], Optional[Path]], int]


def get_subprocess_creation_flags() -> int:
    """Get platform-specific subprocess creation flags.

    Returns:
        - Windows: subprocess.CREATE_NO_WINDOW
        - Other platforms: 0
    """
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


def safe_run(cmd: Sequence[str], **kwargs: Any) -> subprocess.CompletedProcess:
    """Execute subprocess.run with platform-specific flags.

    Applies CREATE_NO_WINDOW on Windows (OR'd with any explicit
    creationflags) and redirects stdin to DEVNULL unless the caller passes
    stdin explicitly.

    Args:
        cmd: Command and arguments
        **kwargs: Additional arguments passed to subprocess.run

    Returns:
        CompletedProcess result from subprocess.run
    """
    default_flags = get_subprocess_creation_flags()

    if "creationflags" in kwargs:
        kwargs["creationflags"] = kwargs["creationflags"] | default_flags
    elif default_flags:
        kwargs["creationflags"] = default_flags

    if "stdin" not in kwargs:
        kwargs["stdin"] = subprocess.DEVNULL

    return subprocess.run(list(cmd), **kwargs)


def run_command(cmd: Sequence[str], cwd: Optional[Path] = None) -> int:
    """Echo and run a command, returning its exit code.

    A missing executable is reported as exit code 127, the same code a
    shell would give, so callers only ever deal with integers.

    Args:
        cmd: Command and arguments
        cwd: Working directory for the process

    Returns:
        Process exit code
    """
    log_command(cmd)
    try:
        result = safe_run(cmd, cwd=str(cwd) if cwd is not None else None)
    except FileNotFoundError as e:
        logger.debug("Executable not found for %s: %s", cmd[0], e)
        return 127
    if result.returncode != 0:
        logger.debug("Command exited with %d: %s", result.returncode, " ".join(cmd))
    return result.returncode
