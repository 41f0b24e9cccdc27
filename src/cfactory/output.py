"""
Console output for cfactory builds.

Every line is prefixed with the time elapsed since the run started, in
MM:SS.cc format, so a build log shows where the time went (fetching,
compiling, linking).

Example output:
    00:00.01 cfactory v0.1.0
    00:00.02 [1/4] Reading factory.json...
    00:00.40 Building project app (debug)...
    00:00.40 $ gcc main.c -c -g -Werror -o build/debug/app/main.o
    00:00.93 Linking app...

Usage:
    from cfactory.output import log, log_phase, log_command

    log_phase(1, 4, "Reading factory.json...")
    log_command(["gcc", "main.c", "-c"])
"""

import shlex
import sys
import time
from types import TracebackType
from typing import Optional, Sequence, TextIO

_start_time: Optional[float] = None
_output_stream: TextIO = sys.stdout
_verbose: bool = False


def init_timer(output_stream: Optional[TextIO] = None) -> None:
    """
    Start the elapsed-time clock.

    Called automatically on the first log line if the program did not call it.

    Args:
        output_stream: Optional output stream (defaults to sys.stdout)
    """
    global _start_time, _output_stream
    _start_time = time.time()
    if output_stream is not None:
        _output_stream = output_stream


def set_output_stream(output_stream: TextIO) -> None:
    """Redirect all log output to another stream."""
    global _output_stream
    _output_stream = output_stream


def set_verbose(verbose: bool) -> None:
    """
    Enable or disable verbose-only messages.

    Args:
        verbose: If True, messages logged with verbose_only=True are printed too.
    """
    global _verbose
    _verbose = verbose


def is_verbose() -> bool:
    return _verbose


def get_elapsed() -> float:
    """Seconds elapsed since the timer started."""
    if _start_time is None:
        init_timer()
    return time.time() - _start_time  # type: ignore


def format_timestamp() -> str:
    elapsed = get_elapsed()
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def _print(message: str) -> None:
    _output_stream.write(f"{format_timestamp()} {message}\n")
    _output_stream.flush()


def log(message: str, verbose_only: bool = False) -> None:
    """
    Log a message with timestamp.

    Args:
        message: Message to log
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(message)


def log_phase(phase: int, total: int, message: str, verbose_only: bool = False) -> None:
    """
    Log a run phase as ``[N/M] message``.

    Args:
        phase: Current phase number
        total: Total number of phases
        message: Phase description
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(f"[{phase}/{total}] {message}")


def log_detail(message: str, indent: int = 6, verbose_only: bool = False) -> None:
    """Log an indented detail line."""
    if verbose_only and not _verbose:
        return
    _print(f"{' ' * indent}{message}")


def log_command(command: Sequence[str]) -> None:
    """
    Echo an external command before it runs.

    Commands are always shown: the build log doubles as a record of exactly
    what was fetched, compiled and linked.

    Args:
        command: Command and arguments
    """
    _print(f"$ {shlex.join(command)}")


def log_header(title: str, version: str) -> None:
    _print(f"{title} v{version}")


def log_error(message: str) -> None:
    _print(f"ERROR: {message}")


def log_warning(message: str) -> None:
    _print(f"WARNING: {message}")


def log_success(message: str) -> None:
    _print(message)


class TimedLogger:
    """
    Context manager that logs an operation and how long it took.

    Usage:
        with TimedLogger("Resolving dependencies", phase=(2, 4)) as timed:
            timed.detail("Fetched libfoo")
    """

    def __init__(self, operation: str, phase: Optional[tuple[int, int]] = None, verbose_only: bool = False):
        self.operation = operation
        self.phase = phase
        self.verbose_only = verbose_only
        self.start_time = 0.0

    def __enter__(self) -> "TimedLogger":
        self.start_time = time.time()
        if self.phase:
            log_phase(self.phase[0], self.phase[1], f"{self.operation}...", self.verbose_only)
        else:
            log(f"{self.operation}...", self.verbose_only)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_val, exc_tb  # Unused
        if exc_type is None:
            elapsed = time.time() - self.start_time
            log_detail(f"Done ({elapsed:.2f}s)", verbose_only=True)

    def detail(self, message: str) -> None:
        log_detail(message, verbose_only=self.verbose_only)
