"""Host detection and execution of generated commands."""

import logging
import platform
import subprocess

from enum import Enum
from typing import List, NamedTuple, Optional

from rich.console import Console
from rich.text import Text

from .errors import ExecutionError

logger = logging.getLogger(__name__)

UNKNOWN_SHELL_VERSION = "Unknown"
SHELL_VERSION_TIMEOUT = 10


class OSKind(str, Enum):
    WINDOWS = "windows"
    UNIX = "unix"

    def __str__(self) -> str:
        return self.value


class CommandResult(NamedTuple):
    """Combined stdout/stderr of a command and the error it ended with, if any."""

    output: str
    error: Optional[ExecutionError] = None


def detect_os_kind() -> OSKind:
    if platform.system().lower() == "windows":
        return OSKind.WINDOWS
    return OSKind.UNIX


def shell_argv(os_kind: OSKind, command: str) -> List[str]:
    if os_kind == OSKind.WINDOWS:
        return ["powershell", "-Command", command]
    return ["sh", "-c", command]


def detect_shell_version(os_kind: OSKind) -> str:
    """Best-effort shell version lookup. Never raises; returns "Unknown" on failure."""
    if os_kind == OSKind.WINDOWS:
        argv = ["powershell", "$PSVersionTable.PSVersion"]
    else:
        argv = ["sh", "-c", '"${SHELL:-sh}" --version']

    try:
        result = subprocess.run(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=SHELL_VERSION_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Shell version detection failed: %s", e)
        return UNKNOWN_SHELL_VERSION

    version = result.stdout.strip()
    if result.returncode != 0 or not version:
        logger.debug("Shell version detection exited with %s", result.returncode)
        return UNKNOWN_SHELL_VERSION
    return version


def _as_text(output) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output


def run_command(
    os_kind: OSKind,
    command: str,
    debug: bool = False,
    timeout: Optional[float] = None,
    console: Optional[Console] = None,
) -> CommandResult:
    """
    Runs `command` through the host shell and captures stdout and stderr together.

    The output is returned even when the command fails, so callers must look
    at both fields of the result.

    Args:
        os_kind: Selects `sh -c` or `powershell -Command`.
        command: The script text, passed to the shell as a single argument.
        debug: Echo the command, its output and any error to the console.
        timeout: Seconds before the command is killed. None waits forever.
        console: Console used for debug echoes.
    """
    console = console or Console()
    argv = shell_argv(os_kind, command)

    if debug:
        console.print(Text(f"Executing Command: {command}", style="yellow"))
    logger.debug("Spawning %s", argv[:2])

    error: Optional[ExecutionError] = None
    try:
        completed = subprocess.run(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout,
        )
        output = completed.stdout or ""
        if completed.returncode != 0:
            error = ExecutionError(
                f"Command exited with status {completed.returncode}",
                output=output,
                returncode=completed.returncode,
            )
    except subprocess.TimeoutExpired as e:
        output = _as_text(e.output)
        error = ExecutionError(f"Command timed out after {timeout} seconds", output=output)
    except (OSError, ValueError) as e:
        # ValueError: the command text cannot be passed as an argument (e.g. a NUL byte).
        output = ""
        error = ExecutionError(f"Could not start '{argv[0]}': {e}")

    if debug:
        if error is not None:
            console.print(Text(f"Command execution error: {error}", style="red"))
        console.print(Text(f"Command Output: {output}", style="yellow"))

    return CommandResult(output, error)
