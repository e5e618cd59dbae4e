"""
Blocking execution of external commands with a timeout.
"""
import logging
import subprocess
from dataclasses import dataclass
from textwrap import shorten
from typing import Optional, Sequence

from elysia_lambda.errors import CommandError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 900.0


@dataclass(frozen=True)
class RunResult:
    returncode: int
    output: str


def run_command(
    cmd: Sequence[str],
    *,
    cwd: Optional[str] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
) -> RunResult:
    """
    Run a command to completion and capture stdout and stderr as one text blob.

    Args:
        cmd: Command and arguments
        cwd: Working directory for the command
        timeout: Seconds to wait before the process is killed (None waits forever)

    Returns:
        RunResult with the exit code and combined output

    Raises:
        CommandError: If the command is missing, times out or exits non-zero
    """
    cmd = [str(part) for part in cmd]
    logger.info(f"Running command: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise CommandError(cmd, None, reason=f"Command not found: {cmd[0]}") from e
    except subprocess.TimeoutExpired as e:
        output = e.output or ""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        raise CommandError(
            cmd, None, output=output, reason=f"Command did not finish within {timeout} seconds: {' '.join(cmd)}"
        ) from e

    output = result.stdout or ""
    if output:
        logger.debug(f"Command output: {shorten(output.strip(), width=2000)}")

    if result.returncode != 0:
        raise CommandError(cmd, result.returncode, output=output)

    return RunResult(returncode=result.returncode, output=output)
