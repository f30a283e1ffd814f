"""Run external commands and report failure as a value.

Hook commands from the deploy config go through run(); a hook that exits
non-zero, cannot be started or overruns its timeout comes back as Err.

    result = run(["systemctl", "restart", "my-app"], cwd=release_path)
    if isinstance(result, Err):
        console.error(str(result.error))
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from artdeploy.core.result import Err, Ok, Result

__all__ = ["NOT_STARTED", "ProcessError", "run"]

# returncode used when there is no real exit status (spawn error, timeout)
NOT_STARTED = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that did not exit cleanly.

    Attributes:
        returncode: Exit status, or NOT_STARTED.
        stderr: Captured stderr; the OS or timeout message when NOT_STARTED.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def started(self) -> bool:
        return self.returncode != NOT_STARTED

    def __str__(self) -> str:
        shown = " ".join(self.command[:3]) + (" ..." if len(self.command) > 3 else "")
        if not self.started:
            return f"{shown} did not run: {self.stderr}"
        return f"{shown} exited with status {self.returncode}"


def run(
    cmd: Sequence[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run cmd in cwd, capturing text output.

    Args:
        env: Full environment for the child; None inherits ours.
        timeout: Seconds before the child is killed; None waits forever.

    Returns:
        Ok(stdout), or Err(ProcessError) for a non-zero exit, a spawn
        failure or a timeout.
    """
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            command,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(
            ProcessError(command, NOT_STARTED, stderr=f"timed out after {timeout}s")
        )
    except OSError as e:
        return Err(ProcessError(command, NOT_STARTED, stderr=str(e)))

    if proc.returncode:
        return Err(ProcessError(command, proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)
