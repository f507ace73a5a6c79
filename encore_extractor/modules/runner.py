"""External command execution helpers."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from .exceptions import ExecutableNotFoundError, ExternalCommandError

logger = logging.getLogger("encore_extractor.runner")


def run_command(
    program: str,
    args: Sequence[str],
    work_dir: Optional[Path] = None,
) -> None:
    """
    Run ``program`` with ``args`` and wait for it to exit.

    There is no timeout: a hung child blocks the caller.

    Args:
        program: Executable name or path
        args: Command-line arguments
        work_dir: Optional working directory for the child process

    Raises:
        ExternalCommandError: If the process exits non-zero or cannot be started
    """
    cmd = [program, *args]
    logger.debug("Running: %s (cwd=%s)", " ".join(cmd), work_dir or ".")

    try:
        completed = subprocess.run(
            cmd,
            cwd=str(work_dir) if work_dir is not None else None,
            capture_output=True,
        )
    except OSError as e:
        raise ExternalCommandError(program, args, str(e), cause=e) from e

    if completed.returncode != 0:
        stderr = completed.stderr.decode("utf-8", errors="replace")
        raise ExternalCommandError(program, args, stderr, returncode=completed.returncode)


def locate_executable(name: str) -> str:
    """
    Resolve ``name`` on ``PATH`` the way ``which`` does.

    Raises:
        ExecutableNotFoundError: If the executable cannot be found
    """
    path = shutil.which(name)
    if not path:
        raise ExecutableNotFoundError(name)
    return path
