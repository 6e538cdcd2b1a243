"""Command runner for executing backend CLI commands.

This module provides the base command execution functionality used by
the subprocess-based provider gateway.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from loguru import logger


@dataclass
class CommandResult:
    """Result of a command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


class CommandRunner:
    """Low-level command executor with consistent result handling.

    Commands are always passed as argument lists, never through a shell,
    so template paths and parameter values need no quoting.
    """

    def __init__(self, cwd: Path | None = None) -> None:
        """Initialize the command runner.

        Args:
            cwd: Working directory for commands (defaults to the process cwd)
        """
        self.cwd = cwd

    def run(self, cmd: Sequence[str]) -> CommandResult:
        """Execute a command and return structured result.

        Output is always captured so failures can be reported verbatim.

        Args:
            cmd: Command and arguments as a sequence

        Returns:
            CommandResult with success status, output, and return code
        """
        logger.debug(f"Running: {' '.join(cmd)}")
        result = subprocess.run(
            list(cmd),
            cwd=self.cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        logger.debug(f"Exit code {result.returncode}: {cmd[0]}")
        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )
