"""Generic command execution for lifecycle operations.

All docker and git invocations go through CommandRunner so that failures
surface as typed errors keyed by exit code.
"""

from __future__ import annotations

import asyncio
import subprocess
from dataclasses import dataclass
from pathlib import Path

from ..errors import CommandError, CommandNotFoundError
from ..shared.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Captured result of a finished command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def lines(self) -> list[str]:
        """Non-empty stdout lines."""
        return [line for line in self.stdout.splitlines() if line.strip()]


class CommandRunner:
    """Run external commands and capture their output."""

    def __init__(self, timeout: float | None = None):
        """Initialize command runner.

        Args:
            timeout: Optional per-command timeout in seconds.
        """
        self.timeout = timeout

    async def run(
        self,
        args: list[str],
        cwd: Path | None = None,
        check: bool = True,
    ) -> CommandResult:
        """Run a command without blocking the event loop.

        Args:
            args: Command and arguments.
            cwd: Working directory for the command.
            check: Raise CommandError on a non-zero exit code.

        Returns:
            CommandResult with captured stdout/stderr.

        Raises:
            CommandNotFoundError: If the executable is not installed.
            CommandError: If check is set and the command fails.
        """
        logger.debug("command_started", args=args, cwd=str(cwd) if cwd else None)
        try:
            completed = await asyncio.to_thread(
                subprocess.run,
                args,
                capture_output=True,
                text=True,
                cwd=cwd,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise CommandNotFoundError(
                message=f"{args[0]} not found. Is it installed?",
                command=list(args),
                stderr=str(e),
            ) from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                message=f"Command timed out after {self.timeout}s: {' '.join(args)}",
                command=list(args),
                returncode=-1,
            ) from e

        result = CommandResult(
            args=list(args),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

        if check and result.returncode != 0:
            stderr = result.stderr.strip()
            raise CommandError(
                message=f"Command failed ({result.returncode}): {' '.join(args)}: {stderr}",
                command=result.args,
                returncode=result.returncode,
                stderr=stderr,
            )

        return result
