"""Command execution utilities."""

import shlex
import subprocess
from typing import Sequence

import structlog

from ssh_key_only.exceptions import CommandExecutionError
from ssh_key_only.types import CommandResult

logger = structlog.get_logger(__name__)


class CommandExecutor:
    """Execute system commands with proper error handling."""

    def __init__(self, dry_run: bool = False) -> None:
        """Initialize command executor.

        Args:
            dry_run: If True, only log commands without executing
        """
        self.dry_run = dry_run

    def execute(
        self,
        cmd: Sequence[str],
        check: bool = True,
        timeout: int = 30,
        mutating: bool = True,
    ) -> CommandResult:
        """Execute command.

        Args:
            cmd: Command and its arguments
            check: Whether to raise exception on failure
            timeout: Command timeout in seconds
            mutating: Whether the command changes system state; read-only
                commands still run in dry-run mode

        Returns:
            CommandResult with execution details

        Raises:
            CommandExecutionError: If command fails and check=True
        """
        cmdline = shlex.join(cmd)

        if self.dry_run and mutating:
            logger.info("dry_run_command", command=cmdline)
            return CommandResult(True, f"[DRY RUN] {cmdline}", "", 0)

        logger.debug("running_command", command=cmdline)
        try:
            result = subprocess.run(
                list(cmd),
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            error_msg = f"Command timed out after {timeout}s: {cmdline}"
            if check:
                raise CommandExecutionError(error_msg) from e
            return CommandResult(False, "", error_msg, -1)
        except OSError as e:
            error_msg = f"Command execution failed: {cmdline}\nError: {e}"
            if check:
                raise CommandExecutionError(error_msg) from e
            return CommandResult(False, "", error_msg, -1)

        cmd_result = CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout,
            stderr=result.stderr,
            return_code=result.returncode,
        )

        if check and not cmd_result.success:
            raise CommandExecutionError(
                f"Command failed: {cmdline}\nError: {result.stderr}"
            )

        return cmd_result
