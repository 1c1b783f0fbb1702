"""SSH daemon validation and restart."""

from pathlib import Path

import structlog

from ssh_key_only.exceptions import ValidationError
from ssh_key_only.system_info import SystemInfo
from ssh_key_only.types import InitSystem, RestartOutcome
from ssh_key_only.utils.command import CommandExecutor

logger = structlog.get_logger(__name__)

SYSTEMD_UNITS = ["sshd", "ssh"]
SYSVINIT_NAMES = ["ssh", "sshd"]


class SSHService:
    """Validate and restart the SSH daemon with whatever tooling is present."""

    def __init__(self, system: SystemInfo, executor: CommandExecutor) -> None:
        self.system = system
        self.executor = executor

    def validate_config(self, config_path: Path) -> None:
        """Run ``sshd -t`` against the edited config.

        Raises:
            ValidationError: If sshd rejects the configuration
        """
        if not self.system.sshd_binary:
            logger.warning("sshd_not_found_validation_skipped")
            return

        result = self.executor.execute(
            [self.system.sshd_binary, "-t", "-f", str(config_path)],
            check=False,
            mutating=False,
        )
        if not result.success:
            raise ValidationError(f"Invalid SSH config: {result.stderr.strip()}")
        logger.info("sshd_config_validated", path=str(config_path))

    def restart(self) -> RestartOutcome:
        """Restart the daemon, reporting rather than raising on failure."""
        logger.info("restarting_ssh_service", init_system=self.system.init_system.value)

        if self.system.init_system == InitSystem.SYSTEMD:
            return self._restart_systemd()
        if self.system.init_system == InitSystem.SYSVINIT:
            return self._restart_sysvinit()

        logger.error("cannot_restart_ssh_service", action="restart the SSH daemon manually")
        return RestartOutcome.MANUAL_REQUIRED

    def _restart_systemd(self) -> RestartOutcome:
        for unit in SYSTEMD_UNITS:
            active = self.executor.execute(
                ["systemctl", "is-active", "--quiet", unit], check=False, mutating=False
            )
            if not active.success:
                continue

            result = self.executor.execute(
                self.system.get_service_command(unit, "restart"), check=False
            )
            if result.success:
                logger.info("ssh_service_restarted", unit=unit, via="systemctl")
                return RestartOutcome.RESTARTED

            logger.error(
                "ssh_service_restart_failed", unit=unit, error=result.stderr.strip()
            )
            return RestartOutcome.FAILED

        logger.warning("ssh_service_not_active_restart_skipped")
        return RestartOutcome.NOT_ACTIVE

    def _restart_sysvinit(self) -> RestartOutcome:
        errors = []
        for name in SYSVINIT_NAMES:
            result = self.executor.execute(
                self.system.get_service_command(name, "restart"), check=False
            )
            if result.success:
                logger.info("ssh_service_restarted", unit=name, via="service")
                return RestartOutcome.RESTARTED
            errors.append(result.stderr.strip())

        logger.error("ssh_service_restart_failed", via="service", error="; ".join(errors))
        return RestartOutcome.FAILED
