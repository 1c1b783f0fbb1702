"""Main key-only hardening pipeline."""

from typing import List, Optional, Tuple

import structlog

from ssh_key_only.authorized_keys import AuthorizedKeys
from ssh_key_only.config import AppConfig
from ssh_key_only.exceptions import ConfigurationError
from ssh_key_only.service import SSHService
from ssh_key_only.sshd_config import SshdConfigEditor, find_password_overrides
from ssh_key_only.system_info import SystemInfo
from ssh_key_only.types import HardeningReport, RestartOutcome, SshdChanges
from ssh_key_only.utils.command import CommandExecutor
from ssh_key_only.utils.file import FileManager

logger = structlog.get_logger(__name__)


class KeyOnlyHardener:
    """Run the four hardening steps in order."""

    def __init__(
        self,
        config: AppConfig,
        dry_run: bool = False,
        skip_sshd: bool = False,
        system: Optional[SystemInfo] = None,
        executor: Optional[CommandExecutor] = None,
    ) -> None:
        """Initialize hardener.

        Args:
            config: Configuration object
            dry_run: If True, only simulate changes
            skip_sshd: Only manage authorized_keys, leave the daemon alone
            system: Detected system capabilities, detected if omitted
            executor: Command executor, created if omitted
        """
        self.config = config
        self.dry_run = dry_run
        self.skip_sshd = skip_sshd

        self.system = system or SystemInfo()
        self.executor = executor or CommandExecutor(dry_run=dry_run)
        self.file_manager = FileManager(dry_run=dry_run)

        self.authorized_keys = AuthorizedKeys(config.keys.ssh_dir, self.file_manager)
        self.sshd_editor = SshdConfigEditor(
            config.sshd.config_path,
            self.file_manager,
            normalize=config.sshd.normalize,
            enforce_password_no=config.sshd.enforce_password_no,
            backup=config.sshd.backup,
        )
        self.service = SSHService(self.system, self.executor)

    def preflight_checks(self) -> List[str]:
        """Check configuration and daemon config access before any change.

        Returns:
            Keys to install

        Raises:
            ConfigurationError: If configuration is invalid
            PermissionDeniedError: If the daemon config is not writable
        """
        logger.info("starting_preflight_checks", **self.system.to_dict())

        issues = self.config.validate_config()
        if issues:
            for issue in issues:
                logger.error("preflight_issue", issue=issue)
            raise ConfigurationError("Preflight checks failed: " + "; ".join(issues))

        keys = self.config.keys.load_keys()
        if not keys:
            logger.warning("no_public_keys_configured")

        if not self.skip_sshd:
            self.sshd_editor.check_writable()

        return keys

    def run(self) -> HardeningReport:
        """Execute the hardening pipeline.

        Raises:
            HardenerError: If a fatal step fails
        """
        keys = self.preflight_checks()

        logger.info("step_bootstrap")
        self.authorized_keys.bootstrap()

        logger.info("step_sanitize")
        disabled = self.authorized_keys.sanitize()

        logger.info("step_add_keys", count=len(keys))
        added, skipped = self.authorized_keys.add_keys(keys)

        sshd_changes: Optional[SshdChanges] = None
        restart = RestartOutcome.SKIPPED
        if not self.skip_sshd:
            logger.info("step_harden_sshd")
            sshd_changes, restart = self._harden_sshd()

        logger.info("hardening_completed", restart=restart.value)
        return HardeningReport(
            disabled_lines=disabled,
            keys_added=added,
            keys_skipped=skipped,
            sshd=sshd_changes,
            restart=restart,
        )

    def _harden_sshd(self) -> Tuple[SshdChanges, RestartOutcome]:
        changes = self.sshd_editor.apply()

        for override in find_password_overrides(self.config.sshd.drop_in_dir):
            logger.warning(
                "drop_in_enables_password_authentication",
                path=str(override),
                hint="edit or remove this file, it takes precedence",
            )

        if not self.config.sshd.restart:
            logger.info("ssh_service_restart_disabled")
            return changes, RestartOutcome.SKIPPED

        if self.config.sshd.check_syntax and not self.dry_run:
            self.service.validate_config(self.config.sshd.config_path)

        return changes, self.service.restart()
