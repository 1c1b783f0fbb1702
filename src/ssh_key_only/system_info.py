"""System information detection for ssh-key-only."""

import os
import shutil
from typing import Dict, List, Optional

from ssh_key_only.types import InitSystem

SSHD_CANDIDATES = ["sshd", "/usr/sbin/sshd", "/usr/local/sbin/sshd"]


class SystemInfo:
    """Detect and store system capabilities."""

    def __init__(self) -> None:
        """Initialize system information detection."""
        self.is_root = os.geteuid() == 0
        self.init_system = self._detect_init_system()
        self.sshd_binary = self._detect_sshd()

    def _detect_init_system(self) -> InitSystem:
        """Detect which service manager is available, preferring systemd."""
        if self._command_exists("systemctl"):
            return InitSystem.SYSTEMD
        if self._command_exists("service"):
            return InitSystem.SYSVINIT
        return InitSystem.UNKNOWN

    def _detect_sshd(self) -> Optional[str]:
        """Locate the sshd binary used for syntax checks."""
        for candidate in SSHD_CANDIDATES:
            found = shutil.which(candidate)
            if found:
                return found
        return None

    def _command_exists(self, command: str) -> bool:
        """Check if a command exists."""
        return shutil.which(command) is not None

    def get_service_command(self, service: str, action: str) -> List[str]:
        """Get service control command for this init system."""
        if self.init_system == InitSystem.SYSTEMD:
            return ["systemctl", action, service]
        if self.init_system == InitSystem.SYSVINIT:
            return ["service", service, action]
        return []

    def to_dict(self) -> Dict[str, str]:
        """Convert system info to dictionary."""
        return {
            "init_system": self.init_system.value,
            "is_root": str(self.is_root),
            "sshd": self.sshd_binary or "",
        }
