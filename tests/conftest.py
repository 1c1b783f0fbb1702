"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
import structlog

from ssh_key_only.config import AppConfig
from ssh_key_only.system_info import SystemInfo
from ssh_key_only.types import CommandResult, InitSystem

ED25519_KEY = "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIAcks0HZtjxxQoC0Hbn3LG/KFXc8sNVOPpfMO7oMJcdc common"
RSA_KEY = "ssh-rsa AAAAB3NzaC1yc2EAAAADAQABAAABAQDfake user@host"

DEBIAN_SSHD_CONFIG = """\
Include /etc/ssh/sshd_config.d/*.conf

#Port 22
#PermitRootLogin prohibit-password
#PubkeyAuthentication yes

# To disable tunneled clear text passwords, change to no here!
#PasswordAuthentication yes
#PermitEmptyPasswords no

KbdInteractiveAuthentication no
UsePAM yes
X11Forwarding yes
Subsystem sftp /usr/lib/openssh/sftp-server
"""


class FakeExecutor:
    """Records commands and answers them from a table."""

    def __init__(self, responses: Optional[Dict[Tuple[str, ...], bool]] = None) -> None:
        self.responses = responses or {}
        self.commands: List[Tuple[str, ...]] = []
        self.dry_run = False

    def execute(
        self,
        cmd: Sequence[str],
        check: bool = True,
        timeout: int = 30,
        mutating: bool = True,
    ) -> CommandResult:
        key = tuple(cmd)
        self.commands.append(key)
        success = self.responses.get(key, False)
        return CommandResult(success, "", "" if success else "failed", 0 if success else 1)


def make_system(
    init_system: InitSystem = InitSystem.SYSTEMD, sshd_binary: Optional[str] = None
) -> SystemInfo:
    """Build a SystemInfo without probing the host."""
    system = SystemInfo.__new__(SystemInfo)
    system.is_root = True
    system.init_system = init_system
    system.sshd_binary = sshd_binary
    return system


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    """Create temporary home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def sshd_config_path(tmp_path: Path) -> Path:
    """Create a writable sshd_config with stock Debian content."""
    path = tmp_path / "sshd_config"
    path.write_text(DEBIAN_SSHD_CONFIG)
    return path


@pytest.fixture
def test_config(home_dir: Path, sshd_config_path: Path, tmp_path: Path) -> AppConfig:
    """Create test configuration pointing at temporary paths."""
    config = AppConfig.from_env()
    config.keys.home = home_dir
    config.keys.authorized = [ED25519_KEY]
    config.keys.file = None
    config.sshd.config_path = sshd_config_path
    config.sshd.drop_in_dir = tmp_path / "sshd_config.d"
    return config
