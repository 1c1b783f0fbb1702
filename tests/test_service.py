"""Tests for SSH service validation and restart."""

from pathlib import Path

import pytest

from conftest import FakeExecutor, make_system
from ssh_key_only.exceptions import ValidationError
from ssh_key_only.service import SSHService
from ssh_key_only.types import InitSystem, RestartOutcome


def test_systemd_restarts_active_sshd_unit():
    executor = FakeExecutor(
        {
            ("systemctl", "is-active", "--quiet", "sshd"): True,
            ("systemctl", "restart", "sshd"): True,
        }
    )
    service = SSHService(make_system(InitSystem.SYSTEMD), executor)

    assert service.restart() == RestartOutcome.RESTARTED
    assert executor.commands[-1] == ("systemctl", "restart", "sshd")


def test_systemd_falls_back_to_ssh_unit():
    executor = FakeExecutor(
        {
            ("systemctl", "is-active", "--quiet", "ssh"): True,
            ("systemctl", "restart", "ssh"): True,
        }
    )
    service = SSHService(make_system(InitSystem.SYSTEMD), executor)

    assert service.restart() == RestartOutcome.RESTARTED
    assert ("systemctl", "restart", "sshd") not in executor.commands


def test_systemd_no_active_unit():
    executor = FakeExecutor()
    service = SSHService(make_system(InitSystem.SYSTEMD), executor)

    assert service.restart() == RestartOutcome.NOT_ACTIVE
    assert all(cmd[1] == "is-active" for cmd in executor.commands)


def test_systemd_restart_failure_is_reported():
    executor = FakeExecutor({("systemctl", "is-active", "--quiet", "sshd"): True})
    service = SSHService(make_system(InitSystem.SYSTEMD), executor)

    assert service.restart() == RestartOutcome.FAILED


def test_service_command_fallback():
    executor = FakeExecutor({("service", "ssh", "restart"): True})
    service = SSHService(make_system(InitSystem.SYSVINIT), executor)

    assert service.restart() == RestartOutcome.RESTARTED
    assert executor.commands == [("service", "ssh", "restart")]


def test_service_command_tries_sshd_name():
    executor = FakeExecutor({("service", "sshd", "restart"): True})
    service = SSHService(make_system(InitSystem.SYSVINIT), executor)

    assert service.restart() == RestartOutcome.RESTARTED


def test_no_tooling_requires_manual_restart():
    executor = FakeExecutor()
    service = SSHService(make_system(InitSystem.UNKNOWN), executor)

    assert service.restart() == RestartOutcome.MANUAL_REQUIRED
    assert executor.commands == []


def test_validate_config_runs_sshd_test_mode(tmp_path: Path):
    config = tmp_path / "sshd_config"
    executor = FakeExecutor({("/usr/sbin/sshd", "-t", "-f", str(config)): True})
    service = SSHService(make_system(sshd_binary="/usr/sbin/sshd"), executor)

    service.validate_config(config)

    assert executor.commands == [("/usr/sbin/sshd", "-t", "-f", str(config))]


def test_validate_config_rejects_bad_config(tmp_path: Path):
    service = SSHService(make_system(sshd_binary="/usr/sbin/sshd"), FakeExecutor())

    with pytest.raises(ValidationError):
        service.validate_config(tmp_path / "sshd_config")


def test_validate_config_without_sshd_binary(tmp_path: Path):
    executor = FakeExecutor()
    service = SSHService(make_system(sshd_binary=None), executor)

    service.validate_config(tmp_path / "sshd_config")

    assert executor.commands == []
