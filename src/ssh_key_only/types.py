"""Type definitions for ssh-key-only."""

from enum import Enum
from typing import NamedTuple, Optional


class InitSystem(str, Enum):
    """Service managers the restart step knows how to drive."""

    SYSTEMD = "systemd"
    SYSVINIT = "sysvinit"
    UNKNOWN = "unknown"


class DirectiveState(str, Enum):
    """Effective state of a yes/no sshd directive."""

    ABSENT = "absent"
    COMMENTED = "commented"
    ACTIVE_YES = "active-yes"
    ACTIVE_NO = "active-no"


class DirectiveChange(str, Enum):
    """What the hardening step did to a directive."""

    UNCHANGED = "unchanged"
    ADDED = "added"
    DISABLED = "disabled"
    UNCOMMENTED = "uncommented"
    DEDUPLICATED = "deduplicated"


class RestartOutcome(str, Enum):
    """Result of trying to restart the SSH daemon."""

    RESTARTED = "restarted"
    NOT_ACTIVE = "not-active"
    MANUAL_REQUIRED = "manual-required"
    FAILED = "failed"
    SKIPPED = "skipped"


class CommandResult(NamedTuple):
    """Result of command execution."""

    success: bool
    stdout: str
    stderr: str
    return_code: int = 0


class DirectiveLine(NamedTuple):
    """A parsed `Keyword Value` line from sshd_config."""

    keyword: str
    value: str
    commented: bool
    indent: str = ""


class SshdChanges(NamedTuple):
    """Changes applied to sshd_config."""

    pubkey: DirectiveChange
    password: DirectiveChange

    @property
    def changed(self) -> bool:
        return (
            self.pubkey != DirectiveChange.UNCHANGED
            or self.password != DirectiveChange.UNCHANGED
        )


class HardeningReport(NamedTuple):
    """Summary of a full run."""

    disabled_lines: Optional[int]
    keys_added: int
    keys_skipped: int
    sshd: Optional[SshdChanges]
    restart: RestartOutcome
