"""ssh-key-only - install public keys and switch sshd to key-only login."""

__version__ = "1.0.0"
__author__ = "DevOps Team"
__license__ = "MIT"

from ssh_key_only.exceptions import (
    BootstrapError,
    ConfigurationError,
    HardenerError,
    PermissionDeniedError,
    ValidationError,
)
from ssh_key_only.hardener import KeyOnlyHardener
from ssh_key_only.system_info import SystemInfo

__all__ = [
    "KeyOnlyHardener",
    "SystemInfo",
    "HardenerError",
    "ConfigurationError",
    "PermissionDeniedError",
    "BootstrapError",
    "ValidationError",
]
