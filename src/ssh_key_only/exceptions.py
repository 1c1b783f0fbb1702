"""Custom exceptions for ssh-key-only."""


class HardenerError(Exception):
    """Base exception for all hardener errors."""

    pass


class ConfigurationError(HardenerError):
    """Raised when configuration is invalid."""

    pass


class PermissionDeniedError(HardenerError):
    """Raised when the daemon configuration cannot be edited."""

    pass


class BootstrapError(HardenerError):
    """Raised when ~/.ssh or authorized_keys cannot be created."""

    pass


class ValidationError(HardenerError):
    """Raised when sshd rejects the edited configuration."""

    pass


class CommandExecutionError(HardenerError):
    """Raised when command execution fails."""

    pass

