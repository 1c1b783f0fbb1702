"""Configuration management for ssh-key-only."""

import json
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ssh_key_only.authorized_keys import is_valid_key_line
from ssh_key_only.exceptions import ConfigurationError

DEFAULT_KEYS = [
    "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIAcks0HZtjxxQoC0Hbn3LG/KFXc8sNVOPpfMO7oMJcdc common",
]


def _clean_key_lines(lines: List[str]) -> List[str]:
    stripped = (line.strip() for line in lines)
    return [line for line in stripped if line and not line.startswith("#")]


class KeysConfig(BaseSettings):
    """Public keys to install and where to install them."""

    home: Path = Field(default_factory=Path.home, description="Home directory holding .ssh")
    authorized: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_KEYS),
        description="Full public key lines to append to authorized_keys",
    )
    file: Optional[Path] = Field(default=None, description="Extra keys, one per line")

    model_config = SettingsConfigDict(
        env_prefix="KEYS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("authorized", mode="before")
    @classmethod
    def parse_authorized(cls, v: object) -> List[str]:
        """Parse keys from a JSON list, a newline-separated string or a list."""
        if isinstance(v, str):
            if v.lstrip().startswith("["):
                try:
                    v = json.loads(v)
                except ValueError as e:
                    raise ValueError(f"Invalid JSON key list: {e}") from e
            else:
                return _clean_key_lines(v.splitlines())
        if isinstance(v, list):
            return _clean_key_lines([str(k) for k in v])
        return []

    @property
    def ssh_dir(self) -> Path:
        return self.home / ".ssh"

    @property
    def authorized_keys_path(self) -> Path:
        return self.ssh_dir / "authorized_keys"

    def load_keys(self) -> List[str]:
        """Return configured keys followed by the keys file contents.

        Raises:
            ConfigurationError: If the keys file cannot be read
        """
        keys = list(self.authorized)
        if self.file is None:
            return keys

        try:
            content = self.file.read_text(encoding="utf-8")
            keys.extend(_clean_key_lines(content.splitlines()))
        except OSError as e:
            raise ConfigurationError(f"Cannot read keys file {self.file}: {e}") from e
        return keys


class SshdConfig(BaseSettings):
    """SSH daemon hardening settings."""

    config_path: Path = Field(default=Path("/etc/ssh/sshd_config"))
    drop_in_dir: Path = Field(default=Path("/etc/ssh/sshd_config.d"))
    normalize: bool = Field(
        default=False, description="Drop stray commented PubkeyAuthentication lines"
    )
    enforce_password_no: bool = Field(
        default=False, description="Always leave an explicit PasswordAuthentication no"
    )
    restart: bool = Field(default=True)
    check_syntax: bool = Field(default=True, description="Run sshd -t before restarting")
    backup: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="SSHD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    file: Optional[Path] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class AppConfig(BaseSettings):
    """Main configuration container."""

    keys: KeysConfig = Field(default_factory=KeysConfig)
    sshd: SshdConfig = Field(default_factory=SshdConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls(
            keys=KeysConfig(),
            sshd=SshdConfig(),
            logging=LoggingConfig(),
        )

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of issues."""
        issues: List[str] = []

        if self.keys.file is not None and not self.keys.file.is_file():
            issues.append(f"Keys file not found: {self.keys.file}")
            keys = list(self.keys.authorized)
        else:
            keys = self.keys.load_keys()

        for key in keys:
            if not is_valid_key_line(key):
                issues.append(f"Not a recognized public key line: {key[:40]}")

        return issues
