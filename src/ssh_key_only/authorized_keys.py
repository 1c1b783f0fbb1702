"""Bootstrap, sanitize and extend ~/.ssh/authorized_keys."""

import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import structlog

from ssh_key_only.exceptions import BootstrapError
from ssh_key_only.utils.file import FileManager

logger = structlog.get_logger(__name__)

SSH_DIR_MODE = 0o700
AUTHORIZED_KEYS_MODE = 0o600

KEY_LINE_PATTERN = re.compile(r"^(#|ssh-(rsa|dsa|ecdsa|ed25519))")
INVALID_KEY_MARKER = " # Invalid Key Format by script"


def is_valid_key_line(line: str) -> bool:
    """Return True if line is a comment or starts with a recognized key type."""
    return KEY_LINE_PATTERN.match(line.lstrip()) is not None


def disable_line(line: str) -> str:
    """Comment out an invalid entry and tag it."""
    return f"#{line}{INVALID_KEY_MARKER}"


def sanitize_lines(lines: Iterable[str]) -> Tuple[List[str], int]:
    """Comment out every non-blank line that does not look like a key.

    Args:
        lines: Lines without trailing newlines

    Returns:
        Tuple of the rewritten lines and how many were disabled
    """
    result: List[str] = []
    disabled = 0
    for line in lines:
        if not line.strip() or is_valid_key_line(line):
            result.append(line)
        else:
            result.append(disable_line(line))
            disabled += 1
    return result, disabled


class AuthorizedKeys:
    """Operations on a single authorized_keys file."""

    def __init__(self, ssh_dir: Path, file_manager: FileManager) -> None:
        self.ssh_dir = ssh_dir
        self.path = ssh_dir / "authorized_keys"
        self.backup_path = ssh_dir / "authorized_keys.bak"
        self.file_manager = file_manager

    def bootstrap(self) -> None:
        """Ensure ~/.ssh (0700) and authorized_keys (0600) exist.

        Raises:
            BootstrapError: If either cannot be created
        """
        try:
            if self.file_manager.ensure_directory(self.ssh_dir, SSH_DIR_MODE):
                logger.info("ssh_dir_ready", path=str(self.ssh_dir), mode="700")
            if self.file_manager.ensure_file(self.path, AUTHORIZED_KEYS_MODE):
                logger.info("authorized_keys_ready", path=str(self.path), mode="600")
        except OSError as e:
            raise BootstrapError(f"Cannot prepare {self.ssh_dir}: {e}") from e

    def sanitize(self) -> Optional[int]:
        """Back up the file, then comment out lines that are not keys.

        Returns:
            Number of disabled lines, or None if the file does not exist
        """
        if not self.path.is_file():
            logger.info("authorized_keys_not_found_skipped", path=str(self.path))
            return None

        logger.info("sanitizing_authorized_keys", path=str(self.path))
        self.file_manager.backup_file(self.path)

        original = self.file_manager.read_file(self.path)
        lines, disabled = sanitize_lines(original.splitlines())
        content = "".join(f"{line}\n" for line in lines)

        if content != original:
            self.file_manager.write_file(self.path, content)

        logger.info("invalid_keys_commented", disabled=disabled)
        return disabled

    def add_key(self, key: str) -> bool:
        """Append key unless the exact string is already present.

        Returns:
            True if the key was appended
        """
        content = self.file_manager.read_file(self.path)
        if key in content:
            logger.info("key_already_present", key=_short(key))
            return False

        prefix = "" if not content or content.endswith("\n") else "\n"
        self.file_manager.append_file(self.path, f"{prefix}{key}\n")
        logger.info("key_added", key=_short(key))
        return True

    def add_keys(self, keys: Iterable[str]) -> Tuple[int, int]:
        """Add each key in order.

        Returns:
            Tuple of (added, skipped) counts
        """
        added = skipped = 0
        for key in keys:
            if self.add_key(key):
                added += 1
            else:
                skipped += 1
        return added, skipped


def _short(key: str) -> str:
    parts = key.split()
    if len(parts) < 2:
        return key[:32]
    blob = parts[1]
    tail = " ".join(parts[2:])
    return f"{parts[0]} ...{blob[-12:]} {tail}".rstrip()
