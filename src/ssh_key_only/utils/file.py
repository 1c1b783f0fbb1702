"""File management utilities."""

import os
import shutil
import stat
from pathlib import Path
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

# Undecodable bytes (e.g. latin-1 key comments) round-trip unchanged.
ENCODING = "utf-8"
ERRORS = "surrogateescape"


class FileManager:
    """Read and write files, honoring dry-run mode."""

    def __init__(self, dry_run: bool = False) -> None:
        """Initialize file manager.

        Args:
            dry_run: If True, log writes instead of performing them
        """
        self.dry_run = dry_run

    def backup_file(self, filepath: Path, suffix: str = ".bak") -> Optional[Path]:
        """Copy file to a sibling backup, replacing any previous backup.

        Args:
            filepath: Path to file to backup
            suffix: Suffix appended to the file name

        Returns:
            Path to backup file or None if source doesn't exist
        """
        if not filepath.exists():
            return None

        backup_path = filepath.with_name(filepath.name + suffix)
        if self.dry_run:
            logger.info("dry_run_backup", source=str(filepath), backup=str(backup_path))
            return backup_path

        shutil.copy2(filepath, backup_path)
        logger.debug("file_backed_up", source=str(filepath), backup=str(backup_path))
        return backup_path

    def ensure_directory(self, path: Path, mode: int) -> bool:
        """Create directory with mode if absent, tighten it if too open.

        Returns:
            True if the directory was created or its mode changed
        """
        if not path.is_dir():
            if self.dry_run:
                logger.info("dry_run_mkdir", path=str(path), mode=oct(mode))
                return True
            path.mkdir(parents=True, exist_ok=True)
            os.chmod(path, mode)
            return True
        return self._tighten(path, mode)

    def ensure_file(self, path: Path, mode: int) -> bool:
        """Create empty file with mode if absent, tighten it if too open.

        Returns:
            True if the file was created or its mode changed
        """
        if not path.exists():
            if self.dry_run:
                logger.info("dry_run_touch", path=str(path), mode=oct(mode))
                return True
            path.touch(mode=mode)
            os.chmod(path, mode)
            return True
        return self._tighten(path, mode)

    def _tighten(self, path: Path, mode: int) -> bool:
        current = stat.S_IMODE(path.stat().st_mode)
        if not current & ~mode & (stat.S_IRWXG | stat.S_IRWXO):
            return False

        logger.warning(
            "permissions_too_open", path=str(path), current=oct(current), wanted=oct(mode)
        )
        if not self.dry_run:
            os.chmod(path, mode)
        return True

    def read_file(self, filepath: Path) -> str:
        """Read file content, empty string if the file does not exist."""
        if not filepath.exists():
            return ""
        with open(filepath, encoding=ENCODING, errors=ERRORS) as f:
            return f.read()

    def write_file(self, filepath: Path, content: str) -> None:
        """Write content to file.

        Args:
            filepath: Path to file
            content: Content to write
        """
        if self.dry_run:
            logger.info("dry_run_write", path=str(filepath), size=len(content))
            return
        with open(filepath, "w", encoding=ENCODING, errors=ERRORS) as f:
            f.write(content)

    def append_file(self, filepath: Path, content: str) -> None:
        """Append content to file.

        Args:
            filepath: Path to file
            content: Content to append
        """
        if self.dry_run:
            logger.info("dry_run_append", path=str(filepath), size=len(content))
            return
        with open(filepath, "a", encoding=ENCODING, errors=ERRORS) as f:
            f.write(content)
