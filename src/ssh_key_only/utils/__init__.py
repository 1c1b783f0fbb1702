"""Utility modules for ssh-key-only."""

from ssh_key_only.utils.command import CommandExecutor
from ssh_key_only.utils.file import FileManager

__all__ = ["CommandExecutor", "FileManager"]
