"""Line-oriented editing of sshd_config authentication directives.

The daemon config is handled as a list of lines. Each line that looks like a
directive, active or commented out, is parsed into a ``DirectiveLine``;
everything else passes through untouched. Keywords are compared
case-insensitively, as sshd itself does, and the first active occurrence of a
keyword decides its effective value.

New directives are inserted before the first ``Match`` block so they apply
globally rather than to the last conditional block in the file.
"""

import os
import re
from pathlib import Path
from typing import List, Optional, Tuple

import structlog

from ssh_key_only.exceptions import PermissionDeniedError
from ssh_key_only.types import (
    DirectiveChange,
    DirectiveLine,
    DirectiveState,
    SshdChanges,
)
from ssh_key_only.utils.file import FileManager

logger = structlog.get_logger(__name__)

PUBKEY_AUTHENTICATION = "PubkeyAuthentication"
PASSWORD_AUTHENTICATION = "PasswordAuthentication"

_DIRECTIVE_RE = re.compile(
    r"^(?P<keyword>[A-Za-z][A-Za-z0-9]*)(?:\s*=\s*|\s+)(?P<value>\S.*?)\s*$"
)


def parse_directive(line: str) -> Optional[DirectiveLine]:
    """Parse a line into a DirectiveLine, or None if it is not a directive."""
    indent = line[: len(line) - len(line.lstrip())]
    body = line.strip()
    commented = body.startswith("#")
    if commented:
        body = body.lstrip("#").strip()

    match = _DIRECTIVE_RE.match(body)
    if match is None:
        return None
    return DirectiveLine(match.group("keyword"), match.group("value"), commented, indent)


def _matches(line: str, keyword: str) -> Optional[DirectiveLine]:
    directive = parse_directive(line)
    if directive is None or directive.keyword.lower() != keyword.lower():
        return None
    return directive


def directive_state(lines: List[str], keyword: str) -> DirectiveState:
    """Return the effective state of a yes/no directive."""
    seen_commented = False
    for line in lines:
        directive = _matches(line, keyword)
        if directive is None:
            continue
        if directive.commented:
            seen_commented = True
            continue
        if directive.value.lower() == "yes":
            return DirectiveState.ACTIVE_YES
        return DirectiveState.ACTIVE_NO

    return DirectiveState.COMMENTED if seen_commented else DirectiveState.ABSENT


def insertion_index(lines: List[str]) -> int:
    """Index where a global directive can be inserted: before the first Match block."""
    for index, line in enumerate(lines):
        directive = parse_directive(line)
        if (
            directive is not None
            and not directive.commented
            and directive.keyword.lower() == "match"
        ):
            return index
    return len(lines)


def _insert(lines: List[str], line: str) -> List[str]:
    index = insertion_index(lines)
    return lines[:index] + [line] + lines[index:]


def _rewrite(lines: List[str], targets: List[Tuple[int, str]], text: str) -> List[str]:
    result = list(lines)
    for index, indent in targets:
        result[index] = f"{indent}{text}"
    return result


def ensure_pubkey_authentication(
    lines: List[str], normalize: bool = False
) -> Tuple[List[str], DirectiveChange]:
    """Leave exactly one active global ``PubkeyAuthentication yes`` line.

    Only the global section, everything before the first ``Match`` block, is
    considered; conditional blocks pass through untouched. When the global
    value is not already ``yes``, every PubkeyAuthentication line there,
    commented or not, is removed and a fresh one added at the end of the
    section. Otherwise the first active line is kept and later active
    duplicates are dropped; commented variants are dropped only when
    ``normalize`` is set.
    """
    wanted = f"{PUBKEY_AUTHENTICATION} yes"
    boundary = insertion_index(lines)
    section, scoped = lines[:boundary], lines[boundary:]

    if directive_state(section, PUBKEY_AUTHENTICATION) != DirectiveState.ACTIVE_YES:
        kept = [line for line in section if _matches(line, PUBKEY_AUTHENTICATION) is None]
        return kept + [wanted] + scoped, DirectiveChange.ADDED

    result: List[str] = []
    seen_active = False
    dropped = False
    for line in section:
        directive = _matches(line, PUBKEY_AUTHENTICATION)
        if directive is not None:
            if directive.commented:
                if normalize:
                    dropped = True
                    continue
            elif seen_active:
                dropped = True
                continue
            else:
                seen_active = True
        result.append(line)

    change = DirectiveChange.DEDUPLICATED if dropped else DirectiveChange.UNCHANGED
    return result + scoped, change


def disable_password_authentication(
    lines: List[str], enforce: bool = False
) -> Tuple[List[str], DirectiveChange]:
    """Turn ``PasswordAuthentication yes`` into ``no``.

    Active ``yes`` lines are flipped in place. Failing that, commented
    ``yes`` lines become active ``no`` lines. If neither exists the file is
    left alone, unless ``enforce`` is set and no active line exists, in
    which case an explicit ``PasswordAuthentication no`` is inserted.
    """
    wanted = f"{PASSWORD_AUTHENTICATION} no"

    active_yes: List[Tuple[int, str]] = []
    commented_yes: List[Tuple[int, str]] = []
    for index, line in enumerate(lines):
        directive = _matches(line, PASSWORD_AUTHENTICATION)
        if directive is None or directive.value.lower() != "yes":
            continue
        if directive.commented:
            commented_yes.append((index, directive.indent))
        else:
            active_yes.append((index, directive.indent))

    if active_yes:
        return _rewrite(lines, active_yes, wanted), DirectiveChange.DISABLED

    if commented_yes:
        return _rewrite(lines, commented_yes, wanted), DirectiveChange.UNCOMMENTED

    state = directive_state(lines[: insertion_index(lines)], PASSWORD_AUTHENTICATION)
    if enforce and state in (DirectiveState.ABSENT, DirectiveState.COMMENTED):
        return _insert(lines, wanted), DirectiveChange.ADDED

    return list(lines), DirectiveChange.UNCHANGED


def find_password_overrides(drop_in_dir: Path) -> List[Path]:
    """Return drop-in files that still enable password authentication."""
    if not drop_in_dir.is_dir():
        return []

    overrides: List[Path] = []
    for conf in sorted(drop_in_dir.glob("*.conf")):
        try:
            content = conf.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            logger.warning("drop_in_unreadable", path=str(conf), error=str(e))
            continue
        if directive_state(content.splitlines(), PASSWORD_AUTHENTICATION) == (
            DirectiveState.ACTIVE_YES
        ):
            overrides.append(conf)
    return overrides


class SshdConfigEditor:
    """Apply the key-only authentication policy to an sshd_config file."""

    def __init__(
        self,
        path: Path,
        file_manager: FileManager,
        normalize: bool = False,
        enforce_password_no: bool = False,
        backup: bool = True,
    ) -> None:
        self.path = path
        self.file_manager = file_manager
        self.normalize = normalize
        self.enforce_password_no = enforce_password_no
        self.backup = backup

    def check_writable(self) -> None:
        """Fail fast when the config cannot be edited.

        Raises:
            PermissionDeniedError: If the file is missing or not writable
        """
        if not (self.path.is_file() and os.access(self.path, os.W_OK)):
            raise PermissionDeniedError(
                f"No permission to edit {self.path}. Run this tool as root."
            )

    def transform(self, lines: List[str]) -> Tuple[List[str], SshdChanges]:
        """Apply both directive rules to lines."""
        lines, pubkey = ensure_pubkey_authentication(lines, normalize=self.normalize)
        lines, password = disable_password_authentication(
            lines, enforce=self.enforce_password_no
        )
        return lines, SshdChanges(pubkey=pubkey, password=password)

    def apply(self) -> SshdChanges:
        """Rewrite the config file when the policy requires it.

        Raises:
            PermissionDeniedError: If the file is not writable
        """
        self.check_writable()
        logger.info("configuring_sshd", path=str(self.path))

        original = self.file_manager.read_file(self.path)
        lines, changes = self.transform(original.splitlines())

        if changes.pubkey == DirectiveChange.UNCHANGED:
            logger.info("pubkey_authentication_already_enabled")
        else:
            logger.info("pubkey_authentication_enabled", change=changes.pubkey.value)

        if changes.password == DirectiveChange.UNCHANGED:
            logger.info("password_authentication_already_disabled_or_unset")
        else:
            logger.info("password_authentication_disabled", change=changes.password.value)

        if changes.changed:
            content = "".join(f"{line}\n" for line in lines)
            if self.backup:
                self.file_manager.backup_file(self.path)
            self.file_manager.write_file(self.path, content)

        return changes
