"""Shortcut editing through grep and sed, for parity with shell workflows."""

import logging
import os
import re
import subprocess
import sys

from exifcmd.command.target import double_quote
from exifcmd.models import Result
from exifcmd.shortcuts.config_file import BACKUP_SUFFIX, normalize_config_path


logger = logging.getLogger(__name__)


def insert_command(definition: str, config_path: str, platform: str | None = None) -> str:
    """sed command inserting the definition as line 2, keeping a backup."""
    platform = platform or sys.platform
    target = double_quote(config_path)
    if platform == "darwin":
        # BSD sed wants the suffix glued to -i and the text on its own line.
        return f"sed -i'{BACKUP_SUFFIX}' -e '2i\\\n    {definition},' {target}"
    return f'sed -i{BACKUP_SUFFIX} "2i\\    {definition}," {target}'


def delete_command(shortcut: str, config_path: str, platform: str | None = None) -> str:
    """sed command deleting every line containing the shortcut name."""
    platform = platform or sys.platform
    target = double_quote(config_path)
    if platform == "darwin":
        return f"sed -i'{BACKUP_SUFFIX}' -e '/{shortcut}/d' {target}"
    return f'sed -i{BACKUP_SUFFIX} "/{shortcut}/d" {target}'


class SedShortcutEditor:
    """Edits the config file in place with grep/sed, picking BSD or GNU syntax."""

    name = "sed"

    def __init__(self, config_path: str | os.PathLike, platform: str | None = None) -> None:
        self.config_path = normalize_config_path(config_path)
        self.platform = platform or sys.platform

    def has(self, shortcut: str | None) -> bool:
        if not shortcut:
            return False
        command = f'grep -i "{shortcut}" {double_quote(str(self.config_path))}'
        output = _shell(command)
        logger.debug("grep -i: %s", output.stdout)
        return re.search(re.escape(shortcut), output.stdout, re.IGNORECASE) is not None

    def add(self, definition: str | None) -> Result:
        if not isinstance(definition, str) or not definition.strip():
            return Result(value=False, error="Shortcut name must be provided as a string.")
        command = insert_command(
            definition.strip().rstrip(","), str(self.config_path), self.platform
        )
        return self._edit(command)

    def remove(self, shortcut: str | None) -> Result:
        if not isinstance(shortcut, str) or not shortcut.strip():
            return Result(value=False, error="Shortcut name must be provided as a string.")
        return self._edit(delete_command(shortcut.strip(), str(self.config_path), self.platform))

    def _edit(self, command: str) -> Result:
        logger.debug("sed command: %s", command)
        output = _shell(command)
        if output.stderr == "" and output.returncode == 0:
            return Result(value=True, command=command)
        return Result(value=False, error=output.stderr.strip(), command=command)


def _shell(command: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        command,
        shell=True,
        capture_output=True,
        text=True,
        check=False,
    )
