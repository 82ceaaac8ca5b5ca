"""Editing shortcut definitions inside an exiftool.config file."""

import logging
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Protocol

from exifcmd.errors import errno_name
from exifcmd.models import Result
from exifcmd.shortcuts.config_file import BACKUP_SUFFIX, normalize_config_path


logger = logging.getLogger(__name__)

# New definitions go right after the opening "%...Shortcuts = (" line.
INSERT_LINE_INDEX = 1
DEFINITION_INDENT = "    "


class ShortcutEditor(Protocol):
    """Protocol for shortcut editors."""

    name: str
    config_path: Path

    def has(self, shortcut: str | None) -> bool:
        """Return True if the shortcut appears in the config file."""

    def add(self, definition: str | None) -> Result:
        """Insert a full shortcut definition, e.g. "Name => ['tag', ...]"."""

    def remove(self, shortcut: str | None) -> Result:
        """Delete every line mentioning the shortcut."""


class ShortcutStore:
    """Read-modify-write editor with a backup copy and an atomic rename.

    The file format stays exactly what exiftool itself loads: one definition
    per line inside the ``Shortcuts = ( ... );`` block.
    """

    name = "file"

    def __init__(self, config_path: str | os.PathLike) -> None:
        self.config_path = normalize_config_path(config_path)

    @property
    def backup_path(self) -> Path:
        return self.config_path.with_name(self.config_path.name + BACKUP_SUFFIX)

    def has(self, shortcut: str | None) -> bool:
        # Substring matches count: "Basic" is found inside "BasicShortcut".
        if not shortcut:
            return False
        try:
            text = self.config_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.debug("cannot read %s: %s", self.config_path, e)
            return False
        return re.search(re.escape(shortcut), text, re.IGNORECASE) is not None

    def add(self, definition: str | None) -> Result:
        if not isinstance(definition, str) or not definition.strip():
            return Result(value=False, error="Shortcut name must be provided as a string.")
        line = f"{DEFINITION_INDENT}{definition.strip().rstrip(',')},\n"

        def insert(lines: list[str]) -> list[str]:
            return lines[:INSERT_LINE_INDEX] + [line] + lines[INSERT_LINE_INDEX:]

        return self._rewrite(insert)

    def remove(self, shortcut: str | None) -> Result:
        if not isinstance(shortcut, str) or not shortcut.strip():
            return Result(value=False, error="Shortcut name must be provided as a string.")
        name = shortcut.strip()
        return self._rewrite(lambda lines: [ln for ln in lines if name not in ln])

    def _rewrite(self, edit) -> Result:
        try:
            lines = self.config_path.read_text(encoding="utf-8").splitlines(keepends=True)
            shutil.copy2(self.config_path, self.backup_path)
            self._replace(edit(lines))
        except OSError as e:
            logger.warning("failed to update %s: %s", self.config_path, e)
            return Result(value=False, error=str(e), error_code=errno_name(e))
        logger.info("updated shortcuts in %s", self.config_path)
        return Result(value=True)

    def _replace(self, lines: list[str]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.config_path.name}.", dir=self.config_path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.writelines(lines)
            shutil.copymode(self.config_path, tmp_name)
            os.replace(tmp_name, self.config_path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
