"""Shortcut definitions stored in the exiftool.config file."""

import os

from exifcmd.shortcuts.config_file import (
    DEFAULT_CONFIG,
    config_file_exists,
    create_config_file,
)
from exifcmd.shortcuts.sed import SedShortcutEditor
from exifcmd.shortcuts.store import ShortcutEditor, ShortcutStore


def get_editor(name: str, config_path: str | os.PathLike) -> ShortcutEditor:
    """Get shortcut editor by name."""
    editors: dict[str, type] = {
        "file": ShortcutStore,
        "sed": SedShortcutEditor,
    }
    if name not in editors:
        raise ValueError(f"Unknown shortcut editor: {name}. Available: {list(editors.keys())}")
    return editors[name](config_path)


__all__ = [
    "DEFAULT_CONFIG",
    "config_file_exists",
    "create_config_file",
    "get_editor",
    "SedShortcutEditor",
    "ShortcutEditor",
    "ShortcutStore",
]
