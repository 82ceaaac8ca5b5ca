"""Configuration module for exifcmd."""

from dataclasses import dataclass, field
from pathlib import Path

BUFFER_UNIT_BYTES = 1024 * 1024

DEFAULT_EXCLUDED_EXTENSIONS = ("txt", "js", "json", "mjs", "cjs", "md", "html", "css", "py")


def _get_package_root() -> Path:
    return Path(__file__).parent


@dataclass
class InvokerConfig:
    strategy: str = "exec"
    max_buffer_multiplier: int = 10

    @property
    def max_buffer(self) -> int:
        return BUFFER_UNIT_BYTES * self.max_buffer_multiplier


@dataclass
class Config:
    executable_name: str = "exiftool"
    config_path: Path = field(default_factory=lambda: _get_package_root() / "exiftool.config")
    cwd: Path = field(default_factory=Path.cwd)
    resolve_relative_paths: bool = True
    shortcut: str = "BasicShortcut"
    excluded_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_EXTENSIONS)
    )
    shortcut_editor: str = "file"
    invoker: InvokerConfig = field(default_factory=InvokerConfig)
