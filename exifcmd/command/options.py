"""Ordered exiftool option slots and their serialization."""

import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

from exifcmd.command.target import double_quote
from exifcmd.errors import InvalidInputError
from exifcmd.models import Result


logger = logging.getLogger(__name__)

# Slot order is flag order on the command line. -config must come first.
SLOT_ORDER = (
    "config",
    "output_format",
    "tag_list",
    "shortcut",
    "tag_family",
    "compact_format",
    "quiet",
    "exclude_types",
    "binary_format",
    "gps_format",
    "struct_format",
    "mwg",
    "overwrite_original",
)

WRITE_SLOTS = ("config", "mwg", "overwrite_original")

OUTPUT_FORMATS = {
    "json": "-json",
    "xml": "-xmlFormat",
}

TOGGLES = {
    "binary_format": "-b",
    "struct_format": "-struct",
    "mwg": "-use MWG",
    "overwrite_original": "-overwrite_original",
}

GPS_FORMAT_ALIASES = {
    "gps": "%.6f",
    "decimal": "%.6f",
    "default": "%.6f",
    "signed": "%+.6f",
}

GPS_FORMAT_DISABLED = {"", "none"}


def normalize_tags(tags: str | Iterable[str]) -> list[str]:
    """Prefix every tag with '-' unless it already has one."""
    if isinstance(tags, str):
        items = tags.split()
    else:
        items = [str(t).strip() for t in tags]
    return [t if t.startswith("-") else f"-{t}" for t in items if t]


def serialize_extensions(extensions: Iterable[str]) -> str:
    return " ".join(f"--ext {ext}" for ext in extensions)


def config_flag(config_path: str | Path) -> str:
    return f"-config {double_quote(str(config_path))}"


class OptionSet:
    """Fixed schema of exiftool flags; an empty value means the slot is off."""

    def __init__(
        self,
        config_path: str | Path,
        shortcut: str = "BasicShortcut",
        excluded_extensions: Iterable[str] = (),
    ) -> None:
        self._values: dict[str, str] = dict.fromkeys(SLOT_ORDER, "")
        self._values.update(
            {
                "config": config_flag(config_path),
                "output_format": OUTPUT_FORMATS["json"],
                "shortcut": f"-{shortcut}" if shortcut else "",
                "tag_family": "-G",
                "compact_format": "-s3",
                "quiet": "-q",
                "gps_format": f'-c "{GPS_FORMAT_ALIASES["default"]}"',
            }
        )
        self._extensions: list[str] = []
        self.update_excluded_extensions(add=list(excluded_extensions))

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __setitem__(self, name: str, value: str) -> None:
        if name not in self._values:
            raise KeyError(f"Unknown option slot: {name}")
        self._values[name] = value

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def items(self) -> list[tuple[str, str]]:
        return list(self._values.items())

    def derive(self, **overrides: str) -> "OptionSet":
        """Return an independent copy with some slots replaced."""
        clone = OptionSet.__new__(OptionSet)
        clone._values = dict(self._values)
        clone._extensions = list(self._extensions)
        for name, value in overrides.items():
            clone[name] = value
        return clone

    # Serialization

    def _is_active(self, name: str, value: str, is_directory: bool, for_write: bool) -> bool:
        if not value:
            return False
        if for_write:
            return name in WRITE_SLOTS
        if name == "overwrite_original":
            return False
        if name == "exclude_types":
            return is_directory
        return True

    def active_values(self, is_directory: bool = False, for_write: bool = False) -> list[str]:
        """Flag values that belong on the command line, in slot order."""
        if is_directory and not for_write and not self._values["exclude_types"]:
            self._values["exclude_types"] = serialize_extensions(self._extensions)
        return [
            value
            for name, value in self._values.items()
            if self._is_active(name, value, is_directory, for_write)
        ]

    def to_string(self, is_directory: bool = False, for_write: bool = False) -> str:
        return " ".join(self.active_values(is_directory, for_write))

    def to_argv(self, is_directory: bool = False, for_write: bool = False) -> list[str]:
        return self.active_values(is_directory, for_write)

    # Setters

    def set_output_format(self, fmt: str | None) -> Result:
        flag = OUTPUT_FORMATS.get((fmt or "").strip().lower())
        if flag is None:
            return Result(
                value=False,
                error=f"Unsupported output format: {fmt}. Available: {list(OUTPUT_FORMATS)}",
            )
        self._values["output_format"] = flag
        return Result(value=True)

    @property
    def output_format(self) -> str:
        for name, flag in OUTPUT_FORMATS.items():
            if self._values["output_format"] == flag:
                return name
        return "json"

    def set_shortcut(self, shortcut: str | None) -> Result:
        if not isinstance(shortcut, str) or not shortcut.strip():
            return Result(value=False, error="Shortcut must be a string value.")
        name = shortcut.strip()
        if "=" in name:
            return Result(value=False, error=f"Shortcut can't be a tag assignment: {name}")
        self._values["shortcut"] = name if name.startswith("-") else f"-{name}"
        return Result(value=True)

    def set_tag_list(self, tags: str | Sequence[str] | None) -> Result:
        if tags is None or (isinstance(tags, str) and not tags.strip()):
            return Result(value=False, error="One or more metadata tags are required")
        normalized = normalize_tags(tags)
        if not normalized:
            return Result(value=False, error="One or more metadata tags are required")
        self._values["tag_list"] = " ".join(normalized)
        return Result(value=True)

    def clear_tag_list(self) -> None:
        self._values["tag_list"] = ""

    def set_toggle(self, name: str, enabled: bool) -> Result:
        self._values[name] = TOGGLES[name] if enabled else ""
        return Result(value=True)

    def set_gps_format(self, fmt: str | None) -> Result:
        key = (fmt or "").strip()
        if key.lower() in GPS_FORMAT_DISABLED:
            self._values["gps_format"] = ""
            return Result(value=True)
        pattern = GPS_FORMAT_ALIASES.get(key.lower(), key)
        if "%" not in pattern or '"' in pattern:
            return Result(
                value=False,
                error=f"Unsupported GPS coordinate format: {fmt}. "
                f"Use one of {list(GPS_FORMAT_ALIASES)} or a printf-style format.",
            )
        self._values["gps_format"] = f'-c "{pattern}"'
        return Result(value=True)

    def set_config_path(self, config_path: str | Path) -> None:
        self._values["config"] = config_flag(config_path)

    # Excluded extensions

    @property
    def excluded_extensions(self) -> list[str]:
        return list(self._extensions)

    def update_excluded_extensions(
        self,
        add: Sequence[str] | None = None,
        remove: Sequence[str] | None = None,
    ) -> None:
        """Add and remove extensions, then reset the cached --ext flags."""
        if add is not None:
            if not isinstance(add, (list, tuple)):
                raise InvalidInputError("Expecting an array of file extensions to be added.")
            for ext in add:
                normalized = str(ext).strip().lstrip(".").lower()
                if normalized and normalized not in self._extensions:
                    self._extensions.append(normalized)
        if remove is not None:
            if not isinstance(remove, (list, tuple)):
                raise InvalidInputError("Expecting an array of file extensions to be removed.")
            for ext in remove:
                normalized = str(ext).strip().lstrip(".").lower()
                if normalized in self._extensions:
                    self._extensions.remove(normalized)
        self._extensions.sort()
        self._values["exclude_types"] = ""
        logger.debug("Excluded extensions: %s", self._extensions)
