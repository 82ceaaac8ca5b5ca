"""Result types returned by exifcmd operations."""

from dataclasses import dataclass
from typing import Any


@dataclass
class Result:
    """Outcome of an operation that fails soft instead of raising."""

    value: Any = None
    error: str | None = None
    error_code: str | None = None
    command: str | None = None
    stdout: str | None = None

    @property
    def ok(self) -> bool:
        return bool(self.value) and self.error is None


@dataclass
class PathInfo(Result):
    """The current target split into file and directory parts."""

    file: str | None = None
    dir: str | None = None
    path: str | None = None


@dataclass
class WriteResult(Result):
    """Outcome of a command that modifies image files."""

    files_updated: int | None = None


@dataclass
class StripResult(WriteResult):
    """Outcome of stripping all metadata; ``original`` is the predicted backup copy."""

    original: str | None = None


@dataclass
class XmpPacket:
    """Raw XMP packet text extracted from an image."""

    xmp: str
    command: str


class MetadataResult(list):
    """Parsed exiftool output followed by its trailer entries.

    Behaves as the plain list exiftool callers expect (records, then the
    command, format and count trailers) while exposing the pieces by name.
    """

    def __init__(
        self,
        items: list,
        records: list,
        command: str,
        output_format: str,
        count: int,
    ) -> None:
        super().__init__(items)
        self.records = records
        self.command = command
        self.format = output_format
        self.count = count
