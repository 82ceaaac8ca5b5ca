"""Target path normalization and quoting."""

import os
import stat
from collections.abc import Sequence
from pathlib import Path

from exifcmd.errors import InvalidInputError

QUOTE_CHARS = ('"', "'")

PathLike = str | os.PathLike


def strip_quotes(text: str) -> str:
    """Remove one pair of matching surrounding quotes, if present."""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in QUOTE_CHARS:
        return text[1:-1]
    return text


def double_quote(text: str) -> str:
    """Wrap text in double quotes so the shell sees it as one token."""
    if text.startswith(QUOTE_CHARS):
        return text
    return f'"{text}"'


class Target:
    """One or more absolute file system paths for exiftool to operate on."""

    def __init__(self, paths: Sequence[str], is_directory: bool = False) -> None:
        if not paths:
            raise InvalidInputError("A path to image or directory is required.")
        self.paths = tuple(paths)
        self.is_directory = is_directory

    @classmethod
    def resolve(
        cls,
        path_or_paths: PathLike | Sequence[PathLike],
        cwd: Path,
        resolve_relative: bool = True,
    ) -> "Target":
        """Build a target, resolving relative paths against cwd."""
        if isinstance(path_or_paths, (str, os.PathLike)):
            raw_paths = [path_or_paths]
        else:
            raw_paths = list(path_or_paths)

        paths = []
        for raw in raw_paths:
            text = strip_quotes(os.fspath(raw).strip())
            if not text:
                raise InvalidInputError("A path to image or directory is required.")
            if not os.path.isabs(text):
                if not resolve_relative:
                    raise InvalidInputError(
                        f"Relative paths are not accepted: {text}. "
                        "Use a fully qualified path, starting from root /."
                    )
                text = os.path.join(os.fspath(cwd), text)
            resolved = os.path.normpath(text)
            if not resolved.startswith("/"):
                raise InvalidInputError(
                    "The file system path to image must be a fully qualified path, "
                    "starting from root /."
                )
            paths.append(resolved)
        return cls(paths)

    def inspect(self) -> list[os.stat_result]:
        """Stat every path and record whether the target is a directory.

        Raises OSError when a path does not exist or cannot be read.
        """
        stats = [os.stat(p) for p in self.paths]
        self.is_directory = any(stat.S_ISDIR(s.st_mode) for s in stats)
        return stats

    @property
    def path(self) -> str:
        return self.paths[0]

    def quoted(self) -> str:
        return " ".join(self.argv())

    def argv(self) -> list[str]:
        return [double_quote(p) for p in self.paths]

    def __repr__(self) -> str:
        return f"Target({', '.join(self.paths)})"
