"""The Exiftool command builder and runner."""

import logging
import os
import re
from collections.abc import Iterable, Sequence

from exifcmd.command import NULL_ISLAND, POINT_NEMO, Location, OptionSet, Target
from exifcmd.command.location import STRIP_LOCATION_TAGS
from exifcmd.command.options import normalize_tags
from exifcmd.command.target import double_quote
from exifcmd.config import Config
from exifcmd.errors import (
    ExiftoolError,
    InvalidInputError,
    OutputParseError,
    ProcessExecutionError,
    errno_name,
)
from exifcmd.models import MetadataResult, PathInfo, Result, StripResult, WriteResult, XmpPacket
from exifcmd.runner import (
    ProcessInvoker,
    count_updated_files,
    find_executable,
    get_version,
    parse_json_output,
    parse_xml_output,
)
from exifcmd.runner.invoker import ExecutionResult, parse_diagnostics
from exifcmd.shortcuts import config_file_exists, create_config_file, get_editor
from exifcmd.shortcuts.config_file import normalize_config_path
from exifcmd.shortcuts.store import ShortcutEditor


logger = logging.getLogger(__name__)

# Full or per-group metadata stripping, e.g. -all= or -EXIF:all=
STRIP_TAG_PATTERN = re.compile(r"^-(?:[\w-]+:)?all=", re.IGNORECASE)

# A raw query that already names the exiftool executable.
RAW_EXECUTABLE_PATTERN = re.compile(r"^(?:/.*/)?exiftool\s")

PathArg = str | os.PathLike


class Exiftool:
    """Composes, runs and parses exiftool commands for one target.

    Construct with defaults, then call ``init()`` with the file(s) or
    directory to work on. Setters mutate the option set and recompose the
    command immediately. An instance is not safe to share between threads.
    """

    def __init__(
        self,
        config: Config | None = None,
        invoker: ProcessInvoker | None = None,
    ) -> None:
        self.config = config or Config()
        self.invoker = invoker or ProcessInvoker(self.config.invoker)
        self._config_path = normalize_config_path(self.config.config_path)
        self._options = OptionSet(
            self._config_path,
            shortcut=self.config.shortcut,
            excluded_extensions=self.config.excluded_extensions,
        )
        self._target: Target | None = None
        self._executable: str | None = None
        self._version: str | None = None
        self._command: str | None = None

    def init(self, path_or_paths: PathArg | Sequence[PathArg] | None = None) -> "Exiftool":
        """Resolve the executable, set the target and make sure a config file exists."""
        if not path_or_paths and self._target is None:
            raise InvalidInputError("A path to image or directory is required.")
        if path_or_paths:
            self._set_path_or_raise(path_or_paths)

        if self.has_exiftool_config_file():
            logger.debug("exiftool.config file exists")
        else:
            logger.debug("missing exiftool.config file, creating %s", self._config_path)
            created = self.create_exiftool_config_file()
            if not created.ok:
                logger.warning("could not create exiftool.config file: %s", created.error)

        if self._executable is None:
            self.which()
            self.version()
        self._compose()
        return self

    # Executable

    def which(self) -> str:
        """Full path of the exiftool executable, looked up once per instance."""
        if self._executable is None:
            self._executable = find_executable(self.config.executable_name)
        return self._executable

    def version(self) -> str:
        if self._version is None:
            self._version = get_version(self.which())
        return self._version

    # Target

    def set_path(self, path_or_paths: PathArg | Sequence[PathArg] | None) -> Result:
        """Set the file(s) or directory exiftool should process."""
        if path_or_paths is None or path_or_paths == "":
            return Result(error="A path to image or directory is required.")
        target = Target.resolve(
            path_or_paths,
            self.config.cwd,
            resolve_relative=self.config.resolve_relative_paths,
        )
        try:
            target.inspect()
        except OSError as e:
            logger.debug("cannot stat %s: %s", target, e)
            return Result(error=str(e), error_code=errno_name(e))
        self._target = target
        self._compose()
        return Result(value=True)

    def get_path(self) -> PathInfo:
        if self._target is None:
            return PathInfo(error="Path to an image file or image directory is not set.")
        path = self._target.path
        is_dir = self._target.is_directory
        return PathInfo(
            value=True,
            file=None if is_dir else os.path.basename(path),
            dir=path if is_dir else os.path.dirname(path),
            path=path,
        )

    @property
    def target(self) -> Target | None:
        return self._target

    # Command composition

    @property
    def command(self) -> str | None:
        return self._command

    @property
    def options(self) -> OptionSet:
        return self._options

    def get_options(self) -> str:
        return self._options.to_string(is_directory=self._is_directory())

    def get_command_argv(self) -> list[str]:
        return self._argv()

    def _is_directory(self) -> bool:
        return self._target is not None and self._target.is_directory

    def _argv(self, options: OptionSet | None = None) -> list[str]:
        options = options or self._options
        argv = [self._executable or self.config.executable_name]
        argv += options.to_argv(is_directory=self._is_directory())
        if self._target is not None:
            argv += self._target.argv()
        return argv

    def _write_argv(self, tokens: Iterable[str]) -> list[str]:
        if self._target is None:
            raise InvalidInputError("A path to image or directory is required.")
        argv = [self.which()]
        argv += self._options.to_argv(for_write=True)
        argv += list(tokens)
        argv += self._target.argv()
        return argv

    def _compose(self) -> None:
        self._command = " ".join(self._argv())
        logger.debug("command: %s", self._command)

    def _apply(self, result: Result) -> Result:
        if result.ok:
            self._compose()
        return result

    # Option setters

    def set_output_format(self, fmt: str = "json") -> Result:
        return self._apply(self._options.set_output_format(fmt))

    def set_shortcut(self, shortcut: str | None) -> Result:
        return self._apply(self._options.set_shortcut(shortcut))

    def set_metadata_tags(self, tags: str | Sequence[str] | None) -> Result:
        return self._apply(self._options.set_tag_list(tags))

    def set_output_as_binary(self, enabled: bool = True) -> Result:
        return self._apply(self._options.set_toggle("binary_format", enabled))

    def set_use_struct(self, enabled: bool = True) -> Result:
        return self._apply(self._options.set_toggle("struct_format", enabled))

    def set_mwg(self, enabled: bool = True) -> Result:
        return self._apply(self._options.set_toggle("mwg", enabled))

    def set_overwrite_original(self, enabled: bool = True) -> Result:
        return self._apply(self._options.set_toggle("overwrite_original", enabled))

    def set_gps_coordinates_output_format(self, fmt: str = "gps") -> Result:
        return self._apply(self._options.set_gps_format(fmt))

    def get_extensions_to_exclude(self) -> list[str]:
        return self._options.excluded_extensions

    def set_extensions_to_exclude(
        self,
        add: Sequence[str] | None = None,
        remove: Sequence[str] | None = None,
    ) -> Result:
        self._options.update_excluded_extensions(add=add, remove=remove)
        return self._apply(Result(value=True))

    # Config file and shortcuts

    def get_config_path(self) -> Result:
        if not str(self._config_path):
            return Result(error="No path set for the exiftool.config file.")
        return Result(value=str(self._config_path))

    def set_config_path(self, new_path: PathArg | None) -> Result:
        """Point at a different exiftool.config; the file must already exist."""
        if not new_path:
            return Result(
                error="A valid file system path to an exiftool.config file is required."
            )
        path = normalize_config_path(new_path)
        try:
            os.stat(path)
        except OSError as e:
            return Result(value=False, error=str(e), error_code=errno_name(e))
        self._config_path = path
        self._options.set_config_path(path)
        self._compose()
        return Result(value=True)

    def has_exiftool_config_file(self) -> bool:
        return config_file_exists(self._config_path)

    def create_exiftool_config_file(self) -> Result:
        return create_config_file(self._config_path)

    def _shortcuts(self) -> ShortcutEditor:
        return get_editor(self.config.shortcut_editor, self._config_path)

    def has_shortcut(self, shortcut: str | None) -> bool:
        return self._shortcuts().has(shortcut)

    def add_shortcut(self, definition: str | None) -> Result:
        return self._shortcuts().add(definition)

    def remove_shortcut(self, shortcut: str | None) -> Result:
        return self._shortcuts().remove(shortcut)

    # Reading

    def get_metadata(
        self,
        file_or_dir: PathArg | Sequence[PathArg] | None = None,
        shortcut: str | None = None,
        *tags: str | Sequence[str],
    ) -> MetadataResult:
        """Run the composed command and return the parsed metadata.

        Extra tags replace the instance's tag list. Raises InvalidInputError
        before anything runs if a stripping tag such as -all= would end up in
        the command, whether it comes from the extra tags or from a tag list
        set earlier.
        """
        if file_or_dir:
            self._set_path_or_raise(file_or_dir)
        if shortcut:
            self._raise_for(self.set_shortcut(shortcut))
        flat_tags = normalize_tags(_flatten(tags))
        if flat_tags:
            self._reject_strip_tags(flat_tags)
            self._raise_for(self.set_metadata_tags(flat_tags), "tag list option failed")
        # A tag list set earlier through set_metadata_tags() ends up in the read too.
        self._reject_strip_tags(
            self._options["tag_list"].split() + [self._options["shortcut"]]
        )
        self._require_target()
        self.which()
        self._compose()
        return self._read(self._argv(), self._options.output_format)

    def get_thumbnails(self, image: PathArg | None = None) -> MetadataResult:
        """Extract embedded preview images as base64 JSON values."""
        if image:
            self._set_path_or_raise(image)
        self._require_target()
        self.which()
        options = self._options.derive(
            output_format="-json",
            binary_format="-b",
            shortcut="-Preview:all",
            tag_list="",
        )
        return self._read(self._argv(options), "json")

    def get_xmp_packet(self) -> XmpPacket:
        self._require_file("No image was specified to extract the XMP packet from.")
        argv = [self.which(), self._options["config"], "-xmp", "-b", *self._target.argv()]
        result = self.invoker.run(argv)
        packet = result.stdout.strip()
        if not packet:
            raise OutputParseError("No XMP packet found in image.", command=result.command)
        return XmpPacket(xmp=packet, command=result.command)

    def raw(self, query: str) -> MetadataResult:
        """Run a fully composed exiftool query, bypassing the option set."""
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError("No query was provided for exiftool to execute.")
        query = query.strip()
        if RAW_EXECUTABLE_PATTERN.match(query):
            argv = [query]
        else:
            argv = [self.which(), query]
        result = self.invoker.run(argv)
        self._raise_for_stderr(result, f"exiftool failed to execute query: {query}")
        output = result.stdout.strip()
        if output.startswith("<"):
            return parse_xml_output(output, result.command)
        return parse_json_output(output, result.command)

    def _read(self, argv: list[str], output_format: str) -> MetadataResult:
        result = self.invoker.run(argv)
        self._raise_for_stderr(result, result.stderr.strip())
        if output_format == "xml":
            return parse_xml_output(result.stdout, result.command)
        return parse_json_output(result.stdout, result.command)

    # Writing

    def write_metadata_to_tag(self, metadata: str | Sequence[str]) -> WriteResult:
        """Write tag assignments such as '-IPTC:Headline="Great Photo"'."""
        self._require_file("No image was specified to write new metadata content to.")
        return self._write([_tag_string(metadata)])

    def clear_metadata_from_tag(self, tags: str | Sequence[str]) -> WriteResult:
        """Empty the given tags while keeping them in the file."""
        self._require_file("No image was specified to clear metadata from tags.")
        if isinstance(tags, (list, tuple)):
            tags = [
                t if "=" in t else f"{normalize_tags([t])[0]}^="
                for t in tags
                if t and t.strip()
            ]
        return self._write([_tag_string(tags)])

    def strip_metadata(self) -> StripResult:
        """Remove all metadata, keeping <file>_original unless overwrite is on."""
        self._require_file("No image was specified to strip all metadata from.")
        written = self._write(["-all="], confirm=True)
        result = StripResult(**vars(written))
        keeps_backup = not self._options["overwrite_original"]
        if result.ok and result.files_updated and keeps_backup and len(self._target.paths) == 1:
            result.original = f"{self._target.path}_original"
        return result

    def set_thumbnail(self, thumbnail: PathArg, image: PathArg | None = None) -> WriteResult:
        """Embed a JPEG file as the image's EXIF thumbnail."""
        if not thumbnail:
            raise InvalidInputError("A path to the thumbnail image is required.")
        thumb = Target.resolve(thumbnail, self.config.cwd, self.config.resolve_relative_paths)
        try:
            thumb.inspect()
        except OSError as e:
            raise InvalidInputError(
                f"Thumbnail image not found: {thumb.path}", error_code=errno_name(e)
            ) from e
        if image:
            self._set_path_or_raise(image)
        self._require_file("No image was specified to embed the thumbnail in.")
        return self._write([double_quote(f"-ThumbnailImage<={thumb.path}")], confirm=True)

    def set_location(self, location: Location | dict) -> WriteResult:
        """Write GPS coordinates and locality names."""
        self._require_file("No image file set yet.")
        if isinstance(location, dict):
            location = Location(**location)
        return self._write(location.to_tags(), confirm=True)

    def null_island(self) -> WriteResult:
        return self.set_location(NULL_ISLAND)

    def nemo(self) -> WriteResult:
        return self.set_location(POINT_NEMO)

    def strip_location(self) -> WriteResult:
        self._require_file("No image file set yet.")
        return self._write(STRIP_LOCATION_TAGS, confirm=True)

    def _write(self, tokens: Iterable[str], confirm: bool = False) -> WriteResult:
        argv = self._write_argv(tokens)
        command = " ".join(argv)
        try:
            result = self.invoker.run(argv)
            self._raise_for_stderr(result, f"exiftool reported: {result.stderr.strip()}")
            stdout = result.stdout.strip()
            updated = count_updated_files(stdout, result.command) if confirm else None
        except ExiftoolError as e:
            logger.warning("exiftool write failed: %s", e.message)
            return WriteResult(
                value=False,
                error=e.message,
                error_code=e.error_code,
                command=e.command or command,
            )
        logger.info("%s", stdout or command)
        return WriteResult(value=True, command=command, stdout=stdout, files_updated=updated)

    # Validation

    def _set_path_or_raise(self, path_or_paths: PathArg | Sequence[PathArg]) -> None:
        result = self.set_path(path_or_paths)
        if not result.ok:
            raise InvalidInputError(result.error or "Invalid path.", error_code=result.error_code)

    def _raise_for(self, result: Result, message: str | None = None) -> None:
        if not result.ok:
            raise InvalidInputError(message or result.error or "Invalid option.")

    def _raise_for_stderr(self, result: ExecutionResult, message: str) -> None:
        if result.stderr.strip():
            raise ProcessExecutionError(
                message,
                command=result.command,
                exit_code=result.exit_code,
                stdout=result.stdout,
                stderr=result.stderr,
                diagnostics=parse_diagnostics(result.stderr),
            )

    def _reject_strip_tags(self, tags: Iterable[str]) -> None:
        if any(STRIP_TAG_PATTERN.match(tag) for tag in tags):
            raise InvalidInputError(
                "Can't include metadata stripping -all= tag in get metadata request.",
                command=self._command,
            )

    def _require_target(self) -> None:
        if self._target is None:
            raise InvalidInputError("A path to image or directory is required.")

    def _require_file(self, message: str) -> None:
        if self._target is None:
            raise InvalidInputError(message)
        if self._target.is_directory:
            raise InvalidInputError(
                "A directory was given.  Use a path to a specific file instead."
            )

    def __repr__(self) -> str:
        return f"Exiftool({self._command or self.config.executable_name})"


def _flatten(tags: Iterable[str | Sequence[str]]) -> list[str]:
    flat: list[str] = []
    for tag in tags:
        if isinstance(tag, str):
            flat.extend(tag.split())
        elif tag is not None:
            flat.extend(_flatten(tag))
    return flat


def _tag_string(metadata: str | Sequence[str]) -> str:
    if isinstance(metadata, str):
        tag_string = metadata.strip()
    elif isinstance(metadata, (list, tuple)):
        tag_string = " ".join(str(m).strip() for m in metadata if m)
    else:
        raise InvalidInputError(
            f"Expected a string or an array of strings.  Received: {type(metadata).__name__}"
        )
    if not tag_string:
        raise InvalidInputError("One or more metadata tags are required")
    return tag_string
