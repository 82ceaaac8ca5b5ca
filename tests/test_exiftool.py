"""Tests for the Exiftool class."""

# pylint: disable=redefined-outer-name

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from exifcmd.config import Config
from exifcmd.errors import (
    ExiftoolNotFoundError,
    InvalidInputError,
    OutputParseError,
    ProcessExecutionError,
)
from exifcmd.exiftool import Exiftool
from exifcmd.runner import ProcessInvoker
from exifcmd.runner.invoker import ExecutionResult
from exifcmd.shortcuts import DEFAULT_CONFIG


EXIFTOOL = "/usr/bin/exiftool"


def _runs(stdout: str = "", stderr: str = "", exit_code: int = 0):
    """Side effect for ProcessInvoker.run echoing back the joined command."""

    def run(argv: list[str]) -> ExecutionResult:
        return ExecutionResult(stdout, stderr, exit_code, " ".join(argv))

    return run


@pytest.fixture
def config(tmp_path: Path) -> Config:
    config_path = tmp_path / "exiftool.config"
    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    return Config(config_path=config_path, cwd=tmp_path)


@pytest.fixture
def photo(tmp_path: Path) -> Path:
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"\xff\xd8\xff")
    return path


@pytest.fixture
def invoker() -> Mock:
    mock = Mock(spec=ProcessInvoker)
    mock.run.side_effect = _runs("[]")
    return mock


@pytest.fixture
def exiftool(config: Config, invoker: Mock, photo: Path):
    with (
        patch("exifcmd.exiftool.find_executable", return_value=EXIFTOOL),
        patch("exifcmd.exiftool.get_version", return_value="12.76"),
    ):
        yield Exiftool(config, invoker=invoker).init(photo)


class TestInit:
    """Tests for Exiftool.init."""

    def test_default_command(self, exiftool: Exiftool, config: Config, photo: Path) -> None:
        assert exiftool.command == (
            f'{EXIFTOOL} -config "{config.config_path}" -json -BasicShortcut '
            f'-G -s3 -q -c "%.6f" "{photo}"'
        )
        assert exiftool.version() == "12.76"

    def test_requires_path(self, config: Config) -> None:
        with pytest.raises(InvalidInputError):
            Exiftool(config).init()

    def test_missing_file(self, config: Config, tmp_path: Path) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            Exiftool(config).init(tmp_path / "missing.jpg")
        assert exc_info.value.error_code == "ENOENT"

    @patch("shutil.which")
    def test_exiftool_not_installed(self, mock_which, config: Config, photo: Path) -> None:
        mock_which.return_value = None
        with pytest.raises(ExiftoolNotFoundError):
            Exiftool(config).init(photo)

    @patch("exifcmd.exiftool.get_version", return_value="12.76")
    @patch("exifcmd.exiftool.find_executable", return_value=EXIFTOOL)
    def test_creates_missing_config_file(
        self, _find, _version, tmp_path: Path, photo: Path
    ) -> None:
        config_path = tmp_path / "exiftool.config"
        exiftool = Exiftool(Config(config_path=config_path, cwd=tmp_path)).init(photo)
        assert exiftool.has_exiftool_config_file()
        assert config_path.read_text(encoding="utf-8") == DEFAULT_CONFIG

    @patch("exifcmd.exiftool.get_version", return_value="12.76")
    @patch("exifcmd.exiftool.find_executable", return_value=EXIFTOOL)
    def test_relative_path(self, _find, _version, config: Config, photo: Path) -> None:
        exiftool = Exiftool(config).init("photo.jpg")
        assert exiftool.get_path().path == str(photo)

    def test_executable_resolved_once(self, exiftool: Exiftool, photo: Path) -> None:
        with patch("exifcmd.exiftool.find_executable") as mock_find:
            exiftool.init(photo)
            mock_find.assert_not_called()


class TestPaths:
    """Tests for target path handling."""

    def test_get_path_file(self, exiftool: Exiftool, photo: Path) -> None:
        info = exiftool.get_path()
        assert info.ok
        assert info.file == "photo.jpg"
        assert info.dir == str(photo.parent)

    def test_get_path_directory(self, exiftool: Exiftool, tmp_path: Path) -> None:
        exiftool.set_path(tmp_path)
        info = exiftool.get_path()
        assert info.file is None
        assert info.dir == str(tmp_path)

    def test_get_path_unset(self, config: Config) -> None:
        assert not Exiftool(config).get_path().ok

    def test_set_path_empty(self, exiftool: Exiftool) -> None:
        assert not exiftool.set_path(None).ok
        assert not exiftool.set_path("").ok

    def test_path_with_spaces_is_quoted(self, exiftool: Exiftool, tmp_path: Path) -> None:
        folder = tmp_path / "SNAPCHAT MEMORIES"
        folder.mkdir()
        image = folder / "photo.jpg"
        image.write_bytes(b"\xff\xd8\xff")
        assert exiftool.set_path(image).ok
        assert exiftool.command.endswith(f' "{image}"')

    def test_directory_excludes_extensions(self, exiftool: Exiftool, tmp_path: Path) -> None:
        exiftool.set_path(tmp_path)
        assert "--ext cjs --ext css --ext html --ext js" in exiftool.command

    def test_file_has_no_exclusions(self, exiftool: Exiftool) -> None:
        assert "--ext" not in exiftool.command


class TestSetters:
    """Tests for the option setters."""

    def test_metadata_tags(self, exiftool: Exiftool) -> None:
        assert exiftool.set_metadata_tags(["file:FileSize", "-EXIF:Make"]).ok
        assert "-json -file:FileSize -EXIF:Make -BasicShortcut" in exiftool.command

    def test_empty_tags_leave_command(self, exiftool: Exiftool) -> None:
        before = exiftool.command
        result = exiftool.set_metadata_tags("")
        assert result.value is False
        assert exiftool.command == before

    def test_idempotent(self, exiftool: Exiftool) -> None:
        exiftool.set_mwg(True)
        once = exiftool.command
        exiftool.set_mwg(True)
        assert exiftool.command == once

    def test_overwrite_not_in_read_command(self, exiftool: Exiftool) -> None:
        exiftool.set_overwrite_original(True)
        assert "-overwrite_original" not in exiftool.command

    def test_unsupported_format(self, exiftool: Exiftool) -> None:
        before = exiftool.command
        assert not exiftool.set_output_format("yaml").ok
        assert exiftool.command == before

    def test_gps_format(self, exiftool: Exiftool) -> None:
        exiftool.set_gps_coordinates_output_format("signed")
        assert '-c "%+.6f"' in exiftool.command

    def test_extensions(self, exiftool: Exiftool, tmp_path: Path) -> None:
        exiftool.set_path(tmp_path)
        exiftool.set_extensions_to_exclude(["CONFIG", "config"], ["py"])
        assert exiftool.command.count("--ext config") == 1
        assert "--ext py" not in exiftool.command
        assert "config" in exiftool.get_extensions_to_exclude()

    def test_extensions_require_list(self, exiftool: Exiftool) -> None:
        with pytest.raises(InvalidInputError):
            exiftool.set_extensions_to_exclude("jpg")  # type: ignore[arg-type]


class TestConfigPath:
    """Tests for config file and shortcut handling."""

    def test_get_config_path(self, exiftool: Exiftool, config: Config) -> None:
        assert exiftool.get_config_path().value == str(config.config_path)

    def test_set_missing_config_path(self, exiftool: Exiftool, tmp_path: Path) -> None:
        before = exiftool.command
        result = exiftool.set_config_path(tmp_path / "other.config")
        assert result.value is False
        assert result.error_code == "ENOENT"
        assert exiftool.command == before

    def test_set_config_path_with_spaces(self, exiftool: Exiftool, tmp_path: Path) -> None:
        folder = tmp_path / "my configs"
        folder.mkdir()
        other = folder / "exiftool.config"
        other.write_text(DEFAULT_CONFIG, encoding="utf-8")
        assert exiftool.set_config_path(other).ok
        assert f'-config "{other}"' in exiftool.command

    def test_shortcuts(self, exiftool: Exiftool) -> None:
        assert exiftool.has_shortcut("Location")
        assert exiftool.add_shortcut("MyCut => ['exif:Make']").ok
        assert exiftool.has_shortcut("MyCut")
        assert exiftool.remove_shortcut("MyCut").ok
        assert not exiftool.has_shortcut("MyCut")


class TestGetMetadata:
    """Tests for reading metadata."""

    def test_json(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = _runs('[{"SourceFile": "/x.jpg", "EXIF:Make": "Sony"}]')
        result = exiftool.get_metadata()
        assert result[0]["EXIF:Make"] == "Sony"
        assert result[-3] == {"exiftool_command": exiftool.command}
        assert result[-1] == 1
        invoker.run.assert_called_once_with(exiftool.get_command_argv())

    def test_xml(self, exiftool: Exiftool, invoker: Mock) -> None:
        xml = (
            "<?xml version='1.0' encoding='UTF-8'?>\n"
            "<rdf:RDF xmlns:rdf='http://www.w3.org/1999/02/22-rdf-syntax-ns#'>\n"
            "<rdf:Description rdf:about='/x.jpg'/>\n"
            "</rdf:RDF>\n"
        )
        invoker.run.side_effect = _runs(xml)
        exiftool.set_output_format("xml")
        result = exiftool.get_metadata()
        assert "-xmlFormat" in result.command
        assert result[-3] == {"format": "xml"}
        assert result[-1] == 1

    def test_shortcut_and_tags(self, exiftool: Exiftool) -> None:
        result = exiftool.get_metadata(None, "Location", "file:FileSize", ["IPTC:Keywords"])
        assert "-file:FileSize -IPTC:Keywords -Location" in result.command

    def test_strip_tag_rejected_before_running(
        self, exiftool: Exiftool, invoker: Mock
    ) -> None:
        with pytest.raises(InvalidInputError, match="-all="):
            exiftool.get_metadata(None, None, "-all=")
        with pytest.raises(InvalidInputError):
            exiftool.get_metadata(None, None, "-EXIF:all=")
        invoker.run.assert_not_called()

    def test_strip_tag_in_tag_list_rejected(self, exiftool: Exiftool, invoker: Mock) -> None:
        exiftool.set_metadata_tags("-all=")
        with pytest.raises(InvalidInputError, match="-all="):
            exiftool.get_metadata()
        invoker.run.assert_not_called()

    def test_strip_tag_as_shortcut_rejected(self, exiftool: Exiftool, invoker: Mock) -> None:
        with pytest.raises(InvalidInputError):
            exiftool.get_metadata(None, "all=")
        assert not exiftool.set_shortcut("-gps:all=").ok
        assert "-BasicShortcut" in exiftool.command
        invoker.run.assert_not_called()

    def test_stderr_raises(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = _runs("[]", stderr="Error: File not found")
        with pytest.raises(ProcessExecutionError) as exc_info:
            exiftool.get_metadata()
        assert exc_info.value.command == exiftool.command

    def test_failed_process_propagates(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = ProcessExecutionError("boom", command="exiftool", exit_code=1)
        with pytest.raises(ProcessExecutionError):
            exiftool.get_metadata()

    def test_thumbnails(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = _runs('[{"ThumbnailImage": "base64:/9j/"}]')
        result = exiftool.get_thumbnails()
        assert "-json -Preview:all" in result.command
        assert "-b" in result.command.split()
        assert "-BasicShortcut" in exiftool.command

    def test_xmp_packet(self, exiftool: Exiftool, invoker: Mock, photo: Path) -> None:
        invoker.run.side_effect = _runs("<?xpacket begin=''?><x:xmpmeta/>\n")
        packet = exiftool.get_xmp_packet()
        assert packet.xmp.startswith("<?xpacket")
        assert packet.command.endswith(f'-xmp -b "{photo}"')

    def test_xmp_packet_empty(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = _runs("")
        with pytest.raises(OutputParseError):
            exiftool.get_xmp_packet()

    def test_raw(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = _runs('[{"EXIF:Make": "Sony"}]')
        result = exiftool.raw("-G -json -EXIF:Make /x.jpg")
        assert result.command == f"{EXIFTOOL} -G -json -EXIF:Make /x.jpg"
        assert result[-1] == 1

    def test_raw_with_executable(self, exiftool: Exiftool, invoker: Mock) -> None:
        exiftool.raw("/opt/bin/exiftool -json /x.jpg")
        invoker.run.assert_called_once_with(["/opt/bin/exiftool -json /x.jpg"])

    def test_raw_empty(self, exiftool: Exiftool) -> None:
        with pytest.raises(InvalidInputError):
            exiftool.raw("  ")


class TestWrite:
    """Tests for writing metadata."""

    def test_write_tag(self, exiftool: Exiftool, invoker: Mock, photo: Path) -> None:
        invoker.run.side_effect = _runs("    1 image files updated\n")
        result = exiftool.write_metadata_to_tag('-IPTC:Headline="Great Photo"')
        assert result.ok
        assert result.stdout == "1 image files updated"
        assert result.command == (
            f'{EXIFTOOL} -config "{exiftool.get_config_path().value}" '
            f'-IPTC:Headline="Great Photo" "{photo}"'
        )

    def test_write_without_target(self, config: Config, invoker: Mock) -> None:
        with pytest.raises(InvalidInputError):
            Exiftool(config, invoker=invoker).write_metadata_to_tag("-IPTC:Keywords=x")
        invoker.run.assert_not_called()

    def test_write_wrong_type(self, exiftool: Exiftool) -> None:
        with pytest.raises(InvalidInputError):
            exiftool.write_metadata_to_tag(42)  # type: ignore[arg-type]

    def test_write_to_directory(self, exiftool: Exiftool, tmp_path: Path) -> None:
        exiftool.set_path(tmp_path)
        with pytest.raises(InvalidInputError, match="directory"):
            exiftool.write_metadata_to_tag("-IPTC:Keywords+=travel")

    def test_write_failure_fails_soft(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = ProcessExecutionError(
            "exiftool exited with code 1", command="exiftool -bad", exit_code=1
        )
        result = exiftool.write_metadata_to_tag("-bad")
        assert result.value is False
        assert result.error == "exiftool exited with code 1"
        assert result.command == "exiftool -bad"

    def test_clear_tags(self, exiftool: Exiftool) -> None:
        result = exiftool.clear_metadata_from_tag(["IPTC:Headline", "-IPTC:Contact^="])
        assert "-IPTC:Headline^= -IPTC:Contact^=" in result.command

    def test_strip_keeps_original(self, exiftool: Exiftool, invoker: Mock, photo: Path) -> None:
        invoker.run.side_effect = _runs("    1 image files updated\n")
        result = exiftool.strip_metadata()
        assert result.ok
        assert result.files_updated == 1
        assert result.original == f"{photo}_original"
        assert "-all=" in result.command
        assert "-json" not in result.command

    def test_strip_overwrite(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = _runs("    1 image files updated\n")
        exiftool.set_overwrite_original(True)
        result = exiftool.strip_metadata()
        assert result.original is None
        assert "-overwrite_original -all=" in result.command

    def test_strip_without_confirmation(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = _runs("")
        result = exiftool.strip_metadata()
        assert result.value is False
        assert result.error is not None
        assert result.command is not None

    def test_strip_nothing_updated(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = _runs("    0 image files updated\n    1 image files unchanged\n")
        result = exiftool.strip_metadata()
        assert result.value is False
        assert result.original is None

    def test_write_with_warning_fails(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = _runs(
            "    0 image files updated\n", stderr="Warning: Tag 'Bogus' is not defined\n"
        )
        result = exiftool.write_metadata_to_tag("-Bogus=1")
        assert not result.ok
        assert "Tag 'Bogus' is not defined" in result.error
        assert result.command.endswith(f'-Bogus=1 "{exiftool.target.path}"')

    def test_clear_with_warning_fails(self, exiftool: Exiftool, invoker: Mock) -> None:
        invoker.run.side_effect = _runs("", stderr="Warning: Nothing to clear\n")
        assert not exiftool.clear_metadata_from_tag(["IPTC:Headline"]).ok

    def test_set_thumbnail(self, exiftool: Exiftool, invoker: Mock, tmp_path: Path) -> None:
        invoker.run.side_effect = _runs("    1 image files updated\n")
        thumb = tmp_path / "thumb.jpg"
        thumb.write_bytes(b"\xff\xd8\xff")
        result = exiftool.set_thumbnail(thumb)
        assert result.ok
        assert f'"-ThumbnailImage<={thumb}"' in result.command

    def test_set_thumbnail_missing(self, exiftool: Exiftool, tmp_path: Path) -> None:
        with pytest.raises(InvalidInputError):
            exiftool.set_thumbnail(tmp_path / "thumb.jpg")


class TestLocation:
    """Tests for location writes."""

    @pytest.fixture(autouse=True)
    def confirm(self, invoker: Mock) -> None:
        invoker.run.side_effect = _runs("    1 image files updated\n")

    def test_nemo(self, exiftool: Exiftool) -> None:
        result = exiftool.nemo()
        assert result.ok
        assert "-GPSLatitude=22.319469 -GPSLatitudeRef=S" in result.command

    def test_null_island(self, exiftool: Exiftool) -> None:
        assert "-GPSLatitude=0 -GPSLatitudeRef=N" in exiftool.null_island().command

    def test_set_location_dict(self, exiftool: Exiftool) -> None:
        result = exiftool.set_location({"city": "New York"})
        assert "'-IPTC:City=New York'" in result.command

    def test_strip_location(self, exiftool: Exiftool) -> None:
        result = exiftool.strip_location()
        assert "-gps:all= '-xmp:gps*='" in result.command
