"""CLI interface for exifcmd."""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path

import click

from exifcmd.command import Location
from exifcmd.config import Config
from exifcmd.errors import ExiftoolError
from exifcmd.exiftool import Exiftool
from exifcmd.models import Result


@click.group()
@click.option(
    "--config-file",
    type=click.Path(path_type=Path),
    help="Path to the exiftool.config file holding shortcuts",
)
@click.option(
    "--strategy",
    type=click.Choice(["exec", "spawn"]),
    default="exec",
    help="Process strategy: exec (buffered) or spawn (streamed)",
)
@click.option(
    "--shortcut-editor",
    type=click.Choice(["file", "sed"]),
    default="file",
    help="How shortcut definitions are edited",
)
@click.option("--verbose", "-v", is_flag=True, help="Log composed commands")
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Path | None,
    strategy: str,
    shortcut_editor: str,
    verbose: bool,
) -> None:
    ctx.ensure_object(dict)
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(message)s",
        )
    config = Config(shortcut_editor=shortcut_editor)
    config.invoker.strategy = strategy
    if config_file is not None:
        config.config_path = config_file
    ctx.obj["config"] = config


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except ExiftoolError as e:
        click.echo(f"Error: {e.message}", err=True)
        if e.command:
            click.echo(f"Command: {e.command}", err=True)
        sys.exit(1)


def _open(ctx: click.Context, paths: tuple[str, ...] | str) -> Exiftool:
    config: Config = ctx.obj["config"]
    target = list(paths) if isinstance(paths, tuple) else paths
    return Exiftool(config).init(target)


def _echo_json(data: object) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _echo_result(result: Result) -> None:
    _echo_json(asdict(result))
    if not result.ok:
        sys.exit(1)


@cli.command()
@click.argument("paths", nargs=-1, required=True)
@click.option("--shortcut", help="Shortcut defined in exiftool.config")
@click.option("--tag", "tags", multiple=True, help="Extra tag to extract (repeatable)")
@click.option("--format", "output_format", type=click.Choice(["json", "xml"]), default="json")
@click.option("--gps-format", help="Coordinate format alias (gps, signed, none) or printf pattern")
@click.option("--struct", is_flag=True, help="Keep structured XMP as nested objects")
@click.option("--mwg", is_flag=True, help="Use Metadata Working Group composite tags")
@click.option("--exclude-ext", "exclude", multiple=True, help="Extension to skip in directories")
@click.pass_context
def metadata(
    ctx: click.Context,
    paths: tuple[str, ...],
    shortcut: str | None,
    tags: tuple[str, ...],
    output_format: str,
    gps_format: str | None,
    struct: bool,
    mwg: bool,
    exclude: tuple[str, ...],
) -> None:
    """Extract metadata from files or directories."""
    with _handle_errors():
        exiftool = _open(ctx, paths)
        exiftool.set_output_format(output_format)
        if gps_format is not None:
            result = exiftool.set_gps_coordinates_output_format(gps_format)
            if not result.ok:
                click.echo(f"Error: {result.error}", err=True)
                sys.exit(1)
        exiftool.set_use_struct(struct)
        exiftool.set_mwg(mwg)
        if exclude:
            exiftool.set_extensions_to_exclude(list(exclude))
        _echo_json(list(exiftool.get_metadata(None, shortcut, *tags)))


@cli.command()
@click.argument("path")
@click.argument("assignments", nargs=-1, required=True)
@click.option("--overwrite", is_flag=True, help="Do not keep a _original backup")
@click.pass_context
def write(ctx: click.Context, path: str, assignments: tuple[str, ...], overwrite: bool) -> None:
    """Write tag assignments such as -IPTC:Keywords+=travel."""
    with _handle_errors():
        exiftool = _open(ctx, path)
        exiftool.set_overwrite_original(overwrite)
        _echo_result(exiftool.write_metadata_to_tag(list(assignments)))


@cli.command()
@click.argument("path")
@click.argument("tags", nargs=-1, required=True)
@click.option("--overwrite", is_flag=True, help="Do not keep a _original backup")
@click.pass_context
def clear(ctx: click.Context, path: str, tags: tuple[str, ...], overwrite: bool) -> None:
    """Empty the given tags but keep them in the file."""
    with _handle_errors():
        exiftool = _open(ctx, path)
        exiftool.set_overwrite_original(overwrite)
        _echo_result(exiftool.clear_metadata_from_tag(list(tags)))


@cli.command()
@click.argument("path")
@click.option("--overwrite", is_flag=True, help="Do not keep a _original backup")
@click.pass_context
def strip(ctx: click.Context, path: str, overwrite: bool) -> None:
    """Strip all metadata from a file."""
    with _handle_errors():
        exiftool = _open(ctx, path)
        exiftool.set_overwrite_original(overwrite)
        _echo_result(exiftool.strip_metadata())


@cli.command()
@click.argument("path")
@click.pass_context
def thumbnails(ctx: click.Context, path: str) -> None:
    """Extract embedded preview images (base64)."""
    with _handle_errors():
        _echo_json(list(_open(ctx, path).get_thumbnails()))


@cli.command("set-thumbnail")
@click.argument("path")
@click.argument("thumbnail")
@click.option("--overwrite", is_flag=True, help="Do not keep a _original backup")
@click.pass_context
def set_thumbnail(ctx: click.Context, path: str, thumbnail: str, overwrite: bool) -> None:
    """Embed THUMBNAIL as the EXIF thumbnail of PATH."""
    with _handle_errors():
        exiftool = _open(ctx, path)
        exiftool.set_overwrite_original(overwrite)
        _echo_result(exiftool.set_thumbnail(thumbnail))


@cli.command()
@click.argument("path")
@click.pass_context
def xmp(ctx: click.Context, path: str) -> None:
    """Print the raw XMP packet."""
    with _handle_errors():
        click.echo(_open(ctx, path).get_xmp_packet().xmp)


@cli.command()
@click.argument("query")
@click.pass_context
def raw(ctx: click.Context, query: str) -> None:
    """Run a fully composed exiftool QUERY."""
    with _handle_errors():
        _echo_json(list(Exiftool(ctx.obj["config"]).raw(query)))


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Print the path and version of exiftool."""
    with _handle_errors():
        exiftool = Exiftool(ctx.obj["config"])
        click.echo(f"{exiftool.which()} {exiftool.version()}")


@cli.group()
def location() -> None:
    """Write or strip GPS location data."""


@location.command("set")
@click.argument("path")
@click.option("--lat", "latitude", type=float, help="Signed decimal latitude")
@click.option("--lon", "longitude", type=float, help="Signed decimal longitude")
@click.option("--alt", "altitude", type=float, help="Altitude in meters")
@click.option("--city")
@click.option("--state")
@click.option("--country")
@click.option("--country-code")
@click.option("--location", "sublocation", help="Sub-location name")
@click.option("--overwrite", is_flag=True, help="Do not keep a _original backup")
@click.pass_context
def location_set(
    ctx: click.Context,
    path: str,
    latitude: float | None,
    longitude: float | None,
    altitude: float | None,
    city: str | None,
    state: str | None,
    country: str | None,
    country_code: str | None,
    sublocation: str | None,
    overwrite: bool,
) -> None:
    """Set coordinates and locality names."""
    with _handle_errors():
        exiftool = _open(ctx, path)
        exiftool.set_overwrite_original(overwrite)
        point = Location(
            latitude=latitude,
            longitude=longitude,
            altitude=altitude,
            city=city,
            state=state,
            country=country,
            country_code=country_code,
            location=sublocation,
        )
        _echo_result(exiftool.set_location(point))


@location.command("null-island")
@click.argument("path")
@click.pass_context
def location_null_island(ctx: click.Context, path: str) -> None:
    """Set the location to 0,0."""
    with _handle_errors():
        _echo_result(_open(ctx, path).null_island())


@location.command("nemo")
@click.argument("path")
@click.pass_context
def location_nemo(ctx: click.Context, path: str) -> None:
    """Set the location to the fixed demonstration point."""
    with _handle_errors():
        _echo_result(_open(ctx, path).nemo())


@location.command("strip")
@click.argument("path")
@click.pass_context
def location_strip(ctx: click.Context, path: str) -> None:
    """Remove GPS tags only."""
    with _handle_errors():
        _echo_result(_open(ctx, path).strip_location())


@cli.group()
def shortcut() -> None:
    """Inspect and edit shortcuts in exiftool.config."""


@shortcut.command("has")
@click.argument("name")
@click.pass_context
def shortcut_has(ctx: click.Context, name: str) -> None:
    found = Exiftool(ctx.obj["config"]).has_shortcut(name)
    click.echo("yes" if found else "no")
    if not found:
        sys.exit(1)


@shortcut.command("add")
@click.argument("definition")
@click.pass_context
def shortcut_add(ctx: click.Context, definition: str) -> None:
    """Add DEFINITION, e.g. "MyCut => ['exif:createdate', 'file:FileName']"."""
    _echo_result(Exiftool(ctx.obj["config"]).add_shortcut(definition))


@shortcut.command("remove")
@click.argument("name")
@click.pass_context
def shortcut_remove(ctx: click.Context, name: str) -> None:
    _echo_result(Exiftool(ctx.obj["config"]).remove_shortcut(name))


def main() -> None:
    """Entry point for the CLI."""
    cli(standalone_mode=True)  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()
