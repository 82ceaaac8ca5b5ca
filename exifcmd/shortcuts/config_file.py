"""The exiftool.config file holding user-defined shortcuts."""

import logging
import os
from pathlib import Path

from exifcmd.command.target import strip_quotes
from exifcmd.errors import errno_name
from exifcmd.models import Result


logger = logging.getLogger(__name__)

DEFAULT_CONFIG = """%Image::ExifTool::UserDefined::Shortcuts = (
    BasicShortcut => ['file:Directory','file:FileName','EXIF:CreateDate','file:MIMEType','exif:Make','exif:Model','exif:ImageDescription','iptc:ObjectName','iptc:Caption-Abstract','iptc:Keywords','Composite:GPSPosition'],
    Location => ['EXIF:GPSLatitude', 'EXIF:GPSLongitude', 'EXIF:GPSAltitude', 'EXIF:GPSLatitudeRef', 'EXIF:GPSLongitudeRef', 'EXIF:GPSAltitudeRef'],
    StripGPS => ['gps:all='],
);
"""

BACKUP_SUFFIX = ".bk"


def normalize_config_path(path: str | os.PathLike) -> Path:
    return Path(strip_quotes(os.fspath(path).strip()))


def config_file_exists(path: str | os.PathLike) -> bool:
    try:
        os.stat(normalize_config_path(path))
    except OSError as e:
        logger.debug("config file not found: %s", e)
        return False
    return True


def create_config_file(path: str | os.PathLike) -> Result:
    """Write the default shortcut definitions, replacing whatever is there."""
    config_path = normalize_config_path(path)
    try:
        config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    except OSError as e:
        logger.warning("failed to create %s: %s", config_path, e)
        return Result(
            value=False,
            error=str(e),
            error_code=errno_name(e),
        )
    logger.info("created %s", config_path)
    return Result(value=True)
