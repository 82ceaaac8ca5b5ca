"""exifcmd - Compose, run and parse exiftool commands."""

__version__ = "0.1.0"

from exifcmd.command import Location
from exifcmd.config import Config, InvokerConfig
from exifcmd.errors import (
    ExiftoolError,
    ExiftoolNotFoundError,
    InvalidInputError,
    OutputParseError,
    ProcessExecutionError,
    ProcessSpawnError,
)
from exifcmd.exiftool import Exiftool
from exifcmd.models import MetadataResult, Result

__all__ = [
    "Config",
    "Exiftool",
    "ExiftoolError",
    "ExiftoolNotFoundError",
    "InvalidInputError",
    "InvokerConfig",
    "Location",
    "MetadataResult",
    "OutputParseError",
    "ProcessExecutionError",
    "ProcessSpawnError",
    "Result",
]
