"""Composition of exiftool command lines."""

from exifcmd.command.location import NULL_ISLAND, POINT_NEMO, Location
from exifcmd.command.options import OptionSet, normalize_tags
from exifcmd.command.target import Target, double_quote, strip_quotes

__all__ = [
    "Location",
    "NULL_ISLAND",
    "POINT_NEMO",
    "OptionSet",
    "normalize_tags",
    "Target",
    "double_quote",
    "strip_quotes",
]
