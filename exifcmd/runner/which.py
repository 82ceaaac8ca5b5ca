"""Locating the exiftool executable."""

import logging
import shutil
import subprocess

from exifcmd.errors import ExiftoolNotFoundError


logger = logging.getLogger(__name__)


def find_executable(name: str = "exiftool") -> str:
    """Return the full path of the exiftool executable on PATH."""
    path = shutil.which(name)
    if not path:
        raise ExiftoolNotFoundError(
            f"{name} is required but not found.\n"
            "Please install exiftool: https://exiftool.org/install.html"
        )
    logger.debug("found: %s", path)
    return path


def get_version(executable: str) -> str:
    """Return the version string reported by ``exiftool -ver``."""
    try:
        result = subprocess.run(
            [executable, "-ver"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise ExiftoolNotFoundError(
            f"Could not run {executable} -ver: {e}",
            command=f"{executable} -ver",
        ) from e
    return result.stdout.strip()
