"""Running exiftool and parsing what it prints."""

from exifcmd.runner.invoker import ExecutionResult, ProcessInvoker
from exifcmd.runner.parser import count_updated_files, parse_json_output, parse_xml_output
from exifcmd.runner.which import find_executable, get_version

__all__ = [
    "ExecutionResult",
    "ProcessInvoker",
    "count_updated_files",
    "parse_json_output",
    "parse_xml_output",
    "find_executable",
    "get_version",
]
