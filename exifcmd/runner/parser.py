"""Parsing exiftool output into Python objects."""

import json
import re
import xml.etree.ElementTree as ET
from typing import Any

from exifcmd.errors import OutputParseError
from exifcmd.models import MetadataResult


RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"

FILES_UPDATED_PATTERN = re.compile(r"(\d+)\s+image files? updated")


def parse_json_output(stdout: str, command: str) -> MetadataResult:
    """Parse a JSON array of per-file records and append the trailers."""
    try:
        records = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise OutputParseError(f"JSON parse error: {e}", command=command) from e
    if not isinstance(records, list):
        raise OutputParseError(
            f"Expected a JSON array from exiftool, got {type(records).__name__}",
            command=command,
        )

    count = len(records)
    items = records + [{"exiftool_command": command}, {"format": "json"}, count]
    return MetadataResult(items, records, command, "json", count)


def parse_xml_output(stdout: str, command: str) -> MetadataResult:
    """Parse exiftool's RDF/XML output and append the trailers."""
    try:
        root = ET.fromstring(stdout.strip())
    except ET.ParseError as e:
        raise OutputParseError(f"XML parse error: {e}", command=command) from e

    parsed = {_local_name(root.tag): element_to_dict(root)}
    count = len(root.findall(f".//{{{RDF_NS}}}Description"))
    items = [
        parsed,
        {"raw": stdout},
        {"format": "xml"},
        {"exiftool_command": command},
        count,
    ]
    return MetadataResult(items, [parsed], command, "xml", count)


def element_to_dict(element: ET.Element) -> Any:
    """Convert an element tree to nested dicts.

    Attributes are prefixed with '@', text of mixed elements goes under
    '#text', repeated children become lists. Namespace URIs are dropped in
    favour of the local name.
    """
    node: dict[str, Any] = {}
    for key, value in element.attrib.items():
        node[f"@{_local_name(key)}"] = value

    for child in element:
        name = _local_name(child.tag)
        value = element_to_dict(child)
        if name in node:
            if not isinstance(node[name], list):
                node[name] = [node[name]]
            node[name].append(value)
        else:
            node[name] = value

    text = (element.text or "").strip()
    if not node:
        return text
    if text:
        node["#text"] = text
    return node


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def count_updated_files(stdout: str, command: str) -> int:
    """Return N from exiftool's "N image files updated" confirmation.

    Exit code 0 without the confirmation phrase, or with N of 0, still
    counts as a failure.
    """
    match = FILES_UPDATED_PATTERN.search(stdout)
    if match is None:
        raise OutputParseError(
            f"exiftool did not confirm the update: {stdout.strip() or '(no output)'}",
            command=command,
        )
    updated = int(match.group(1))
    if updated == 0:
        raise OutputParseError(
            f"exiftool did not update any file: {stdout.strip()}",
            command=command,
        )
    return updated
