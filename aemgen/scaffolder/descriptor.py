"""Reading project properties out of an existing ``pom.xml``.

Only a flat property bag is extracted: the project coordinates, its name,
and the ``aem.version`` POM property.  No other POM structure is modelled.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

from aemgen.utils import print_warning

# XML namespace used by Maven POM files (POM model version 4.0.0).
NS = {"m": "http://maven.apache.org/POM/4.0.0"}

# POM element -> property name
_COORDINATE_FIELDS: dict[str, str] = {
    "groupId": "group_id",
    "artifactId": "artifact_id",
    "version": "version",
    "name": "name",
}


def _find_text(element: ET.Element, tag: str) -> str | None:
    """Find a direct child's text, with or without the POM namespace."""
    node = element.find(f"m:{tag}", NS)
    if node is None:
        node = element.find(tag)
    if node is None or node.text is None:
        return None
    return node.text.strip() or None


def _find(element: ET.Element, tag: str) -> ET.Element | None:
    node = element.find(f"m:{tag}", NS)
    return node if node is not None else element.find(tag)


def read_pom(project_root: str | Path) -> dict[str, Any]:
    """Read the flat property bag of ``<project_root>/pom.xml``.

    ``groupId`` and ``version`` fall back to the ``<parent>`` block, as Maven
    inherits them.  ``aem.version`` from ``<properties>`` becomes
    ``aem_version``.

    Returns:
        The properties found; an empty dict when there is no readable POM.
    """
    pom_path = Path(project_root) / "pom.xml"
    if not pom_path.is_file():
        return {}

    try:
        root = ET.parse(pom_path).getroot()
    except ET.ParseError as exc:
        print_warning(f"Ignoring unreadable {pom_path}: {exc}")
        return {}

    props: dict[str, Any] = {}
    for tag, name in _COORDINATE_FIELDS.items():
        value = _find_text(root, tag)
        if value is not None:
            props[name] = value

    parent = _find(root, "parent")
    if parent is not None:
        for tag in ("groupId", "version"):
            name = _COORDINATE_FIELDS[tag]
            value = _find_text(parent, tag)
            if name not in props and value is not None:
                props[name] = value

    properties = _find(root, "properties")
    if properties is not None:
        aem_version = _find_text(properties, "aem.version")
        if aem_version is not None:
            props["aem_version"] = aem_version

    return props
