"""Project manifest reader.

The manifest is the deployed application's ``pyproject.toml`` (or any file
of ``key = "value"`` lines). Extraction is deliberately first-match and
line-based rather than a TOML parse: ``service_name`` and ``launch_path``
may live in any table, and the first occurrence of a key wins.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel

from appctl.domain.errors import ConfigMissing, FieldMissing

MANIFEST_FILENAME = "pyproject.toml"

_LINE_TEMPLATE = r'^{key} *= *"([^"]+)"'


class ProjectManifest(BaseModel):
    """Read-only project metadata."""

    model_config = {"frozen": True}

    name: str
    version: str
    service_name: str | None = None
    launch_path: str | None = None


def extract_field(text: str, key: str) -> str | None:
    """Return the first quoted value assigned to *key*, or None.

    Examples:
        >>> extract_field('name = "app"\\nversion = "1.0"', "version")
        '1.0'
        >>> extract_field('[tool.x]\\n  name = "indented"', "name") is None
        True
    """
    match = re.search(_LINE_TEMPLATE.format(key=re.escape(key)), text, flags=re.MULTILINE)
    return match.group(1) if match else None


def read_manifest(path: Path) -> ProjectManifest:
    """Read *path* into a :class:`ProjectManifest`.

    Raises:
        ConfigMissing: The file does not exist.
        FieldMissing: ``name`` or ``version`` is absent or empty.
    """
    if not path.is_file():
        raise ConfigMissing(str(path))
    text = path.read_text(encoding="utf-8")

    version = extract_field(text, "version")
    if not version:
        raise FieldMissing("version", str(path))
    name = extract_field(text, "name")
    if not name:
        raise FieldMissing("name", str(path))

    return ProjectManifest(
        name=name,
        version=version,
        service_name=extract_field(text, "service_name"),
        launch_path=extract_field(text, "launch_path"),
    )


def replace_version(path: Path, new_version: str) -> str:
    """Rewrite the first ``version = "..."`` line of *path*; return the old value.

    Raises:
        ConfigMissing: The file does not exist.
        FieldMissing: No version line to rewrite.
    """
    if not path.is_file():
        raise ConfigMissing(str(path))
    text = path.read_text(encoding="utf-8")
    pattern = re.compile(r'^(version *= *")([^"]*)(")', flags=re.MULTILINE)
    match = pattern.search(text)
    if match is None:
        raise FieldMissing("version", str(path))
    updated = text[: match.start(2)] + new_version + text[match.end(2) :]
    path.write_text(updated, encoding="utf-8")
    return match.group(2)
