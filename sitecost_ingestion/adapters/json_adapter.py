"""
JSON export adapter.

Reads a site export file: a JSON object holding ``activities`` and
``labor`` arrays plus optional ``company`` / ``project`` objects. A bare
JSON array is read as activities with no labor.

File I/O only. Numbers are parsed as Decimal so no float ever reaches the
cost engines.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from sitecost_kernel.exceptions import IngestionError


@dataclass(frozen=True)
class SiteExport:
    """Raw records and header metadata read from one export file."""

    activities: tuple[dict[str, Any], ...] = ()
    labor: tuple[dict[str, Any], ...] = ()
    company: dict[str, Any] = field(default_factory=dict)
    project: dict[str, Any] = field(default_factory=dict)


def _get_nested(data: Any, path: str) -> Any:
    """Follow dot-separated path into dict/list. Returns None if key missing."""
    if not path.strip():
        return data
    for key in path.split("."):
        key = key.strip()
        if not key:
            continue
        if isinstance(data, list):
            try:
                data = data[int(key)]
            except (ValueError, IndexError):
                return None
        elif isinstance(data, dict) and key in data:
            data = data[key]
        else:
            return None
    return data


def _records(data: Any, path: str, source: Path) -> tuple[dict[str, Any], ...]:
    root = _get_nested(data, path)
    if root is None:
        return ()
    if not isinstance(root, list):
        raise IngestionError(f"{source}: '{path}' must be an array")
    return tuple(root)


class JsonExportAdapter:
    """Read a site export file into a SiteExport."""

    def __init__(
        self,
        activities_path: str = "activities",
        labor_path: str = "labor",
        encoding: str = "utf-8",
    ):
        self._activities_path = activities_path
        self._labor_path = labor_path
        self._encoding = encoding

    def read(self, source_path: Path | str) -> SiteExport:
        """
        Raises:
            IngestionError: the file is not valid JSON or has the wrong shape.
            OSError: the file cannot be opened.
        """
        source_path = Path(source_path)
        with source_path.open("r", encoding=self._encoding) as f:
            try:
                data = json.load(f, parse_float=Decimal)
            except json.JSONDecodeError as e:
                raise IngestionError(f"{source_path}: invalid JSON ({e})") from e
        return self.parse(data, source_path)

    def parse(self, data: Any, source_path: Path | str = "<memory>") -> SiteExport:
        source = Path(source_path)
        if isinstance(data, list):
            return SiteExport(activities=tuple(data))
        if not isinstance(data, dict):
            raise IngestionError(f"{source}: export must be a JSON object or array")

        company = data.get("company") or {}
        project = data.get("project") or {}
        if not isinstance(company, dict) or not isinstance(project, dict):
            raise IngestionError(f"{source}: 'company' and 'project' must be objects")

        return SiteExport(
            activities=_records(data, self._activities_path, source),
            labor=_records(data, self._labor_path, source),
            company=company,
            project=project,
        )
