"""Path overrides and cloud exclusions.

Overrides correct documented paths known not to match the OpenAPI description
verbatim. Exclusions mark a cloud whose OpenAPI description lists an operation
that does not actually work there. Both tables are loaded once and never
mutated; lookups use case-insensitive exact matching.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema

from .core.schema_utils import load_json, validate_json
from .errors import ConfigError


@dataclass(frozen=True)
class Override:
    api_path: str
    override_path: str
    operation: str | None = None


@dataclass(frozen=True)
class CloudExclusion:
    api_path: str
    operation: str
    cloud: str


def _same(a: str | None, b: str | None) -> bool:
    return (a or "").casefold() == (b or "").casefold()


@dataclass(frozen=True)
class OverrideTables:
    overrides: tuple[Override, ...] = ()
    exclusions: tuple[CloudExclusion, ...] = ()

    def resolve_override(self, path: str, method: str | None) -> str:
        # Duplicate apiPath entries: the first one in table order wins.
        entry = next((o for o in self.overrides if _same(o.api_path, path)), None)
        if entry is None:
            return path
        if entry.operation and method is not None and not _same(entry.operation, method):
            return path
        return entry.override_path

    def is_excluded(self, path: str, method: str | None, cloud: str) -> bool:
        return any(
            _same(e.api_path, path) and _same(e.operation, method) and _same(e.cloud, cloud)
            for e in self.exclusions
        )


def _read_table(path: Path, schema_name: str) -> list[dict[str, Any]]:
    if not path.is_file():
        raise ConfigError(f"table file not found: {path}")
    try:
        payload = load_json(path)
        validate_json(payload, schema_name)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON: {exc}") from exc
    except jsonschema.ValidationError as exc:
        raise ConfigError(f"{path}: {exc.message}") from exc
    return payload


def load_overrides(path: Path) -> tuple[Override, ...]:
    return tuple(
        Override(api_path=row["apiPath"], override_path=row["overridePath"], operation=row.get("operation"))
        for row in _read_table(path, "overrides.schema.json")
    )


def load_exclusions(path: Path) -> tuple[CloudExclusion, ...]:
    return tuple(
        CloudExclusion(api_path=row["apiPath"], operation=row["operation"], cloud=row["cloud"])
        for row in _read_table(path, "exclusions.schema.json")
    )


def load_override_tables(overrides_file: str | Path | None, excludes_file: str | Path | None) -> OverrideTables:
    return OverrideTables(
        overrides=load_overrides(Path(overrides_file)) if overrides_file else (),
        exclusions=load_exclusions(Path(excludes_file)) if excludes_file else (),
    )
