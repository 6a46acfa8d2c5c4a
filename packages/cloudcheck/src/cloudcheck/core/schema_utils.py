from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

SCHEMAS_DIR = Path(__file__).resolve().parents[1] / "schemas"


def load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def load_schema(name: str) -> dict[str, Any]:
    return load_json(SCHEMAS_DIR / name)


def validate_json(payload: Any, schema_name: str) -> None:
    jsonschema.validate(payload, load_schema(schema_name))
