"""Multi-cloud OpenAPI URL tree.

One tree is built per edition by attaching the OpenAPI document of every cloud
to the same root. Each node is one path segment; the node an OpenAPI path ends
at records, per cloud label, the HTTP methods that cloud declares there.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .core.yaml_utils import load_yaml
from .errors import SpecLoadError
from .models import CHINA, GLOBAL, US_GOV
from .paths import split_segments

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

CLOUD_FILES: dict[str, str] = {
    GLOBAL: "Prod.yml",
    US_GOV: "Fairfax.yml",
    CHINA: "Mooncake.yml",
}


@dataclass
class SpecNode:
    segment: str
    path: str
    children: dict[str, SpecNode] = field(default_factory=dict)
    methods: dict[str, frozenset[str]] = field(default_factory=dict)

    def supports(self, cloud: str, method: str) -> bool:
        return method.upper() in self.methods.get(cloud, frozenset())

    def child(self, segment: str) -> SpecNode:
        node = self.children.get(segment)
        if node is None:
            node = SpecNode(segment=segment, path=f"{self.path}/{segment}")
            self.children[segment] = node
        return node


class SpecTree:
    def __init__(self) -> None:
        self.root = SpecNode(segment="/", path="")

    def attach(self, document: Mapping[str, Any], cloud: str) -> None:
        paths = document.get("paths")
        if not isinstance(paths, Mapping):
            raise SpecLoadError(f"OpenAPI document for {cloud} has no `paths` mapping")
        for api_path, path_item in paths.items():
            node = self.root
            for segment in split_segments(str(api_path)):
                node = node.child(segment)
            declared = path_item if isinstance(path_item, Mapping) else {}
            node.methods[cloud] = frozenset(m.upper() for m in HTTP_METHODS if m in declared)

    def find(self, path: str) -> SpecNode | None:
        """Exact lookup by OpenAPI path, mostly useful for diagnostics."""
        node: SpecNode | None = self.root
        for segment in split_segments(path):
            node = node.children.get(segment) if node else None
        return node


def load_document(path: Path) -> Mapping[str, Any]:
    if not path.is_file():
        raise SpecLoadError(f"OpenAPI description not found: {path}")
    try:
        if path.suffix.lower() == ".json":
            document = json.loads(path.read_text(encoding="utf-8"))
        else:
            document = load_yaml(path)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SpecLoadError(f"{path}: cannot parse OpenAPI description: {exc}") from exc
    if not isinstance(document, Mapping):
        raise SpecLoadError(f"{path}: OpenAPI description root must be a mapping")
    return document


def load_spec_tree(files: Mapping[str, Path]) -> SpecTree:
    tree = SpecTree()
    for cloud, path in files.items():
        tree.attach(load_document(path), cloud)
    return tree


def cloud_files(folder: Path) -> dict[str, Path]:
    return {cloud: folder / name for cloud, name in CLOUD_FILES.items()}
