from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Mapping
from pathlib import Path

import yaml
from cloudcheck.spec_tree import CLOUD_FILES, SpecTree

ROOT = Path(__file__).resolve().parents[3]
FIXTURES = Path(__file__).resolve().parent / "fixtures"

# cloud -> OpenAPI path -> declared methods
CloudPaths = Mapping[str, Mapping[str, list[str]]]


def openapi_document(paths: Mapping[str, list[str]]) -> dict[str, object]:
    return {
        "openapi": "3.0.4",
        "info": {"title": "Microsoft Graph", "version": "v1.0"},
        "paths": {
            path: {method.lower(): {"responses": {"2XX": {"description": "Success"}}} for method in methods}
            for path, methods in paths.items()
        },
    }


def build_tree(clouds: CloudPaths) -> SpecTree:
    tree = SpecTree()
    for cloud, paths in clouds.items():
        tree.attach(openapi_document(paths), cloud)
    return tree


def write_openapi(folder: Path, clouds: CloudPaths) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    for cloud, name in CLOUD_FILES.items():
        document = openapi_document(clouds.get(cloud, {}))
        (folder / name).write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
    return folder


def run_cloudcheck(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "packages/cloudcheck/src")
    env.setdefault("RUN_ID", "pytest-run")
    return subprocess.run(
        [sys.executable, "-m", "cloudcheck", *args],
        cwd=(cwd or ROOT),
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )
