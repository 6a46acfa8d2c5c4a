from __future__ import annotations

import json
import os
import re
from pathlib import Path

import jsonschema
import pytest
from cloudcheck.core.context import RunContext
from cloudcheck.core.logging import log_event
from cloudcheck.core.schema_utils import validate_json
from cloudcheck.core.yaml_utils import load_yaml
from cloudcheck.errors import SpecLoadError
from cloudcheck.spec_tree import load_document


def test_run_id_prefers_argument_then_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RUN_ID", "from-env")
    assert RunContext.from_args("explicit").run_id == "explicit"
    assert RunContext.from_args(None).run_id == "from-env"
    monkeypatch.delenv("RUN_ID")
    assert RunContext.from_args(None).run_id.startswith("cloudcheck-")


def test_default_run_id_format(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RUN_ID", raising=False)
    run_id = RunContext.from_args(None).run_id
    assert re.fullmatch(r"cloudcheck-\d{8}-\d{6}-\d+", run_id)
    assert run_id.endswith(f"-{os.getpid()}")


@pytest.mark.parametrize(
    ("verbose", "quiet", "level"),
    [(False, False, "warning"), (True, False, "debug"), (False, True, "error")],
)
def test_min_log_level(verbose: bool, quiet: bool, level: str) -> None:
    assert RunContext.from_args("t", verbose=verbose, quiet=quiet).min_log_level == level


def test_log_event_json_line(capsys: pytest.CaptureFixture[str]) -> None:
    ctx = RunContext.from_args("t-log", log_json=True)
    log_event(ctx, "info", "docs", "ignored")
    log_event(ctx, "error", "docs", "annotate-failed", file="a.md")
    lines = capsys.readouterr().err.splitlines()
    assert len(lines) == 1
    event = json.loads(lines[0])
    assert {k: event[k] for k in ("level", "run_id", "component", "action", "file")} == {
        "level": "error",
        "run_id": "t-log",
        "component": "docs",
        "action": "annotate-failed",
        "file": "a.md",
    }


def test_log_event_text_line(capsys: pytest.CaptureFixture[str]) -> None:
    log_event(RunContext.from_args("t-log"), "warning", "reconcile", "node-not-found", path="/me")
    line = capsys.readouterr().err.strip()
    assert line.endswith("run_id=t-log component=reconcile action=node-not-found path=/me")


def test_table_schemas() -> None:
    validate_json([{"apiPath": "/a", "overridePath": "/b", "operation": None}], "overrides.schema.json")
    with pytest.raises(jsonschema.ValidationError):
        validate_json([{"apiPath": "/a", "operation": "GET", "cloud": ""}], "exclusions.schema.json")


def test_openapi_documents_load_from_yaml_or_json(tmp_path: Path) -> None:
    yml = tmp_path / "Prod.yml"
    yml.write_text("openapi: 3.0.4\npaths:\n  /me:\n    get: {}\n", encoding="utf-8")
    assert load_yaml(yml)["paths"] == {"/me": {"get": {}}}
    assert load_document(yml)["openapi"] == "3.0.4"

    js = tmp_path / "Prod.json"
    js.write_text(json.dumps({"paths": {}}), encoding="utf-8")
    assert load_document(js) == {"paths": {}}


@pytest.mark.parametrize("content", ["paths: [unclosed", "- just\n- a list\n"])
def test_unusable_openapi_documents(tmp_path: Path, content: str) -> None:
    path = tmp_path / "Prod.yml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(SpecLoadError):
        load_document(path)
    with pytest.raises(SpecLoadError, match="not found"):
        load_document(tmp_path / "Fairfax.yml")
