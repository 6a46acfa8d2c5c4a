from __future__ import annotations

import argparse
import json
import os
import sys
from functools import partial
from pathlib import Path

from . import __version__
from .core.context import RunContext
from .core.logging import log_event
from .docs import DEFAULT_INCLUDE_DIR, list_doc_paths
from .errors import CloudCheckError
from .exit_codes import ERR_INTERNAL, ERR_USAGE, OK
from .models import Edition
from .overrides import load_override_tables
from .reconcile import PauseFn, RunReport, annotate_document, annotate_editions, run_documents
from .spec_tree import cloud_files, load_spec_tree

TOOL = "cloudcheck"
EDITION_FOLDERS = {Edition.PRIMARY: "v1.0", Edition.PREVIEW: "beta"}


def _add_run_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("-o", "--open-api", required=True, help="folder containing the OpenAPI descriptions")
    p.add_argument("-a", "--api-docs", required=True, help="folder containing the API docs")
    p.add_argument("-d", "--overrides", help="JSON file containing API path overrides")
    p.add_argument("-e", "--excludes", help="JSON file containing cloud exclusions")
    p.add_argument("-b", "--batch-size", type=int, default=0, help="pause after this many documents")
    p.add_argument("-f", "--out-file", help="append documents that could not be processed to this file")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog=TOOL, description="annotate API docs with national cloud support")
    p.add_argument("--version", action="version", version=f"{TOOL} {__version__}")
    p.add_argument("--run-id", help="run identifier for log events")
    p.add_argument("--format", choices=["text", "json"], default=None, help="summary output format")
    p.add_argument("--log-json", action="store_true", help="emit log events as JSON lines")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("-v", "--verbose", action="store_true", help="log every operation")
    vg.add_argument("--quiet", action="store_true", help="only log errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    check_p = sub.add_parser("check", help="check Microsoft Graph cloud support against one OpenAPI set")
    _add_run_options(check_p)
    check_p.add_argument(
        "-r", "--remove-old-includes", action="store_true", help="ignore the placement of existing includes"
    )

    copilot_p = sub.add_parser("copilot", help="check Copilot API cloud support per API edition")
    _add_run_options(copilot_p)
    copilot_p.add_argument("-i", "--include-directory", required=True, help="relative folder of the INCLUDE files")
    return p


def _pause(batch_size: int) -> None:
    try:
        input(f"Reached batch size {batch_size}. Press Enter to resume processing.")
    except EOFError:
        # stdin closed: nobody can resume, keep going
        print(file=sys.stderr)


def _prepare(ctx: RunContext, ns: argparse.Namespace) -> Path | None:
    log_event(
        ctx,
        "info",
        "cli",
        "start",
        cmd=ns.cmd,
        open_api=ns.open_api,
        api_docs=ns.api_docs,
        overrides=ns.overrides or "NONE",
        excludes=ns.excludes or "NONE",
        batch_size=ns.batch_size,
    )
    out_file = Path(ns.out_file) if ns.out_file else None
    if out_file is not None:
        out_file.unlink(missing_ok=True)
    return out_file


def run_check(ctx: RunContext, ns: argparse.Namespace, pause: PauseFn | None) -> RunReport:
    out_file = _prepare(ctx, ns)
    tables = load_override_tables(ns.overrides, ns.excludes)
    paths = list_doc_paths(Path(ns.api_docs))
    tree = load_spec_tree(cloud_files(Path(ns.open_api)))
    annotate = partial(
        annotate_document,
        ctx,
        tree=tree,
        tables=tables,
        remove_old_includes=ns.remove_old_includes,
        include_dir=DEFAULT_INCLUDE_DIR,
    )
    return run_documents(ctx, paths, annotate, ns.batch_size, out_file, pause)


def run_copilot(ctx: RunContext, ns: argparse.Namespace, pause: PauseFn | None) -> RunReport:
    out_file = _prepare(ctx, ns)
    tables = load_override_tables(ns.overrides, ns.excludes)
    paths = list_doc_paths(Path(ns.api_docs))
    trees = {
        edition: load_spec_tree(cloud_files(Path(ns.open_api) / folder))
        for edition, folder in EDITION_FOLDERS.items()
    }
    annotate = partial(annotate_editions, ctx, trees=trees, tables=tables, include_dir=ns.include_directory)
    return run_documents(ctx, paths, annotate, ns.batch_size, out_file, pause)


def _emit_report(ctx: RunContext, cmd: str, report: RunReport) -> None:
    status = "ok" if not report.failures else "partial"
    if ctx.output_format == "json":
        payload = {"schema_version": 1, "tool": TOOL, "command": cmd, "status": status, "run_id": ctx.run_id}
        payload.update(report.as_payload())
        print(json.dumps(payload, sort_keys=True))
        return
    for entry in report.documents:
        print(f"{entry['file']}: {entry.get('status', 'Unknown')}")
    for name, message in report.failures:
        print(f"failed {name}: {message}")
    print(f"status={status} processed={report.processed} failed={len(report.failures)}")


def main(argv: list[str] | None = None, pause: PauseFn | None = _pause) -> int:
    p = build_parser()
    ns = p.parse_args(argv)
    fmt = ns.format or ("json" if "CI" in os.environ else "text")
    ctx = RunContext.from_args(ns.run_id, fmt, ns.verbose, ns.quiet, ns.log_json)
    try:
        if ns.cmd == "check":
            report = run_check(ctx, ns, pause)
        elif ns.cmd == "copilot":
            report = run_copilot(ctx, ns, pause)
        else:
            return ERR_USAGE
        _emit_report(ctx, ns.cmd, report)
        return OK
    except CloudCheckError as exc:
        if ctx.output_format == "json":
            print(
                json.dumps(
                    {
                        "schema_version": 1,
                        "tool": TOOL,
                        "status": "fail",
                        "error": {"message": str(exc), "code": exc.code, "kind": exc.kind},
                    },
                    sort_keys=True,
                ),
                file=sys.stderr,
            )
        else:
            print(str(exc), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(f"internal error: {exc}", file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
