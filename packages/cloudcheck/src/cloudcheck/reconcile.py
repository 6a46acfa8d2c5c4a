from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .classify import classify, combine, is_mismatch
from .core.context import RunContext
from .core.logging import log_event
from .docs import DEFAULT_INCLUDE_DIR, ApiDocument
from .errors import DocumentError
from .matcher import match_node
from .models import CloudStatus, Edition, Operation
from .overrides import OverrideTables
from .spec_tree import SpecTree

Annotator = Callable[[ApiDocument], dict[str, object]]
PauseFn = Callable[[int], None]


@dataclass
class RunReport:
    processed: int = 0
    documents: list[dict[str, object]] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)

    def as_payload(self) -> dict[str, object]:
        return {
            "processed": self.processed,
            "documents": self.documents,
            "failures": [{"file": name, "message": message} for name, message in self.failures],
        }


def reconcile_operations(
    ctx: RunContext,
    doc: ApiDocument,
    operations: Iterable[Operation],
    tree: SpecTree,
    tables: OverrideTables,
    edition_label: str = "all",
) -> CloudStatus:
    """Classify each operation in documentation order and join the results."""
    status = CloudStatus.UNKNOWN
    for operation in operations:
        node = match_node(tree, operation, doc.namespace, tables)
        if node is None:
            log_event(ctx, "warning", "reconcile", "node-not-found", path=operation.path, edition=edition_label)
            continue
        observed = classify(node, operation.method, tables)
        log_event(
            ctx, "info", "reconcile", "operation-status", path=operation.path, status=observed, edition=edition_label
        )
        if is_mismatch(status, observed):
            log_event(
                ctx,
                "warning",
                "reconcile",
                "status-mismatch",
                file=str(doc.file_path),
                observed=observed,
                current=status,
                edition=edition_label,
            )
        status = combine(status, observed)
    return status


def annotate_document(
    ctx: RunContext,
    doc: ApiDocument,
    tree: SpecTree,
    tables: OverrideTables,
    remove_old_includes: bool = False,
    include_dir: str = DEFAULT_INCLUDE_DIR,
) -> dict[str, object]:
    doc.status = reconcile_operations(ctx, doc, doc.operations, tree, tables)
    doc.add_or_update_include_line(remove_old_includes, include_dir)
    return {"status": str(doc.status)}


def annotate_editions(
    ctx: RunContext,
    doc: ApiDocument,
    trees: Mapping[Edition, SpecTree],
    tables: OverrideTables,
    include_dir: str = DEFAULT_INCLUDE_DIR,
) -> dict[str, object]:
    primary_ops = doc.operations_for(Edition.PRIMARY)
    primary = reconcile_operations(ctx, doc, primary_ops, trees[Edition.PRIMARY], tables, "v1")
    preview = reconcile_operations(
        ctx, doc, doc.operations_for(Edition.PREVIEW), trees[Edition.PREVIEW], tables, "beta"
    )
    if primary_ops and primary == CloudStatus.UNKNOWN:
        log_event(ctx, "warning", "reconcile", "primary-status-unknown", file=str(doc.file_path), assumed="beta")
    if primary in (preview, CloudStatus.UNKNOWN) or preview == CloudStatus.UNKNOWN:
        # a page without usable preview operations gets the primary status
        doc.status = primary if preview == CloudStatus.UNKNOWN else preview
        doc.add_or_update_include_line(True, include_dir)
        return {"status": str(doc.status), "v1": str(primary), "beta": str(preview), "pivoted": False}
    doc.add_or_update_pivoted_include_line(primary, preview, include_dir)
    return {"status": "pivoted", "v1": str(primary), "beta": str(preview), "pivoted": True}


def write_failures(failures: list[tuple[str, str]], out_file: Path | None) -> None:
    if out_file is None or not failures:
        return
    with out_file.open("a", encoding="utf-8") as f:
        for name, message in failures:
            f.write(f"{name},{message}\n")


def run_documents(
    ctx: RunContext,
    paths: Iterable[Path],
    annotate: Annotator,
    batch_size: int = 0,
    out_file: Path | None = None,
    pause: PauseFn | None = None,
) -> RunReport:
    """Read and annotate every document, collecting failures instead of stopping on them."""
    report = RunReport()
    pending: list[tuple[str, str]] = []
    in_batch = 0
    for path in paths:
        entry: dict[str, object] = {"file": str(path)}
        doc: ApiDocument | None = None
        try:
            doc = ApiDocument.from_markdown_file(path)
            for line, message in doc.line_errors:
                log_event(ctx, "warning", "docs", "parse-line-failed", file=str(path), line=line, message=message)
            entry["operations"] = len(doc.operations)
            entry.update(annotate(doc))
        except (DocumentError, OSError) as exc:
            action = "read-failed" if doc is None else "annotate-failed"
            log_event(ctx, "error", "docs", action, file=str(path), message=str(exc))
            failure = (path.name, str(exc))
            pending.append(failure)
            report.failures.append(failure)
            status = CloudStatus.UNKNOWN if doc is None else doc.status
            entry.update({"status": str(status), "error": str(exc)})
        report.documents.append(entry)
        report.processed += 1
        in_batch += 1
        if batch_size > 0 and in_batch >= batch_size:
            write_failures(pending, out_file)
            pending.clear()
            if pause is not None:
                pause(batch_size)
            in_batch = 0
    write_failures(pending, out_file)
    return report
