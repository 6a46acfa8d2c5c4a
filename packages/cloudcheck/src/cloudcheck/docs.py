"""Markdown API reference pages: reading operations and writing support includes."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError, DocumentError, MalformedOperationLine
from .models import CloudStatus, Edition, Operation
from .operations import extract_operation

INCLUDE_MARKER = "[!INCLUDE [national-cloud-support]"
DEFAULT_INCLUDE_DIR = "../../includes"
REQUEST_HEADING = "http request"

INCLUDE_FILES: dict[CloudStatus, str] = {
    CloudStatus.ALL_CLOUDS: "all-clouds.md",
    CloudStatus.GLOBAL_AND_US_GOV: "global-us.md",
    CloudStatus.GLOBAL_AND_CHINA: "global-china.md",
    CloudStatus.GLOBAL_ONLY: "global-only.md",
}
MONIKERS: dict[Edition, str] = {
    Edition.PRIMARY: "graph-rest-1.0",
    Edition.PREVIEW: "graph-rest-beta",
}
MONIKER_END = "::: moniker-end"

_NAMESPACE_RE = re.compile(r"^\s*namespace:\s*(?P<namespace>[\w.]*)\s*$", re.IGNORECASE | re.MULTILINE)
_HEADING_RE = re.compile(r"^ {0,3}(?P<level>#{1,6})(?:[ \t]+(?P<text>.*?))??(?:[ \t]+#+)?[ \t]*$")
_FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})")


@dataclass(frozen=True)
class Heading:
    index: int
    level: int
    text: str


@dataclass(frozen=True)
class FencedBlock:
    index: int
    lines: tuple[str, ...]


def extract_namespace(markdown: str) -> str | None:
    match = _NAMESPACE_RE.search(markdown)
    return match.group("namespace") if match else None


def _front_matter_end(lines: list[str]) -> int:
    if not lines or lines[0].strip() != "---":
        return 0
    for index in range(1, len(lines)):
        if lines[index].strip() in {"---", "..."}:
            return index + 1
    return 0


def iter_blocks(lines: list[str]) -> Iterator[Heading | FencedBlock]:
    """Yield ATX headings and fenced code blocks, skipping front matter."""
    index = _front_matter_end(lines)
    while index < len(lines):
        line = lines[index]
        fence = _FENCE_RE.match(line)
        if fence:
            indent = len(fence.group("indent"))
            marker = fence.group("fence")
            body: list[str] = []
            start = index
            index += 1
            while index < len(lines):
                closing = lines[index].strip()
                if closing.startswith(marker[0] * len(marker)) and not closing.strip(marker[0]):
                    break
                body.append(_dedent(lines[index], indent))
                index += 1
            yield FencedBlock(start, tuple(body))
            index += 1
            continue
        heading = _HEADING_RE.match(line)
        if heading:
            yield Heading(index, len(heading.group("level")), (heading.group("text") or "").strip())
        index += 1


def _dedent(line: str, width: int) -> str:
    stripped = len(line) - len(line.lstrip(" \t"))
    return line[min(stripped, width) :]


def request_lines(lines: list[str]) -> list[str]:
    """Lines of every fenced block under the "HTTP request" heading."""
    collected: list[str] = []
    section_level = 0
    for block in iter_blocks(lines):
        if not section_level:
            if isinstance(block, Heading) and block.text.casefold() == REQUEST_HEADING:
                section_level = block.level
            continue
        if isinstance(block, Heading):
            if block.level <= section_level:
                break
            continue
        collected.extend(block.lines)
    return collected


def find_insert_index(lines: list[str]) -> int | None:
    inside_intro = False
    for block in iter_blocks(lines):
        if not isinstance(block, Heading):
            continue
        if inside_intro:
            return block.index
        inside_intro = block.level == 1
    return None


def render_include_line(status: CloudStatus, include_dir: str = DEFAULT_INCLUDE_DIR) -> str:
    name = INCLUDE_FILES.get(status)
    if name is None:
        raise DocumentError(f"invalid cloud support status: {status}")
    return f"[!INCLUDE [national-cloud-support]({include_dir.rstrip('/')}/{name})]"


def _include_index(lines: list[str]) -> int | None:
    return next((i for i, line in enumerate(lines) if INCLUDE_MARKER in line), None)


def _neighbour(lines: list[str], index: int, step: int) -> int:
    index += step
    while 0 <= index < len(lines) and not lines[index].strip():
        index += step
    return index


def remove_include_lines(lines: list[str]) -> list[str]:
    """Drop include lines, the moniker block wrapping each, and one trailing blank."""
    out = list(lines)
    index = _include_index(out)
    while index is not None:
        start = end = index
        before, after = _neighbour(out, index, -1), _neighbour(out, index, 1)
        if (
            before >= 0
            and after < len(out)
            and out[before].strip().startswith("::: moniker range=")
            and out[after].strip() == MONIKER_END
        ):
            start, end = before, after
        del out[start : end + 1]
        if start < len(out) and not out[start].strip():
            del out[start]
        index = _include_index(out)
    return out


def read_markdown(file_path: Path) -> str:
    try:
        return file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentError(f"{file_path} is not valid UTF-8: {exc.reason} at byte {exc.start}") from exc
    except OSError as exc:
        raise DocumentError(f"{file_path} cannot be read: {exc.strerror or exc}") from exc


@dataclass
class ApiDocument:
    file_path: Path
    namespace: str | None = None
    operations: list[Operation] = field(default_factory=list)
    line_errors: list[tuple[str, str]] = field(default_factory=list)
    status: CloudStatus = CloudStatus.UNKNOWN

    @classmethod
    def from_markdown_file(cls, file_path: Path) -> ApiDocument:
        text = read_markdown(file_path)
        doc = cls(file_path=file_path, namespace=extract_namespace(text))
        for line in request_lines(text.splitlines()):
            try:
                operation = extract_operation(line)
            except MalformedOperationLine as exc:
                doc.line_errors.append((line, exc.message))
                continue
            if operation is not None:
                doc.operations.append(operation)
        return doc

    def operations_for(self, edition: Edition) -> list[Operation]:
        return [op for op in self.operations if op.edition == edition]

    def _read_lines(self) -> list[str]:
        return read_markdown(self.file_path).splitlines()

    def _write_lines(self, lines: list[str]) -> None:
        self.file_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    def _insert_block(self, lines: list[str], block: list[str]) -> None:
        index = find_insert_index(lines)
        if index is None:
            raise DocumentError(f"{self.file_path} is malformed, cannot find insert point")
        insert = [*block, ""]
        if index > 0 and lines[index - 1].strip():
            insert.insert(0, "")
        lines[index:index] = insert

    def add_or_update_include_line(
        self,
        remove_old_includes: bool = False,
        include_dir: str = DEFAULT_INCLUDE_DIR,
    ) -> None:
        include = render_include_line(self.status, include_dir)
        lines = self._read_lines()
        if remove_old_includes:
            lines = remove_include_lines(lines)
        existing = _include_index(lines)
        if existing is None:
            self._insert_block(lines, [include])
        else:
            lines[existing] = include
        self._write_lines(lines)

    def add_or_update_pivoted_include_line(
        self,
        primary: CloudStatus,
        preview: CloudStatus,
        include_dir: str = DEFAULT_INCLUDE_DIR,
    ) -> None:
        block: list[str] = []
        for edition, status in ((Edition.PRIMARY, primary), (Edition.PREVIEW, preview)):
            if block:
                block.append("")
            block.extend(
                [
                    f'::: moniker range="{MONIKERS[edition]}"',
                    "",
                    render_include_line(status, include_dir),
                    "",
                    MONIKER_END,
                ]
            )
        lines = remove_include_lines(self._read_lines())
        self._insert_block(lines, block)
        self._write_lines(lines)


def list_doc_paths(directory: Path) -> list[Path]:
    """Markdown pages of a docs folder in name order; each is read when it is processed."""
    if not directory.is_dir():
        raise ConfigError(f"docs folder not found: {directory}")
    return sorted(directory.glob("*.md"))
