"""Tolerant lookup of a canonical documentation path in a :class:`SpecTree`.

Documentation and OpenAPI descriptions disagree on a handful of spellings:
namespace-qualified segments, function calls with and without ``()``, and a
dropped ``microsoft.`` prefix. Each segment is resolved against the children
of the current node by trying candidate labels in a fixed order; the first
candidate that matches a child wins.
"""

from __future__ import annotations

from typing import Callable

from .models import Operation
from .overrides import OverrideTables
from .paths import ID_PLACEHOLDER, split_segments
from .spec_tree import SpecNode, SpecTree

DEFAULT_NAMESPACE = "microsoft.graph"
_GRAPH_PREFIX = "microsoft.graph"
_MICROSOFT_PREFIX = "microsoft."

LabelStrategy = Callable[[str, str], str]


def _literal(segment: str, namespace: str) -> str:
    return segment


def _qualified(segment: str, namespace: str) -> str:
    return f"{namespace}.{segment}"


def _function_call(segment: str, namespace: str) -> str:
    return f"{segment}()"


def _qualified_function_call(segment: str, namespace: str) -> str:
    return f"{namespace}.{segment}()"


CANDIDATE_STRATEGIES: tuple[LabelStrategy, ...] = (
    _literal,
    _qualified,
    _function_call,
    _qualified_function_call,
)
PREFIX_FALLBACK_STRATEGIES: tuple[LabelStrategy, ...] = (_literal, _function_call)


def candidate_labels(segment: str, namespace: str | None = None) -> list[str]:
    ns = namespace or DEFAULT_NAMESPACE
    return [strategy(segment, ns) for strategy in CANDIDATE_STRATEGIES]


def prefix_fallback_labels(segment: str) -> list[str]:
    """Labels to retry when OpenAPI left off the ``microsoft.`` prefix."""
    if not segment.casefold().startswith(_GRAPH_PREFIX):
        return []
    trimmed = segment[len(_MICROSOFT_PREFIX) :]
    return [strategy(trimmed, "") for strategy in PREFIX_FALLBACK_STRATEGIES]


def labels_match(label: str, candidate: str) -> bool:
    if label.casefold() == candidate.casefold():
        return True
    # Function parameter placeholders appear both as '{value}' and {value}.
    if "(" in label and "{" in label and "(" in candidate and "{" in candidate:
        return label.replace("'", "").casefold() == candidate.replace("'", "").casefold()
    return False


def is_id_label(label: str) -> bool:
    return label.startswith("{") and label.endswith("}") and "id" in label.casefold()


def is_bundle_drive_item(node: SpecNode) -> bool:
    # OpenAPI omits the operations below /bundles/{driveItem-id}.
    return node.path.endswith("/bundles/{driveItem-id}")


def _first_child(node: SpecNode, labels: list[str]) -> SpecNode | None:
    for candidate in labels:
        for label, child in node.children.items():
            if labels_match(label, candidate):
                return child
    return None


def resolve_segment(node: SpecNode, segment: str, namespace: str | None = None) -> SpecNode | None:
    if segment == ID_PLACEHOLDER:
        return next((child for label, child in node.children.items() if is_id_label(label)), None)
    found = _first_child(node, candidate_labels(segment, namespace))
    if found is None:
        found = _first_child(node, prefix_fallback_labels(segment))
    return found


def match_node(
    tree: SpecTree,
    operation: Operation,
    namespace: str | None = None,
    tables: OverrideTables | None = None,
) -> SpecNode | None:
    path = operation.path.split("?", 1)[0]
    if tables is not None:
        path = tables.resolve_override(path, operation.method)
    node = tree.root
    for segment in split_segments(path):
        next_node = resolve_segment(node, segment, namespace)
        if next_node is None:
            return None
        node = next_node
        if is_bundle_drive_item(node):
            return node
    return node
