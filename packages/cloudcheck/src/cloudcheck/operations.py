from __future__ import annotations

import re

from .errors import MalformedOperationLine
from .models import Operation
from .paths import classify_edition, normalize_path

# RFC 9110 token characters.
_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def extract_operation(line: str) -> Operation | None:
    """Parse one line of an HTTP request example into an :class:`Operation`.

    Blank lines yield ``None``. The method is kept as written.
    """
    if not line or line.isspace():
        return None
    parts = line.strip().split(None, 1)
    if len(parts) < 2:
        raise MalformedOperationLine(f"invalid line text: {line.strip()}")
    method, raw_path = parts
    if _METHOD_RE.fullmatch(method) is None:
        raise MalformedOperationLine(f"invalid HTTP operation: {method}")
    return Operation(method=method, path=normalize_path(raw_path), edition=classify_edition(raw_path))
