"""Canonical path normalization for documented API paths.

A documented path is rewritten so that every identifier uses the ``{id}``
placeholder and every function parameter uses ``name='{name}'`` (or
``name='@name'`` for query-parameter aliases). Two paths that only differ in
identifier values normalize to the same string, and normalizing a canonical
path returns it unchanged.
"""

from __future__ import annotations

import re
from typing import Callable

from .models import Edition

ID_PLACEHOLDER = "{id}"

# a scheme is optional for the Graph hosts, e.g. graph.microsoft.us or microsoftgraph.chinacloudapi.cn
_HOST = r"(?:https?://[^/\s]+|(?:graph\.microsoft|microsoftgraph)\.[^/\s]+)"
_EDITION_PREFIX_RE = re.compile(rf"^(?:{_HOST})?/(?P<edition>v1\.0|beta)(?=[/?]|$)", re.IGNORECASE)
_HOST_RE = re.compile(rf"^{_HOST}", re.IGNORECASE)
_EDITIONS = {"v1.0": Edition.PRIMARY, "beta": Edition.PREVIEW}

_ROOT_BY_PATH = "/root:/{item-path}:"
_KEY_PARENS_RE = re.compile(r"\(\s*'?(\{[^{}()]*\})'?\s*\)")
_QUOTED_KEY_RE = re.compile(r"\('[^'(),=/]*'\)")
_NAME_KEY_RE = re.compile(r"/\{name\}(?=[/?]|$)")
_ID_SEGMENT_RE = re.compile(r"\{[^{}]*id[^{}]*\}", re.IGNORECASE)

_PARAMETER_LIST_RE = re.compile(r"\((?P<params>[^()]*=[^()]*)\)")
_PARAMETER_PAIR_RE = re.compile(r"\s*(?P<name>\w+)\s*=\s*(?P<value>[^,]*?)\s*")

_USERS_DRIVE_RE = re.compile(r"^/users/\{id\}/drive/")
_ME_DRIVE_RE = re.compile(r"^/me/drive/")
_DRIVE_SHORTCUT_RE = re.compile(r"^/drive/")
_DRIVE_BY_ID = "/drives/{id}/"
_MAIL_FOLDER_RE = re.compile(r"/mail[Ff]olders/\w+(?=/)")


def classify_edition(raw_path: str) -> Edition:
    """Return the edition named by the path's version prefix, before normalization."""
    match = _EDITION_PREFIX_RE.match(raw_path.strip())
    if match is None:
        return Edition.UNKNOWN
    return _EDITIONS[match.group("edition").lower()]


def strip_edition_prefix(path: str) -> str:
    stripped = path.strip()
    match = _EDITION_PREFIX_RE.match(stripped)
    while match is not None:
        stripped = stripped[match.end() :]
        match = _EDITION_PREFIX_RE.match(stripped)
    stripped = _HOST_RE.sub("", stripped)
    return stripped if stripped.startswith("/") else f"/{stripped}"


def normalize_legacy_segments(path: str) -> str:
    # OneDrive addresses items by path with /root:/{item-path}:
    normalized = path.replace(_ROOT_BY_PATH, "/items/{id}")
    # OData key syntax: /users('{id}') is /users/{id}
    normalized = _KEY_PARENS_RE.sub(lambda m: f"/{m.group(1)}", normalized)
    normalized = _QUOTED_KEY_RE.sub("/" + ID_PLACEHOLDER, normalized)
    # Chart APIs document their key as {name}
    return _NAME_KEY_RE.sub("/" + ID_PLACEHOLDER, normalized)


def normalize_id_segments(path: str) -> str:
    return _ID_SEGMENT_RE.sub(ID_PLACEHOLDER, path)


def _render_parameter_list(match: re.Match[str]) -> str:
    rendered: list[str] = []
    for pair in match.group("params").split(","):
        parsed = _PARAMETER_PAIR_RE.fullmatch(pair)
        if parsed is None:
            return match.group(0)
        name = parsed.group("name")
        value = parsed.group("value").strip("'")
        rendered.append(f"{name}='@{name}'" if value.startswith("@") else f"{name}='{{{name}}}'")
    return "(" + ",".join(rendered) + ")"


def normalize_parameters(path: str) -> str:
    return _PARAMETER_LIST_RE.sub(_render_parameter_list, path)


def fix_user_drive_path(path: str) -> str:
    fixed = _USERS_DRIVE_RE.sub(_DRIVE_BY_ID, path)
    return _ME_DRIVE_RE.sub(_DRIVE_BY_ID, fixed)


def fix_drive_shortcut(path: str) -> str:
    return _DRIVE_SHORTCUT_RE.sub(_DRIVE_BY_ID, path)


def fix_drive_share_id(path: str) -> str:
    return path.replace("/shares/{encoded-sharing-url}", "/shares/" + ID_PLACEHOLDER)


def fix_well_known_mail_folders(path: str) -> str:
    return _MAIL_FOLDER_RE.sub("/mailFolders/" + ID_PLACEHOLDER, path)


PIPELINE: tuple[Callable[[str], str], ...] = (
    strip_edition_prefix,
    normalize_legacy_segments,
    normalize_id_segments,
    normalize_parameters,
    fix_user_drive_path,
    fix_drive_shortcut,
    fix_drive_share_id,
    fix_well_known_mail_folders,
)


def normalize_path(raw_path: str) -> str:
    path = raw_path
    for step in PIPELINE:
        path = step(path)
    return path


def split_segments(path: str) -> list[str]:
    """Split on ``/`` outside parentheses, dropping empty segments."""
    segments: list[str] = []
    current: list[str] = []
    depth = 0
    for char in path:
        if char == "(":
            depth += 1
        elif char == ")" and depth:
            depth -= 1
        if char == "/" and depth == 0:
            segments.append("".join(current))
            current = []
            continue
        current.append(char)
    segments.append("".join(current))
    return [segment.strip() for segment in segments if segment.strip()]
