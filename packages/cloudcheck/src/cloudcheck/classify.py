from __future__ import annotations

from .matcher import is_bundle_drive_item
from .models import CHINA, GLOBAL, SECONDARY_CLOUDS, US_GOV, CloudStatus
from .overrides import OverrideTables
from .spec_tree import SpecNode

_WEAK = (CloudStatus.UNKNOWN, CloudStatus.GLOBAL_ONLY)


def effective_method(node: SpecNode, method: str | None) -> str | None:
    if method is not None and is_bundle_drive_item(node):
        return "GET"
    return method


def supported_clouds(node: SpecNode, method: str, tables: OverrideTables | None = None) -> set[str]:
    tables = tables or OverrideTables()
    clouds = {GLOBAL} if node.supports(GLOBAL, method) else set()
    for cloud in SECONDARY_CLOUDS:
        if node.supports(cloud, method) and not tables.is_excluded(node.path, method, cloud):
            clouds.add(cloud)
    return clouds


def classify(node: SpecNode, method: str | None, tables: OverrideTables | None = None) -> CloudStatus:
    """Reduce the clouds exposing ``method`` at ``node`` to one status.

    Only operations present in the Global cloud are classified; anything else
    is ``UNKNOWN``.
    """
    method = effective_method(node, method)
    if method is None:
        return CloudStatus.UNKNOWN
    clouds = supported_clouds(node, method, tables)
    if GLOBAL not in clouds:
        return CloudStatus.UNKNOWN
    us_gov, china = US_GOV in clouds, CHINA in clouds
    if us_gov and china:
        return CloudStatus.ALL_CLOUDS
    if not us_gov and not china:
        return CloudStatus.GLOBAL_ONLY
    return CloudStatus.GLOBAL_AND_US_GOV if us_gov else CloudStatus.GLOBAL_AND_CHINA


def combine(a: CloudStatus, b: CloudStatus) -> CloudStatus:
    """Join two statuses into the most inclusive one."""
    if a == b:
        return a
    if a in _WEAK:
        return CloudStatus.GLOBAL_ONLY if b == CloudStatus.UNKNOWN else b
    if b in _WEAK:
        return a
    return CloudStatus.ALL_CLOUDS


def is_mismatch(current: CloudStatus, observed: CloudStatus) -> bool:
    return CloudStatus.UNKNOWN not in (current, observed) and current != observed
