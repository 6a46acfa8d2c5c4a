from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

GLOBAL = "Global"
US_GOV = "UsGov"
CHINA = "China"

SECONDARY_CLOUDS: tuple[str, ...] = (US_GOV, CHINA)


class Edition(Enum):
    UNKNOWN = "unknown"
    PRIMARY = "v1.0"
    PREVIEW = "beta"


class CloudStatus(Enum):
    """Which cloud combination exposes an operation.

    Values form a join semilattice: ``UNKNOWN`` < ``GLOBAL_ONLY`` <
    {``GLOBAL_AND_US_GOV``, ``GLOBAL_AND_CHINA``} < ``ALL_CLOUDS``.
    """

    UNKNOWN = "Unknown"
    GLOBAL_ONLY = "GlobalOnly"
    GLOBAL_AND_US_GOV = "GlobalAndUSGov"
    GLOBAL_AND_CHINA = "GlobalAndChina"
    ALL_CLOUDS = "AllClouds"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Operation:
    method: str
    path: str
    edition: Edition = Edition.UNKNOWN
