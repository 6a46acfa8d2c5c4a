from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_CONFIG, ERR_DOCS, ERR_INTERNAL, ERR_SPEC, ERR_USAGE


@dataclass
class CloudCheckError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


class MalformedOperationLine(CloudCheckError):
    """An HTTP request line that does not split into a method and a path."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_USAGE, "malformed_operation_line")


class DocumentError(CloudCheckError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_DOCS, "document_error")


class SpecLoadError(CloudCheckError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_SPEC, "spec_load_error")


class ConfigError(CloudCheckError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_CONFIG, "config_error")
