"""Run context, structured logging and file-format helpers."""

from .context import RunContext
from .logging import log_event

__all__ = ["RunContext", "log_event"]
