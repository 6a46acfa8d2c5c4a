__version__ = "0.1.0"

__all__ = [
    "__version__",
    "classify",
    "cli",
    "core",
    "docs",
    "errors",
    "exit_codes",
    "matcher",
    "models",
    "operations",
    "overrides",
    "paths",
    "reconcile",
    "spec_tree",
]
