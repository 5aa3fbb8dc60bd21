"""Top-level package for the utree interpretation engine.

This package hosts the GUI-agnostic implementation.  Front-ends (e.g. the
text-mode runner, a desktop or mobile shell) should only depend on the public
API exposed here rather than importing internal modules directly.
"""

from .core.services.tree_engine import TreeEngine, NavigationOutcome  # re-export for convenience

__all__: list[str] = [
    "TreeEngine",
    "NavigationOutcome",
]
