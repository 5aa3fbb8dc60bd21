from __future__ import annotations

"""Import functionality for utree bundles.

Key components:
- TreeLoader: reads an unpacked bundle directory into a TreeDocument
- load_string_catalog: reads translation and hint catalogs
"""

from .tree_loader import (
    ElementCategory,
    TreeDocument,
    TreeLoadError,
    TreeLoader,
    load_string_catalog,
)

__all__ = ["TreeLoader", "TreeDocument", "TreeLoadError", "ElementCategory", "load_string_catalog"]
