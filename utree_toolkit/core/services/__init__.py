from __future__ import annotations

"""High-level orchestration services (node building, transitions, navigation).

Services are instantiated directly; :class:`TreeEngine` wires them together
for a loaded bundle.
"""

from .history_service import NavigationHistory  # noqa: F401
from .node_factory import BuildResult, NodeFactory  # noqa: F401
from .transition_resolver import next_node_name, transition_key  # noqa: F401
from .tree_engine import NavigationOutcome, TreeEngine  # noqa: F401

__all__: list[str] = [
    "NavigationHistory",
    "NodeFactory",
    "BuildResult",
    "transition_key",
    "next_node_name",
    "TreeEngine",
    "NavigationOutcome",
]
