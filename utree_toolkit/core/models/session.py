from __future__ import annotations

"""Session-level value objects handed to and from presentation layers.

Scope:
- Pure core model (no I/O, no UI).
- :class:`NodeState` records what the user answered at a node; answer writers
  serialise these records, the engine only accumulates them.
- :class:`PlaybackSettings` carries the voice-over/auto-play flags explicitly
  instead of reading them from ambient user preferences.
"""

import copy
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from . import Node, NodeKind

__all__ = ["NodeState", "PlaybackSettings"]


@dataclass(frozen=True)
class NodeState:
    """Answer record for one visited node.

    Attributes
    ----------
    node_name
        Raw name of the node in the process definition.
    transition_name
        Transition key computed when the state was saved ("Yes", "Any", ...).
    kind
        Variant tag of the node, or None when it was a placeholder.
    node
        Deep copy of the node, interaction state included.
    timestamp
        Unix epoch seconds when the state was recorded.
    """

    node_name: str
    transition_name: str
    kind: Optional["NodeKind"]
    node: Optional["Node"]
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def capture(cls, node_name: str, transition_name: str, node: Optional["Node"]) -> "NodeState":
        """Snapshot *node* so later UI mutations do not leak into the record."""
        frozen = copy.deepcopy(node) if node is not None else None
        return cls(
            node_name=node_name,
            transition_name=transition_name,
            kind=frozen.kind if frozen is not None else None,
            node=frozen,
        )


@dataclass
class PlaybackSettings:
    """Presentation flags passed into the engine.

    Enabling auto-play also enables voice-over.
    """

    voice_over: bool = True
    auto_play: bool = False

    def __post_init__(self) -> None:
        if self.auto_play:
            self.voice_over = True

    def set_auto_play(self, enabled: bool) -> None:
        self.auto_play = enabled
        if enabled:
            self.voice_over = True

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "PlaybackSettings":
        """Build settings from the ``playback`` config section."""
        if config is None:
            from utree_toolkit.config import ConfigManager

            config = ConfigManager().get_playback_config()
        return cls(
            voice_over=bool(config.get("voice_over", True)),
            auto_play=bool(config.get("auto_play", False)),
        )
