from __future__ import annotations

"""Stateful walk through a loaded utree bundle.

:class:`TreeEngine` owns the document, the current node with its transition
table, the navigation history and the active language. Presentation layers
read ``current_node`` and the asset paths, mutate the node's interaction
state (selections, typed text), then call :meth:`TreeEngine.advance`,
:meth:`TreeEngine.retreat` or :meth:`TreeEngine.set_language`.

The engine is synchronous and not thread-safe: one session owns one engine
and serialises its calls.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from utree_toolkit.core.assets import AssetResolver, NodeAssets
from utree_toolkit.core.importers.tree_loader import ElementCategory, TreeDocument, TreeLoader
from utree_toolkit.core.localization import LocalizationResolver, language_code_for
from utree_toolkit.core.models import (
    Node,
    NodeKind,
    NodeState,
    PlaybackSettings,
    TransitionTable,
)
from utree_toolkit.core.services.history_service import NavigationHistory
from utree_toolkit.core.services.node_factory import BuildResult, NodeFactory, placeholder_node
from utree_toolkit.core.services.transition_resolver import next_node_name, transition_key

logger = logging.getLogger(__name__)

__all__ = ["TreeEngine", "NavigationOutcome"]


class NavigationOutcome(Enum):
    """Result of a navigation request; blocked outcomes are normal, not errors."""

    ADVANCED = "advanced"
    BLOCKED = "blocked"
    RETREATED = "retreated"
    AT_START = "at_start"

    @property
    def succeeded(self) -> bool:
        return self in (NavigationOutcome.ADVANCED, NavigationOutcome.RETREATED)


class TreeEngine:
    """Interpret a utree bundle and track the user's position in it.

    Parameters
    ----------
    settings : PlaybackSettings, optional
        Voice-over/auto-play flags for presentation layers. Read from the
        ``playback`` config section when omitted.
    assets_config : dict, optional
        ``assets`` config section override.
    languages_config : dict, optional
        ``languages`` config section override.

    Examples
    --------
    >>> engine = TreeEngine.open(Path("Sample.utree"))  # doctest: +SKIP
    >>> engine.current_node.text  # doctest: +SKIP
    'Welcome'
    >>> engine.advance()  # doctest: +SKIP
    <NavigationOutcome.ADVANCED: 'advanced'>
    """

    def __init__(
        self,
        settings: Optional[PlaybackSettings] = None,
        assets_config: Optional[Dict[str, Any]] = None,
        languages_config: Optional[Dict[str, Any]] = None,
    ) -> None:
        if languages_config is None:
            from utree_toolkit.config import ConfigManager

            languages_config = ConfigManager().get_languages_config()
        self.settings = settings if settings is not None else PlaybackSettings.from_config()
        self._assets_config = assets_config
        self._languages_config = languages_config
        self._loader = TreeLoader(default_language=languages_config.get("default_language") or "English")

        self._document: Optional[TreeDocument] = None
        self._localization: Optional[LocalizationResolver] = None
        self._factory: Optional[NodeFactory] = None
        self._history = NavigationHistory()
        self._current: BuildResult = BuildResult(node=placeholder_node())
        self._node_states: List[NodeState] = []

    @classmethod
    def open(cls, root_path: Path, **kwargs: Any) -> "TreeEngine":
        """Create an engine and load the bundle at *root_path*."""
        engine = cls(**kwargs)
        engine.load(root_path)
        return engine

    # ------------------------------------------------------------- Lifecycle

    def load(self, root_path: Path) -> None:
        """Load a bundle and position the walk on its start node.

        Never raises for document problems: without a start transition the
        history stays empty and the current node is the placeholder.
        """
        document = self._loader.load(Path(root_path))
        self._document = document
        self._localization = LocalizationResolver(document)
        assets = AssetResolver(document.root_path, self._assets_config)
        self._factory = NodeFactory(document, self._localization, assets)
        self._history = NavigationHistory()
        self._node_states = []

        start_name = document.start_node_name()
        if start_name is None:
            logger.warning("Tree '%s' has no start transition", document.title)
            self._current = BuildResult(node=placeholder_node())
            return

        self._history.push(start_name)
        self._rebuild()

    @property
    def is_loaded(self) -> bool:
        return self._document is not None

    # ------------------------------------------------------------ Navigation

    def advance(self) -> NavigationOutcome:
        """Move to the node selected by the current interaction state.

        On success the state of the node being left is recorded in
        :attr:`node_states`.
        """
        if self.should_block_advance():
            logger.info("Advance blocked: %s node has no selection", self.current_node.kind.value)
            return NavigationOutcome.BLOCKED
        name = self.next_node_name
        if name is None:
            logger.info("Advance blocked: no transition for key %r", self.current_transition_key)
            return NavigationOutcome.BLOCKED

        self._node_states.append(
            NodeState.capture(self._history.current or "", self.current_transition_key, self.current_node)
        )
        self._history.push(name)
        self._rebuild()
        return NavigationOutcome.ADVANCED

    def retreat(self) -> NavigationOutcome:
        """Go back to the previous node; at the start node nothing changes."""
        if self._history.pop() is None:
            return NavigationOutcome.AT_START
        if self._node_states:
            self._node_states.pop()
        self._rebuild()
        return NavigationOutcome.RETREATED

    def set_language(self, language: str) -> None:
        """Switch the active language and rebuild the current node.

        The navigation history is left untouched; interaction state of the
        current node is reset by the rebuild.
        """
        if self._localization is None:
            logger.warning("Ignoring language change to %s: no tree loaded", language)
            return
        if language not in self.available_languages:
            logger.warning("Language %s is not provided by tree '%s'", language, self.title)
        self._localization.set_language(language)
        logger.info("Language switched to %s", language)
        if self._history.current is not None:
            self._rebuild()

    # ------------------------------------------------------------ Predicates

    def is_current_end_state(self) -> bool:
        """True when the current name is an end state, or cannot be found at all."""
        return self._is_end_state(self._history.current)

    def is_next_end_state(self) -> bool:
        """True when the next name is an end state, or there is no next node."""
        return self._is_end_state(self.next_node_name)

    def should_block_advance(self) -> bool:
        """True when a selection is required and none was made.

        Checklists never block: too few ticks is a valid ``"No"`` answer.
        """
        node = self.current_node
        return node.is_selection_type and node.nothing_selected and node.kind is not NodeKind.CHECKLIST

    @property
    def previous_node_available(self) -> bool:
        return self._history.can_retreat()

    @property
    def next_node_available(self) -> bool:
        return self.next_node_name is not None

    # ---------------------------------------------------------------- State

    @property
    def document(self) -> Optional[TreeDocument]:
        return self._document

    @property
    def title(self) -> str:
        return self._document.title if self._document else ""

    @property
    def base_language(self) -> str:
        return self._document.base_language if self._document else ""

    @property
    def available_languages(self) -> Tuple[str, ...]:
        return self._document.available_languages if self._document else ()

    @property
    def current_language(self) -> str:
        return self._localization.language if self._localization else ""

    @property
    def current_language_code(self) -> str:
        return language_code_for(self.current_language, self._languages_config)

    @property
    def current_node(self) -> Node:
        return self._current.node

    @property
    def current_node_name(self) -> Optional[str]:
        return self._history.current

    @property
    def transition_table(self) -> TransitionTable:
        return dict(self._current.transition_table)

    @property
    def current_transition_key(self) -> str:
        return transition_key(self._current.node, self._current.transition_table)

    @property
    def next_node_name(self) -> Optional[str]:
        return next_node_name(self._current.node, self._current.transition_table)

    @property
    def history(self) -> Tuple[str, ...]:
        return self._history.names

    @property
    def node_states(self) -> Tuple[NodeState, ...]:
        """Answer records of the nodes left by :meth:`advance`, oldest first."""
        return tuple(self._node_states)

    @property
    def hints_dictionary(self) -> Dict[str, str]:
        return dict(self._localization.hints) if self._localization else {}

    @property
    def assets(self) -> NodeAssets:
        return self._current.assets

    @property
    def background_image_path(self) -> Optional[Path]:
        return self._current.assets.background_image

    @property
    def background_audio_path(self) -> Optional[Path]:
        return self._current.assets.background_audio

    @property
    def voice_over_audio_path(self) -> Optional[Path]:
        return self._current.assets.voice_over_audio

    # ------------------------------------------------------------- Internals

    def _rebuild(self) -> None:
        name = self._history.current
        if name is None or self._factory is None:
            self._current = BuildResult(node=placeholder_node())
            return
        self._current = self._factory.build(name)
        logger.debug("Current node: %r (%s)", name, self._current.node.kind.value)

    def _is_end_state(self, name: Optional[str]) -> bool:
        if self._document is None or name is None:
            return True
        category = self._document.category_of(name)
        return category is None or category is ElementCategory.END_STATE
