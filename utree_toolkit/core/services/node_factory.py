from __future__ import annotations

"""Build typed nodes and transition tables from process-definition elements.

The factory follows a fixed pipeline for every raw node name:

1. locate the element (task node, then end state, then decision);
2. decode the name into a :class:`NodeNameInfo`;
3. resolve media from the name modifiers;
4. translate the display text, then rewrite ``{br}`` markup;
5. dispatch on the node kind to build the variant and its options;
6. split off an embedded ``Answer=`` target for the ``*WithAnswer`` kinds;
7. collect the transition table.

Nothing in the pipeline raises for document problems: an unknown name or an
unknown type tag yields the "Unknown Node" placeholder with an empty table so
a walk never aborts mid-session.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from lxml import etree as ET

from utree_toolkit.core.assets import AssetResolver, NodeAssets
from utree_toolkit.core.importers.tree_loader import (
    TASK,
    TRANSITION,
    ElementCategory,
    TreeDocument,
)
from utree_toolkit.core.localization import LocalizationResolver
from utree_toolkit.core.models import (
    ANSWER_KINDS,
    ANY_TRANSITION,
    DisplayNode,
    Node,
    NodeKind,
    SelectionNode,
    TextInputNode,
    TransitionTable,
)
from utree_toolkit.core.parser.name_decoder import NodeNameInfo, decode_name
from utree_toolkit.core.utils import (
    ANSWER_SEPARATOR,
    apply_markup,
    join_name,
    parse_int,
    split_answer,
    split_name,
)

logger = logging.getLogger(__name__)

__all__ = ["NodeFactory", "BuildResult", "END_STATE_TEXT", "UNKNOWN_NODE_TEXT"]

END_STATE_TEXT = "You've now reached the end"
UNKNOWN_NODE_TEXT = "Unknown Node"

_IMAGE_KINDS = frozenset({
    NodeKind.IMAGE_DISPLAY,
    NodeKind.TEXT_IMAGE_DISPLAY,
    NodeKind.IMAGE_TEXT_DISPLAY,
})


@dataclass
class BuildResult:
    """Outcome of :meth:`NodeFactory.build`.

    Attributes
    ----------
    node : Node
        The built variant, or the placeholder.
    transition_table : TransitionTable
        Fresh table for this node; empty for end states and placeholders.
    category : Optional[ElementCategory]
        Structural category the name was found in, None when absent.
    name_info : Optional[NodeNameInfo]
        Decoded name, None when the element was not found.
    assets : NodeAssets
        Background image/audio and voice-over audio of the node.
    """

    node: Node
    transition_table: TransitionTable = field(default_factory=dict)
    category: Optional[ElementCategory] = None
    name_info: Optional[NodeNameInfo] = None
    assets: NodeAssets = field(default_factory=NodeAssets)

    @property
    def is_placeholder(self) -> bool:
        return self.node.kind is NodeKind.UNKNOWN


def placeholder_node() -> DisplayNode:
    return DisplayNode(kind=NodeKind.UNKNOWN, text=UNKNOWN_NODE_TEXT)


class NodeFactory:
    """Turn raw node names into :class:`Node` variants.

    Parameters
    ----------
    document : TreeDocument
        Loaded bundle to look elements up in.
    localization : LocalizationResolver
        Active-language translations; read at build time, so a language switch
        only requires rebuilding.
    assets : AssetResolver
        Media resolver rooted at the bundle.
    """

    def __init__(
        self,
        document: TreeDocument,
        localization: LocalizationResolver,
        assets: AssetResolver,
    ) -> None:
        self._document = document
        self._localization = localization
        self._assets = assets
        self._builders: Dict[NodeKind, Callable[[NodeKind, NodeNameInfo, ET._Element], Tuple[Node, TransitionTable]]] = {
            NodeKind.TEXT_DISPLAY: self._build_display,
            NodeKind.IMAGE_DISPLAY: self._build_display,
            NodeKind.TEXT_IMAGE_DISPLAY: self._build_display,
            NodeKind.IMAGE_TEXT_DISPLAY: self._build_display,
            NodeKind.TIMESTAMP: self._build_display,
            NodeKind.TEXT_FIELD: self._build_text_input,
            NodeKind.TEXT_FIELD_NUMERICAL: self._build_text_input,
            NodeKind.TEXT_FIELD_WITH_UNIT: self._build_text_input,
            NodeKind.TEXT_FIELD_WITH_ANSWER: self._build_text_input,
            NodeKind.TEXT_AREA: self._build_text_input,
            NodeKind.TEXT_AREA_WITH_ANSWER: self._build_text_input,
            NodeKind.DATE: self._build_text_input,
            NodeKind.RADIO_BUTTONS: self._build_selection,
            NodeKind.RADIO_BUTTONS_WITH_ANSWER: self._build_selection,
            NodeKind.CHECKLIST: self._build_selection,
            NodeKind.CLASSIFICATION: self._build_selection,
            NodeKind.LINK: self._build_selection,
            NodeKind.DECISION: self._build_decision,
        }

    @property
    def supported_kinds(self) -> frozenset:
        return frozenset(self._builders)

    # --------------------------------------------------------------------- API

    def build(self, raw_name: str) -> BuildResult:
        """Build the node called *raw_name* in the active language."""
        found = self._document.find_element(raw_name)
        if found is None:
            logger.warning("Node not found in process definition: %r", raw_name)
            return BuildResult(node=placeholder_node())

        category, element = found
        info = decode_name(raw_name)
        assets = self._assets.resolve(info, self._localization.language)

        if category is ElementCategory.END_STATE:
            return BuildResult(
                node=DisplayNode(kind=NodeKind.END_STATE, text=END_STATE_TEXT),
                category=category,
                name_info=info,
                assets=assets,
            )

        # Decision elements are typed by their category, whatever the name says
        kind = NodeKind.DECISION if category is ElementCategory.DECISION else info.kind
        if kind is None:
            logger.warning("Unknown node type '%s' for %r", info.type_tag, raw_name)
            return BuildResult(node=placeholder_node(), category=category, name_info=info, assets=assets)

        node, table = self._builders[kind](kind, info, element)
        logger.debug("Built %s node for %r with %d transitions", kind.value, raw_name, len(table))
        return BuildResult(node=node, transition_table=table, category=category, name_info=info, assets=assets)

    # ---------------------------------------------------------------- Builders

    def _build_display(self, kind: NodeKind, info: NodeNameInfo, element: ET._Element) -> Tuple[Node, TransitionTable]:
        image_path = None
        if kind in _IMAGE_KINDS:
            image_path = self._assets.image_path(info.image_file_name)
        # Image-only nodes have no caption
        text = "" if kind is NodeKind.IMAGE_DISPLAY else self._localize(info.text)
        node = DisplayNode(kind=kind, text=text, image_path=image_path)
        return node, self._transitions(element, kind)

    def _build_text_input(self, kind: NodeKind, info: NodeNameInfo, element: ET._Element) -> Tuple[Node, TransitionTable]:
        node = TextInputNode(kind=kind, text=self._localize(info.text))
        if kind is NodeKind.TEXT_FIELD_WITH_UNIT:
            node.unit = info.unit or ""
        elif kind in ANSWER_KINDS:
            node.text, node.target_answers = self._split_answer(info)
        return node, self._transitions(element, kind)

    def _build_selection(self, kind: NodeKind, info: NodeNameInfo, element: ET._Element) -> Tuple[Node, TransitionTable]:
        options: List[str] = []
        keys: List[str] = []
        table: TransitionTable = {}

        for task in self._document.children(element, TASK):
            name = task.get("name")
            if name is None:
                continue
            components = split_name(name)
            key = components.pop()
            keys.append(key)
            options.append(self._localize(key))
            # Link options encode their target as the remaining components
            if kind is NodeKind.LINK and len(components) > 1:
                table[key] = join_name(components)

        node = SelectionNode(kind=kind, text=self._localize(info.text), options=options, option_keys=keys)
        if kind is NodeKind.CHECKLIST:
            node.target_ticks = info.target_number_of_choices
        elif kind is NodeKind.CLASSIFICATION:
            node.options = [f"{i}) {option}" for i, option in enumerate(options, start=1)]
        elif kind is NodeKind.RADIO_BUTTONS_WITH_ANSWER:
            node.text, answer = self._split_answer(info)
            node.target_index = parse_int(answer)
            if answer is not None and node.target_index is None:
                logger.debug("Ignoring non-numeric answer index %r in %r", answer, info.raw_name)

        table.update(self._transitions(element, kind))
        return node, table

    def _build_decision(self, kind: NodeKind, info: NodeNameInfo, element: ET._Element) -> Tuple[Node, TransitionTable]:
        """Decision options and transitions both come from ``<transition>`` children."""
        options: List[str] = []
        keys: List[str] = []
        table: TransitionTable = {}
        for transition in self._document.children(element, TRANSITION):
            key = transition.get("name") or ANY_TRANSITION
            keys.append(key)
            options.append(self._localize(key))
            table[key] = transition.get("to") or ""
        node = SelectionNode(kind=kind, text=self._localize(info.text), options=options, option_keys=keys)
        return node, table

    # --------------------------------------------------------------- Internals

    def _localize(self, text: str) -> str:
        """Translate first (catalogs are keyed by source text), then apply markup."""
        return apply_markup(self._localization.translate(text))

    def _split_answer(self, info: NodeNameInfo) -> Tuple[str, Optional[str]]:
        source = self._answer_source_text(info)
        question, answer = split_answer(self._localization.translate(source))
        return self._localize(question), answer

    @staticmethod
    def _answer_source_text(info: NodeNameInfo) -> str:
        """Text carrying the answer marker.

        Names such as ``textFieldWithAnswer~Question~Answer=42`` keep the
        marker in a component of its own; it is glued back to the question.
        A modifier in front of the marker is never question text.
        """
        components = info.components
        if (
            len(components) >= 3
            and components[-1].startswith(ANSWER_SEPARATOR)
            and not components[-2].startswith("@")
        ):
            return components[-2] + components[-1]
        return info.text

    def _transitions(self, element: ET._Element, kind: NodeKind) -> TransitionTable:
        """Read ``<transition name=".." to="..">`` children into a table."""
        table: TransitionTable = {}
        for transition in self._document.children(element, TRANSITION):
            key = transition.get("name") or ANY_TRANSITION
            target = transition.get("to") or ""
            # Link targets carry a trailing tag segment
            if kind is NodeKind.LINK and "~" in target:
                target = join_name(split_name(target)[:-1])
            table[key] = target
        return table
