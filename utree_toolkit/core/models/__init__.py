from __future__ import annotations

"""Shared data structures used across the utree core.

This package exposes the node variants produced by the node factory and the
value objects exchanged with presentation layers. It is intentionally free of
UI / I/O code so that the contained objects can be reused in any context
(unit-tests, CLI, GUI, etc.).

Node variants
-------------
Every node carries a :class:`NodeKind` tag. The payload class is fixed per
kind (see :data:`NODE_CLASS_BY_KIND`):

- :class:`DisplayNode` for read-only content (text/image displays, timestamp,
  end state and the unknown-node placeholder);
- :class:`SelectionNode` for option lists (radio buttons, link, decision,
  checklist, classification);
- :class:`TextInputNode` for free input (text fields, text areas, date).

Interaction state (selected indices, typed text) lives on the node itself and
is mutated by the presentation layer between navigation steps.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set, Type

from .session import NodeState, PlaybackSettings

__all__ = [
    "NodeKind",
    "Node",
    "DisplayNode",
    "SelectionNode",
    "TextInputNode",
    "TransitionTable",
    "NODE_CLASS_BY_KIND",
    "SELECTION_KINDS",
    "TEXT_INPUT_KINDS",
    "ANSWER_KINDS",
    "ANY_TRANSITION",
    "YES_TRANSITION",
    "NO_TRANSITION",
    "NodeState",
    "PlaybackSettings",
]

ANY_TRANSITION = "Any"
YES_TRANSITION = "Yes"
NO_TRANSITION = "No"

# Symbolic transition key -> raw name of the next node.
TransitionTable = Dict[str, str]


class NodeKind(Enum):
    """Closed set of node variants understood by the engine."""

    TEXT_DISPLAY = "textDisplay"
    IMAGE_DISPLAY = "imageDisplay"
    TEXT_IMAGE_DISPLAY = "textImageDisplay"
    IMAGE_TEXT_DISPLAY = "imageTextDisplay"
    TEXT_FIELD = "textField"
    TEXT_FIELD_NUMERICAL = "textFieldNumerical"
    TEXT_FIELD_WITH_UNIT = "textFieldWithUnit"
    TEXT_FIELD_WITH_ANSWER = "textFieldWithAnswer"
    TEXT_AREA = "textArea"
    TEXT_AREA_WITH_ANSWER = "textAreaWithAnswer"
    RADIO_BUTTONS = "radioButtons"
    RADIO_BUTTONS_WITH_ANSWER = "radioButtonsWithAnswer"
    CHECKLIST = "checkList"
    CLASSIFICATION = "classification"
    TIMESTAMP = "timestampDisplay"
    DATE = "date"
    LINK = "link"
    DECISION = "decision"
    END_STATE = "endState"
    UNKNOWN = "unknown"


# Kinds whose options are chosen by the user (Classification only lists them)
SELECTION_KINDS = frozenset({
    NodeKind.RADIO_BUTTONS,
    NodeKind.RADIO_BUTTONS_WITH_ANSWER,
    NodeKind.CHECKLIST,
    NodeKind.LINK,
    NodeKind.DECISION,
})

TEXT_INPUT_KINDS = frozenset({
    NodeKind.TEXT_FIELD,
    NodeKind.TEXT_FIELD_NUMERICAL,
    NodeKind.TEXT_FIELD_WITH_UNIT,
    NodeKind.TEXT_FIELD_WITH_ANSWER,
    NodeKind.TEXT_AREA,
    NodeKind.TEXT_AREA_WITH_ANSWER,
    NodeKind.DATE,
})

# Kinds whose display text may embed an ``Answer=`` marker
ANSWER_KINDS = frozenset({
    NodeKind.RADIO_BUTTONS_WITH_ANSWER,
    NodeKind.TEXT_FIELD_WITH_ANSWER,
    NodeKind.TEXT_AREA_WITH_ANSWER,
})


@dataclass
class Node:
    """Base payload shared by every node variant.

    Attributes
    ----------
    kind
        Variant tag; decides transition behaviour.
    text
        Display text after translation and markup rewriting.
    image_path
        Resolved image for image-bearing kinds, else None.
    """

    kind: NodeKind
    text: str = ""
    image_path: Optional[Path] = None

    @property
    def is_selection_type(self) -> bool:
        return self.kind in SELECTION_KINDS

    @property
    def nothing_selected(self) -> bool:
        """True when a selection-type node has no selected option."""
        return False

    @property
    def speakable_texts(self) -> List[str]:
        """Texts a text-to-speech consumer should read, in display order."""
        return [self.text] if self.text else []


@dataclass
class DisplayNode(Node):
    """Read-only content: text and/or image, timestamp, end state, placeholder."""


@dataclass
class SelectionNode(Node):
    """Node presenting an ordered list of option labels.

    ``options`` are the display labels; ``option_keys`` holds the matching
    untranslated labels, which is what transition tables are keyed by.
    ``selected_indices`` is the live interaction state. Single-choice kinds
    hold at most one index; checklists hold any number of ticked indices.
    """

    options: List[str] = field(default_factory=list)
    option_keys: List[str] = field(default_factory=list)
    selected_indices: Set[int] = field(default_factory=set)
    target_index: Optional[int] = None
    target_ticks: int = 0

    @property
    def allows_multiple(self) -> bool:
        return self.kind is NodeKind.CHECKLIST

    @property
    def selected_index(self) -> Optional[int]:
        """Lowest selected index, or None."""
        return min(self.selected_indices) if self.selected_indices else None

    @property
    def selected_options(self) -> List[str]:
        return [self.options[i] for i in sorted(self.selected_indices)]

    @property
    def nothing_selected(self) -> bool:
        return not self.selected_indices

    def option_key(self, index: int) -> str:
        """Untranslated label of option *index*, falling back to the display label."""
        if index < len(self.option_keys):
            return self.option_keys[index]
        return self.options[index]

    @property
    def speakable_texts(self) -> List[str]:
        texts = super().speakable_texts
        texts.extend(option for option in self.options if option)
        return texts

    def select(self, index: int) -> None:
        """Select option *index*; single-choice nodes drop the previous choice."""
        self._check_index(index)
        if not self.allows_multiple:
            self.selected_indices.clear()
        self.selected_indices.add(index)

    def deselect(self, index: int) -> None:
        self.selected_indices.discard(index)

    def toggle(self, index: int) -> None:
        if index in self.selected_indices:
            self.deselect(index)
        else:
            self.select(index)

    def clear_selection(self) -> None:
        self.selected_indices.clear()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.options):
            raise IndexError(f"Option index {index} out of range for {len(self.options)} options")


@dataclass
class TextInputNode(Node):
    """Node collecting free text from the user.

    ``target_answers`` keeps the raw, pipe-separated expected answers of the
    ``*WithAnswer`` kinds; any one of them counts as correct.
    """

    text_input: str = ""
    unit: Optional[str] = None
    target_answers: Optional[str] = None

    @property
    def accepted_answers(self) -> List[str]:
        if self.target_answers is None:
            return []
        return self.target_answers.split("|")

    @property
    def is_numerical(self) -> bool:
        return self.kind is NodeKind.TEXT_FIELD_NUMERICAL

    @property
    def is_multiline(self) -> bool:
        return self.kind in (NodeKind.TEXT_AREA, NodeKind.TEXT_AREA_WITH_ANSWER)


NODE_CLASS_BY_KIND: Dict[NodeKind, Type[Node]] = {
    NodeKind.TEXT_DISPLAY: DisplayNode,
    NodeKind.IMAGE_DISPLAY: DisplayNode,
    NodeKind.TEXT_IMAGE_DISPLAY: DisplayNode,
    NodeKind.IMAGE_TEXT_DISPLAY: DisplayNode,
    NodeKind.TIMESTAMP: DisplayNode,
    NodeKind.END_STATE: DisplayNode,
    NodeKind.UNKNOWN: DisplayNode,
    NodeKind.RADIO_BUTTONS: SelectionNode,
    NodeKind.RADIO_BUTTONS_WITH_ANSWER: SelectionNode,
    NodeKind.CHECKLIST: SelectionNode,
    NodeKind.CLASSIFICATION: SelectionNode,
    NodeKind.LINK: SelectionNode,
    NodeKind.DECISION: SelectionNode,
    NodeKind.TEXT_FIELD: TextInputNode,
    NodeKind.TEXT_FIELD_NUMERICAL: TextInputNode,
    NodeKind.TEXT_FIELD_WITH_UNIT: TextInputNode,
    NodeKind.TEXT_FIELD_WITH_ANSWER: TextInputNode,
    NodeKind.TEXT_AREA: TextInputNode,
    NodeKind.TEXT_AREA_WITH_ANSWER: TextInputNode,
    NodeKind.DATE: TextInputNode,
}
