from __future__ import annotations

"""Compute the transition key of a node from its interaction state.

The key selects a row of the node's transition table:

- checklist: ``"Yes"`` when at least ``target_ticks`` options are ticked,
  else ``"No"``;
- radio buttons with a stored answer index: ``"Yes"``/``"No"`` by comparing
  the selected index with it;
- other single-choice nodes (radio buttons, link, decision): the selected
  option key (untranslated label) when the table has a row for it, else
  ``"Any"``;
- text input with stored answers: ``"Yes"`` when the input equals one of the
  pipe-separated answers, else ``"No"``;
- everything else: ``"Any"``.

A key with no row in the table means the walk cannot advance.
"""

import logging
from typing import Optional

from utree_toolkit.core.models import (
    ANY_TRANSITION,
    NO_TRANSITION,
    YES_TRANSITION,
    Node,
    NodeKind,
    SelectionNode,
    TextInputNode,
    TransitionTable,
)

logger = logging.getLogger(__name__)

__all__ = ["transition_key", "next_node_name"]

_CHOICE_KINDS = frozenset({
    NodeKind.RADIO_BUTTONS,
    NodeKind.RADIO_BUTTONS_WITH_ANSWER,
    NodeKind.LINK,
    NodeKind.DECISION,
})

_ANSWER_INPUT_KINDS = frozenset({
    NodeKind.TEXT_FIELD_WITH_ANSWER,
    NodeKind.TEXT_AREA_WITH_ANSWER,
})


def _yes_no(condition: bool) -> str:
    return YES_TRANSITION if condition else NO_TRANSITION


def transition_key(node: Optional[Node], table: Optional[TransitionTable] = None) -> str:
    """Return the symbolic transition key for *node* in its current state.

    Parameters
    ----------
    node : Optional[Node]
        Current node, interaction state included.
    table : Optional[TransitionTable]
        The node's transition table. Used to decide whether a selected label
        names a row of its own or the node falls through to ``"Any"``.
    """
    if node is None:
        return ANY_TRANSITION
    kind = node.kind

    if kind is NodeKind.CHECKLIST and isinstance(node, SelectionNode):
        return _yes_no(len(node.selected_indices) >= node.target_ticks)

    if kind in _CHOICE_KINDS and isinstance(node, SelectionNode):
        index = node.selected_index
        if index is None:
            return ANY_TRANSITION
        if kind is NodeKind.RADIO_BUTTONS_WITH_ANSWER and node.target_index is not None:
            return _yes_no(index == node.target_index)
        key = node.option_key(index)
        if table is None:
            return key
        for candidate in (key, node.options[index]):
            if candidate in table:
                return candidate
        return ANY_TRANSITION

    if kind in _ANSWER_INPUT_KINDS and isinstance(node, TextInputNode):
        if node.target_answers is None:
            return ANY_TRANSITION
        return _yes_no(node.text_input in node.accepted_answers)

    return ANY_TRANSITION


def next_node_name(node: Optional[Node], table: TransitionTable) -> Optional[str]:
    """Raw name of the next node, or None when navigation is blocked."""
    key = transition_key(node, table)
    target = table.get(key)
    if not target:
        # A row without a "to" attribute blocks like a missing row
        logger.debug("No transition for key %r (available: %s)", key, sorted(table))
        return None
    return target
