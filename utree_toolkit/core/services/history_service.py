from __future__ import annotations

"""Navigation history for a tree walk.

This service is UI-agnostic and performs pure in-memory tracking of the raw
node names visited from the start node to the current one.

Design principles
-----------------
- No UI imports and no I/O (filesystem/console).
- Names are stored, not nodes: going back rebuilds the node from its name.
- The last entry is always the name that produced the current node.
- A history of length 1 means "at start": the start name is never popped.
"""

from typing import Iterator, List, Optional, Tuple


class NavigationHistory:
    """Append-only-with-pop stack of visited node names.

    Examples
    --------
    >>> history = NavigationHistory()
    >>> history.push("textDisplay~Welcome")
    >>> history.push("textField~Your name?")
    >>> history.pop()
    'textField~Your name?'
    >>> history.current
    'textDisplay~Welcome'
    >>> history.can_retreat()
    False
    """

    def __init__(self, names: Optional[List[str]] = None) -> None:
        self._names: List[str] = list(names or [])

    # --------------------------------------------------------------------- API

    def push(self, name: str) -> None:
        """Append *name* as the new current entry."""
        self._names.append(name)

    def pop(self) -> Optional[str]:
        """Remove and return the current entry, keeping the start entry.

        Returns None (and leaves the history untouched) when at most one entry
        is recorded.
        """
        if not self.can_retreat():
            return None
        return self._names.pop()

    def can_retreat(self) -> bool:
        """Return True if a previous entry exists."""
        return len(self._names) > 1

    def clear(self) -> None:
        self._names.clear()

    @property
    def current(self) -> Optional[str]:
        """Name of the current node, or None for an empty history."""
        return self._names[-1] if self._names else None

    @property
    def previous(self) -> Optional[str]:
        return self._names[-2] if len(self._names) > 1 else None

    @property
    def names(self) -> Tuple[str, ...]:
        """Snapshot of the visited names, start first."""
        return tuple(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._names))
