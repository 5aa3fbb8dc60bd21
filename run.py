# -*- coding: utf-8 -*-

"""
Main entry point for walking a utree bundle in a terminal.

Usage: python run.py <bundle-dir> [language]
       python run.py --version
"""

import logging
import sys
from pathlib import Path

from utree_toolkit.core.models import SelectionNode, TextInputNode
from utree_toolkit.core.services.tree_engine import NavigationOutcome, TreeEngine
from utree_toolkit.logging_config import setup_logging
from utree_toolkit.version import get_app_version

PROMPT = "[Enter]=next  b=back  l <language>=set language  q=quit > "


def _show(engine: TreeEngine) -> None:
    node = engine.current_node
    print()
    print(node.text)
    if node.image_path is not None:
        print(f"  [image: {node.image_path.name}]")
    if isinstance(node, SelectionNode):
        for i, option in enumerate(node.options):
            marker = "x" if i in node.selected_indices else " "
            print(f"  [{marker}] {i}: {option}")
    if isinstance(node, TextInputNode) and node.unit:
        print(f"  (unit: {node.unit})")


def _interact(engine: TreeEngine, command: str) -> None:
    """Apply a non-navigation command to the current node's interaction state."""
    node = engine.current_node
    if isinstance(node, SelectionNode):
        for token in command.replace(",", " ").split():
            if token.isdigit() and int(token) < len(node.options):
                node.toggle(int(token))
    elif isinstance(node, TextInputNode):
        node.text_input = command


def main() -> int:
    """
    Configure logging, load the bundle and run the prompt loop.
    """
    if len(sys.argv) < 2:
        print(__doc__.strip())
        return 2
    if sys.argv[1] == "--version":
        print(get_app_version())
        return 0
    setup_logging()

    engine = TreeEngine.open(Path(sys.argv[1]))
    if len(sys.argv) > 2:
        engine.set_language(sys.argv[2])
    print(f"{engine.title} ({', '.join(engine.available_languages)})")

    while True:
        _show(engine)
        if engine.is_current_end_state():
            return 0
        command = input(PROMPT).strip()
        if command == "q":
            return 0
        if command == "b":
            if engine.retreat() is NavigationOutcome.AT_START:
                print("Already at the start.")
        elif command.startswith("l "):
            engine.set_language(command[2:].strip())
        elif command:
            _interact(engine, command)
        elif engine.advance() is NavigationOutcome.BLOCKED:
            print("Please make a selection first." if engine.should_block_advance() else "Cannot continue from here.")


if __name__ == '__main__':
    exit_code = main()
    logging.info("===== Application terminated =====")
    sys.exit(exit_code)
