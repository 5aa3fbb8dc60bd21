from __future__ import annotations

"""Loader for unpacked utree bundles.

A bundle is a directory (usually ``<Title>.utree``) laid out as::

    <root>/<Title>.xml          process definition (root carries ``lang``)
    <root>/trans/<Language>.xml translation catalogs
    <root>/hints/<Language>.xml hint catalogs
    <root>/res/                 images
    <root>/audio/[<Language>/]  background and voice-over audio

The loader never fails outward: a missing or malformed process file yields a
:class:`TreeDocument` without a process definition, and unreadable catalogs
are treated as empty. Problems are logged instead.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from lxml import etree as ET

from utree_toolkit.core.utils import local_name

logger = logging.getLogger(__name__)

__all__ = [
    "TreeLoader",
    "TreeDocument",
    "TreeLoadError",
    "ElementCategory",
    "load_string_catalog",
    "list_directory",
]

DEFAULT_BASE_LANGUAGE = "English"
UNTITLED = "Untitled"

PROCESS_DEFINITION = "process-definition"
START_STATE = "start-state"
TRANSITION = "transition"
TASK = "task"


class TreeLoadError(Exception):
    """Exception raised when a bundle file cannot be read or parsed."""

    def __init__(self, message: str, file_path: Optional[Path] = None, cause: Optional[Exception] = None):
        self.file_path = file_path
        self.cause = cause
        super().__init__(message)


class ElementCategory(Enum):
    """Structural categories of the process definition, in lookup priority order."""

    TASK_NODE = "task-node"
    END_STATE = "end-state"
    DECISION = "decision"


@dataclass(frozen=True)
class TreeDocument:
    """Read-only, in-memory view of a loaded bundle.

    Attributes
    ----------
    root_path
        Bundle directory.
    title
        Folder name without extension, or ``"Untitled"``.
    base_language
        ``lang`` attribute of the process definition.
    available_languages
        Catalog languages plus the base language, deduplicated and sorted.
    process_definition
        The ``process-definition`` element, or None for unusable documents.
    translation_files / hint_files
        Language -> catalog file.
    """

    root_path: Path
    title: str = UNTITLED
    base_language: str = DEFAULT_BASE_LANGUAGE
    available_languages: Tuple[str, ...] = (DEFAULT_BASE_LANGUAGE,)
    process_definition: Optional[ET._Element] = None
    translation_files: Dict[str, Path] = field(default_factory=dict)
    hint_files: Dict[str, Path] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Element lookup
    # ------------------------------------------------------------------

    def children(self, element: Optional[ET._Element], tag: str) -> List[ET._Element]:
        """Direct children of *element* with local name *tag*, in document order."""
        if element is None:
            return []
        return [child for child in element if local_name(child.tag) == tag]

    def find_element(self, name: str) -> Optional[Tuple[ElementCategory, ET._Element]]:
        """Locate the element called *name*.

        Task nodes are searched first, then end states, then decisions; the
        first category containing the name wins.
        """
        if self.process_definition is None:
            return None
        for category in ElementCategory:
            matches = self.process_definition.xpath(
                "*[local-name()=$tag][@name=$name]", tag=category.value, name=name
            )
            if matches:
                return category, matches[0]
        return None

    def category_of(self, name: Optional[str]) -> Optional[ElementCategory]:
        if name is None:
            return None
        found = self.find_element(name)
        return found[0] if found else None

    def start_node_name(self) -> Optional[str]:
        """Target of the ``start-state`` transition, if any."""
        for start_state in self.children(self.process_definition, START_STATE):
            for transition in self.children(start_state, TRANSITION):
                target = transition.get("to")
                if target is not None:
                    return target
        return None


class TreeLoader:
    """Build :class:`TreeDocument` objects from bundle directories.

    Parameters
    ----------
    default_language : str
        Base language assumed when the process definition has no ``lang``.
    """

    def __init__(self, default_language: str = DEFAULT_BASE_LANGUAGE) -> None:
        self.default_language = default_language
        self.logger = logging.getLogger(f"{__name__}.TreeLoader")

    def load(self, root_path: Path) -> TreeDocument:
        """Load the bundle at *root_path*; never raises for document problems."""
        root_path = Path(root_path)
        self.logger.debug("Loading tree bundle: %s", root_path)

        process_definition: Optional[ET._Element] = None
        process_file = self._find_process_file(root_path)
        if process_file is None:
            self.logger.warning("No process definition found in %s", root_path)
        else:
            try:
                process_definition = self._find_process_definition(parse_xml_file(process_file))
            except TreeLoadError as exc:
                self.logger.warning("Unusable process definition %s: %s", process_file, exc)

        base_language = self.default_language
        if process_definition is not None:
            base_language = process_definition.get("lang") or self.default_language

        translation_files = self._catalog_files(root_path / "trans")
        hint_files = self._catalog_files(root_path / "hints")

        languages = set(translation_files)
        languages.add(base_language)

        document = TreeDocument(
            root_path=root_path,
            title=self._title_for(root_path),
            base_language=base_language,
            available_languages=tuple(sorted(languages)),
            process_definition=process_definition,
            translation_files=translation_files,
            hint_files=hint_files,
        )
        self.logger.info(
            "Loaded tree '%s' (base language %s, %d languages)",
            document.title, base_language, len(document.available_languages),
        )
        return document

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _folder_stem(root_path: Path) -> str:
        """Folder name without its extension (``.utree`` alone has an empty stem)."""
        name = root_path.name
        return name.rsplit(".", 1)[0] if "." in name else name

    def _title_for(self, root_path: Path) -> str:
        stem = self._folder_stem(root_path)
        return stem if stem.strip() else UNTITLED

    def _find_process_file(self, root_path: Path) -> Optional[Path]:
        """Prefer ``<stem>.xml``; otherwise take the first XML file in the root."""
        if not root_path.is_dir():
            return None
        preferred = root_path / f"{self._folder_stem(root_path)}.xml"
        if preferred.is_file():
            return preferred
        candidates = sorted(p for p in list_directory(root_path) if p.is_file() and p.suffix.lower() == ".xml")
        if candidates:
            self.logger.debug("Using %s as process definition", candidates[0].name)
            return candidates[0]
        return None

    @staticmethod
    def _find_process_definition(document_root: ET._Element) -> Optional[ET._Element]:
        if local_name(document_root.tag) == PROCESS_DEFINITION:
            return document_root
        matches = document_root.xpath("//*[local-name()=$tag]", tag=PROCESS_DEFINITION)
        return matches[0] if matches else None

    def _catalog_files(self, directory: Path) -> Dict[str, Path]:
        """Map language name (file stem) -> catalog file for *directory*."""
        if not directory.is_dir():
            return {}
        files: Dict[str, Path] = {}
        for path in list_directory(directory):
            if path.is_file() and path.suffix.lower() == ".xml":
                files.setdefault(path.stem, path)
        self.logger.debug("Found %d catalogs in %s", len(files), directory)
        return files


def list_directory(directory: Path) -> List[Path]:
    """Sorted entries of *directory*; an unreadable folder counts as empty."""
    try:
        return sorted(directory.iterdir())
    except OSError as e:
        logger.warning("Cannot list %s: %s", directory, e)
        return []


def parse_xml_file(xml_path: Path) -> ET._Element:
    """Parse an XML file and return the root element.

    Raises
    ------
    TreeLoadError
        If the file cannot be read or is not well-formed.
    """
    try:
        parser = ET.XMLParser(resolve_entities=False)  # Security: disable entity resolution
        tree = ET.parse(str(xml_path), parser)
        return tree.getroot()
    except ET.XMLSyntaxError as e:
        raise TreeLoadError(f"XML syntax error in {xml_path}: {e}", xml_path, e)
    except OSError as e:
        raise TreeLoadError(f"Failed to read {xml_path}: {e}", xml_path, e)


def load_string_catalog(path: Optional[Path], *, lower_keys: bool = False) -> Dict[str, str]:
    """Read ``resources/string[@name]`` entries of a catalog file.

    Returns an empty mapping when *path* is None or unreadable. The first entry
    for a key wins; entries without text are skipped.
    """
    if path is None:
        return {}
    try:
        root = parse_xml_file(path)
    except TreeLoadError as exc:
        logger.warning("Ignoring unreadable catalog %s: %s", path, exc)
        return {}

    catalog: Dict[str, str] = {}
    for element in root.iter():
        if local_name(element.tag) != "string":
            continue
        key = element.get("name")
        if key is None or element.text is None:
            continue
        if lower_keys:
            key = key.lower()
        catalog.setdefault(key, element.text)
    return catalog
