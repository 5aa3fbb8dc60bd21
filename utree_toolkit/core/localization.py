from __future__ import annotations

"""Translation and hint lookup for the active language.

Catalogs are read in full when a language becomes active and kept in memory
until the next switch. Lookups never fail: a key without an entry resolves to
the source text.
"""

import logging
from typing import Any, Dict, Optional

from utree_toolkit.core.importers.tree_loader import TreeDocument, load_string_catalog

logger = logging.getLogger(__name__)

__all__ = ["LocalizationResolver", "language_code_for"]

DEFAULT_LANGUAGE_CODE = "en-EN"


def language_code_for(language: str, config: Optional[Dict[str, Any]] = None) -> str:
    """Return the speech language code for a language name (``"French"`` -> ``"fr-FR"``).

    Unknown languages map to the configured default code.
    """
    if config is None:
        from utree_toolkit.config import ConfigManager

        config = ConfigManager().get_languages_config()
    codes = config.get("codes") or {}
    return codes.get(language) or config.get("default_code") or DEFAULT_LANGUAGE_CODE


class LocalizationResolver:
    """Per-document translation and hint catalogs for one active language.

    Parameters
    ----------
    document : TreeDocument
        Loaded bundle; provides catalog locations and the base language.
    language : str, optional
        Initial active language. Defaults to the document's base language.
    """

    def __init__(self, document: TreeDocument, language: Optional[str] = None) -> None:
        self._document = document
        self._language = ""
        self._translations: Dict[str, str] = {}
        self._hints: Dict[str, str] = {}
        self.set_language(language or document.base_language)

    @property
    def language(self) -> str:
        return self._language

    @property
    def hints(self) -> Dict[str, str]:
        """Lower-cased word -> hint text for the active language."""
        return self._hints

    @property
    def translates(self) -> bool:
        """True when the active language differs from the base language."""
        return self._language != self._document.base_language

    def set_language(self, language: str) -> None:
        """Activate *language* and reload both catalogs."""
        self._language = language
        if self.translates:
            self._translations = load_string_catalog(self._document.translation_files.get(language))
        else:
            self._translations = {}
        self._hints = load_string_catalog(self._document.hint_files.get(language), lower_keys=True)
        logger.debug(
            "Language %s active: %d translations, %d hints",
            language, len(self._translations), len(self._hints),
        )

    def translate(self, text: str) -> str:
        """Translate *text*, keyed by the untranslated source string."""
        if not text or not self.translates:
            return text or ""
        return self._translations.get(text, text)

    def hint_for(self, word: str) -> Optional[str]:
        return self._hints.get(word.lower())
