from __future__ import annotations

"""Media lookup inside a bundle.

Images are probed as ``res/<name>.<ext>`` for each supported extension, in
configured order, and the first existing file wins. Audio is matched by
case-insensitive base name inside ``audio/`` (background) or
``audio/<language>/`` (voice-over); directory entries are scanned in sorted
order so repeated lookups return the same file.

A missing name or a missing file simply means "no asset".
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from utree_toolkit.core.importers.tree_loader import list_directory
from utree_toolkit.core.parser.name_decoder import NodeNameInfo

logger = logging.getLogger(__name__)

__all__ = ["AssetResolver", "NodeAssets", "DEFAULT_IMAGE_EXTENSIONS"]

DEFAULT_IMAGE_EXTENSIONS: Sequence[str] = (
    "jpg", "jpeg", "png", "gif", "bmp", "tiff", "tif", "ico", "cur", "BMPf", "xbm",
)


@dataclass(frozen=True)
class NodeAssets:
    """Media resolved for one node; each path is None when absent."""

    background_image: Optional[Path] = None
    background_audio: Optional[Path] = None
    voice_over_audio: Optional[Path] = None


class AssetResolver:
    """Resolve image and audio files of a bundle.

    Parameters
    ----------
    root_path : Path
        Bundle directory.
    config : dict, optional
        ``assets`` config section; read from :class:`ConfigManager` when omitted.
    """

    def __init__(self, root_path: Path, config: Optional[Dict[str, Any]] = None) -> None:
        if config is None:
            from utree_toolkit.config import ConfigManager

            config = ConfigManager().get_assets_config()
        self.root_path = Path(root_path)
        self.image_extensions = tuple(config.get("image_extensions") or DEFAULT_IMAGE_EXTENSIONS)
        self.resource_dir = self.root_path / (config.get("resource_dir") or "res")
        self.audio_dir = self.root_path / (config.get("audio_dir") or "audio")
        self.default_background = config.get("default_background") or "bg"

    def image_path(self, name: Optional[str]) -> Optional[Path]:
        """First ``res/<name>.<ext>`` that exists, following extension order."""
        if not name:
            return None
        for extension in self.image_extensions:
            candidate = self.resource_dir / f"{name}.{extension}"
            if candidate.is_file():
                return candidate
        return None

    def background_audio_path(self, name: Optional[str]) -> Optional[Path]:
        return self._match_audio(self.audio_dir, name)

    def voice_over_audio_path(self, name: Optional[str], language: str) -> Optional[Path]:
        return self._match_audio(self.audio_dir / language, name)

    def resolve(self, info: NodeNameInfo, language: str) -> NodeAssets:
        """Resolve every asset referenced by the modifiers of *info*."""
        return NodeAssets(
            background_image=self.image_path(info.background_image_name or self.default_background),
            background_audio=self.background_audio_path(info.background_audio_name),
            voice_over_audio=self.voice_over_audio_path(info.voice_over_audio_name, language),
        )

    @staticmethod
    def _match_audio(directory: Path, name: Optional[str]) -> Optional[Path]:
        if not name or not directory.is_dir():
            return None
        target = name.lower()
        for entry in list_directory(directory):
            if entry.is_file() and entry.stem.lower() == target:
                return entry
        logger.debug("No audio named '%s' in %s", name, directory)
        return None
