# -*- coding: utf-8 -*-
"""Application version detection utilities.

Provides a single public function, ``get_app_version()``, which reads the
version written next to the package by release tooling and falls back to a
development marker.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

_CACHED_VERSION: Optional[str] = None


def get_app_version() -> str:
    """Return the application version string (e.g., ``v1.2.3``).

    Production: read version.txt placed alongside the package root.
    Development fallback: return "vdev" if the file is missing or unreadable.
    """
    global _CACHED_VERSION
    if _CACHED_VERSION:
        return _CACHED_VERSION

    version_file = Path(__file__).resolve().parent.parent / "version.txt"
    try:
        if version_file.exists():
            text = version_file.read_text(encoding="ascii", errors="ignore").strip()
            if text:
                _CACHED_VERSION = text if text.startswith("v") else f"v{text}"
                return _CACHED_VERSION
    except OSError:
        pass

    _CACHED_VERSION = "vdev"
    return _CACHED_VERSION
