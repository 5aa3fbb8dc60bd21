from __future__ import annotations

"""Parsing helpers for the utree document formats.

Key components:
- decode_name: turns a ``~``-separated node name into a NodeNameInfo record
"""

from .name_decoder import NodeNameInfo, decode_name

__all__ = ["NodeNameInfo", "decode_name"]
