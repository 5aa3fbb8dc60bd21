from __future__ import annotations

"""Decoder for the compact node-name mini-language.

A node's ``name`` attribute packs everything the engine needs to render it::

    <type>~[<second>~...]~[@<key>=<value>~...]<text>

- the first component is the type tag (``textDisplay``, ``checkList``...);
- the last component is the untranslated display text;
- the second component, when present, names the image (image kinds), the
  unit (``textFieldWithUnit``) or the required tick count (``checkList``);
- any component starting with ``@<key>=`` is a modifier. The first component
  carrying a given key wins.

Decoding is total: every input string yields a :class:`NodeNameInfo`. An
unrecognised type tag is reported as ``kind is None`` so callers can fall
back to a placeholder node.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from utree_toolkit.core.models import NodeKind
from utree_toolkit.core.utils import parse_int, split_name

logger = logging.getLogger(__name__)

__all__ = [
    "NodeNameInfo",
    "decode_name",
    "NAME_TAGS",
    "BACKGROUND_IMAGE_KEY",
    "BACKGROUND_AUDIO_KEY",
    "VOICE_OVER_AUDIO_KEY",
    "TARGET_KEY",
]

BACKGROUND_IMAGE_KEY = "bg"
BACKGROUND_AUDIO_KEY = "bgAudioName"
VOICE_OVER_AUDIO_KEY = "audioName"
TARGET_KEY = "target"

_MODIFIER_KEYS = (BACKGROUND_IMAGE_KEY, BACKGROUND_AUDIO_KEY, VOICE_OVER_AUDIO_KEY, TARGET_KEY)

# Type tag as written in documents -> node kind
NAME_TAGS: Dict[str, NodeKind] = {
    "textDisplay": NodeKind.TEXT_DISPLAY,
    "imageDisplay": NodeKind.IMAGE_DISPLAY,
    "textImageDisplay": NodeKind.TEXT_IMAGE_DISPLAY,
    "imageTextDisplay": NodeKind.IMAGE_TEXT_DISPLAY,
    "textField": NodeKind.TEXT_FIELD,
    "textFieldNumerical": NodeKind.TEXT_FIELD_NUMERICAL,
    "textFieldWithUnit": NodeKind.TEXT_FIELD_WITH_UNIT,
    "textFieldWithAnswer": NodeKind.TEXT_FIELD_WITH_ANSWER,
    "textArea": NodeKind.TEXT_AREA,
    "textAreaWithAnswer": NodeKind.TEXT_AREA_WITH_ANSWER,
    "radioButtons": NodeKind.RADIO_BUTTONS,
    "radioButtonsWithAnswer": NodeKind.RADIO_BUTTONS_WITH_ANSWER,
    "checkList": NodeKind.CHECKLIST,
    "classification": NodeKind.CLASSIFICATION,
    "timestampDisplay": NodeKind.TIMESTAMP,
    "date": NodeKind.DATE,
    "link": NodeKind.LINK,
}


@dataclass(frozen=True)
class NodeNameInfo:
    """Structured view of a raw node name.

    Attributes
    ----------
    raw_name
        The name exactly as found in the document.
    type_tag
        First component, verbatim.
    kind
        Kind mapped from ``type_tag``; None when the tag is unknown.
    text
        Last component, untranslated.
    image_file_name
        Second component when the name has at least two components.
    components
        All ``~``-separated components, in order.
    modifiers
        Read-only ``@key=value`` modifiers in first-wins order. They derive
        from ``components`` and take no part in equality or hashing.
    """

    raw_name: str
    type_tag: str
    kind: Optional[NodeKind]
    text: str
    image_file_name: Optional[str] = None
    components: Tuple[str, ...] = ()
    modifiers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}), compare=False)

    @property
    def background_image_name(self) -> Optional[str]:
        return self.modifiers.get(BACKGROUND_IMAGE_KEY)

    @property
    def background_audio_name(self) -> Optional[str]:
        return self.modifiers.get(BACKGROUND_AUDIO_KEY)

    @property
    def voice_over_audio_name(self) -> Optional[str]:
        return self.modifiers.get(VOICE_OVER_AUDIO_KEY)

    @property
    def unit(self) -> Optional[str]:
        """Unit label of ``textFieldWithUnit`` names (``type~unit~text``)."""
        if len(self.components) < 3:
            return None
        return self.components[1]

    @property
    def target_number_of_choices(self) -> int:
        """Required tick count: ``@target=N``, else a numeric second component, else 0."""
        target = parse_int(self.modifiers.get(TARGET_KEY))
        if target is None and len(self.components) >= 3:
            target = parse_int(self.components[1])
        if target is None:
            return 0
        return max(target, 0)


def _extract_modifiers(components: List[str]) -> Dict[str, str]:
    modifiers: Dict[str, str] = {}
    for component in components:
        if not component.startswith("@"):
            continue
        key, separator, value = component[1:].partition("=")
        if not separator or key not in _MODIFIER_KEYS:
            # Malformed or unrecognised modifiers are ignored
            continue
        modifiers.setdefault(key, value)
    return modifiers


def decode_name(raw_name: Optional[str]) -> NodeNameInfo:
    """Decode *raw_name* into a :class:`NodeNameInfo`.

    Never raises; missing components simply leave the matching fields empty.

    Examples:
        >>> info = decode_name("imageDisplay~sunset~@bg=sky~A sunset")
        >>> info.kind, info.image_file_name, info.background_image_name, info.text
        (<NodeKind.IMAGE_DISPLAY: 'imageDisplay'>, 'sunset', 'sky', 'A sunset')
    """
    raw = raw_name or ""
    components = split_name(raw)
    type_tag = components[0]
    kind = NAME_TAGS.get(type_tag)
    if kind is None:
        logger.debug("Unknown node type tag '%s' in name %r", type_tag, raw)

    return NodeNameInfo(
        raw_name=raw,
        type_tag=type_tag,
        kind=kind,
        text=components[-1],
        image_file_name=components[1] if len(components) >= 2 else None,
        components=tuple(components),
        modifiers=MappingProxyType(_extract_modifiers(components)),
    )
