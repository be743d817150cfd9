"""
Name normalization for matching pets across sources.

Two names a person would read as the same pet ("Mega Neon Cat",
"mega-neon CAT!!", "King’s Dog" vs "King's Dog") map to the same key.
"""

import re
from typing import Optional

# Right single quote and look-alikes, plus the UTF-8 bytes of U+2019
# decoded as cp1252
APOSTROPHE_VARIANTS = (
    "â€™",  # mis-decoded ’
    "’",
    "‘",
    "‛",
    "ʼ",
    "′",
    "＇",
)

_NON_KEY_CHARS = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(raw: Optional[str]) -> str:
    """
    Canonicalize a display name into a matching key.

    Lower-cases, folds apostrophe variants to ``'``, replaces every
    character other than a-z, 0-9 and whitespace with a space, collapses
    whitespace and trims. Returns ``""`` when the name has no alphanumeric
    content; such keys never match anything.
    """
    if not raw:
        return ""

    text = str(raw).lower()
    for variant in APOSTROPHE_VARIANTS:
        text = text.replace(variant, "'")

    text = _NON_KEY_CHARS.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()
