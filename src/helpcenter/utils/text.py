"""Text helpers shared by the index and the renderer."""

from __future__ import annotations

import re
from typing import List, Tuple

MAX_ID_LENGTH = 100

_WHITESPACE_RE = re.compile(r"\s+")
# Word characters are ASCII only; CJK ideographs are kept explicitly.
_NON_SLUG_RE = re.compile(r"[^\w\u4e00-\u9fff-]", re.ASCII)
_ANCHOR_PUNCTUATION_RE = re.compile(r"[？?！!。，,]")
_MARKDOWN_EXT_RE = re.compile(r"\.md$")
_HASH_SUFFIX_RE = re.compile(r"\s+[a-f0-9]{8,}$", re.IGNORECASE)


def split_lines(text: str) -> List[str]:
    """Split on newlines, keeping empty trailing lines."""
    return text.split("\n")


def basename(path: str) -> str:
    """Return the trailing segment of a slash separated path."""
    return path.split("/")[-1]


def strip_extension(filename: str) -> str:
    return _MARKDOWN_EXT_RE.sub("", filename)


def strip_hash_suffix(stem: str) -> str:
    """Drop an exported-page hash such as ``"Guide 3f9a0c1d2e"`` -> ``"Guide"``."""
    return _HASH_SUFFIX_RE.sub("", stem)


def filename_stem(path: str) -> str:
    """Filename without extension and hash suffix."""
    return strip_hash_suffix(strip_extension(basename(path)))


def slugify(text: str) -> str:
    lowered = _WHITESPACE_RE.sub("-", text.lower())
    return _NON_SLUG_RE.sub("", lowered)


def make_document_id(stem: str) -> str:
    """Routing id for a document; stable for a given filename stem."""
    return slugify(stem)[:MAX_ID_LENGTH]


def make_anchor_id(text: str) -> str:
    """In-page anchor for a heading."""
    return _ANCHOR_PUNCTUATION_RE.sub("", slugify(text))


def lower_text(text: str) -> str:
    """Lowercase one character at a time, so offsets map back via :func:`fold_case`."""
    return fold_case(text)[0]


def fold_case(text: str) -> Tuple[str, List[int]]:
    """Lowercased ``text`` plus the source index of every lowercased character.

    Some characters lowercase to more than one (``"İ"`` -> ``"i̇"``), so a hit
    in the lowered text is mapped back through the returned offsets.
    """
    folded: List[str] = []
    origins: List[int] = []
    for index, char in enumerate(text):
        lowered = char.lower()
        folded.append(lowered)
        origins.extend([index] * len(lowered))
    return "".join(folded), origins
