"""Markdown parsing and HTML rendering for help documents.

The converter is line oriented. Every stage makes a single pass over the text
and later stages rely on the tags emitted by earlier ones, so the order in
:func:`markdown_to_html` matters. Nested or multi-line constructs such as
multi-paragraph list items or nested blockquotes are not supported.
"""

from __future__ import annotations

import logging
import re
from html import escape
from typing import Callable, List, Optional, Tuple
from urllib.parse import unquote

from helpcenter.models import Frontmatter, Heading, ParsedMarkdown
from helpcenter.utils.text import make_anchor_id, split_lines

LOGGER = logging.getLogger(__name__)

AUTHOR_LABEL = "撰寫人:"
DATE_LABEL = "撰寫時間:"
CATEGORY_LABEL = "種類:"
READ_TIME_LABEL = "閱讀時間（分鐘）:"

FRONTMATTER_WINDOW = 10
EXCERPT_LENGTH = 200
IMAGE_ATTRIBUTE = "data-help-image"

_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_ITALIC_RE = re.compile(r"\*(.*?)\*")
_HEADING_RE = re.compile(r"^(#{1,3}) (.*)$")
_BLOCKQUOTE_RE = re.compile(r"^>\s+(.*)$")
_UNORDERED_ITEM_RE = re.compile(r"^[-*+]\s+(.+)$")
_ORDERED_ITEM_RE = re.compile(r"^\d+\.\s+(.+)$")

_IMAGE_NAME_RE = re.compile(r"\.(?:png|jpg|jpeg|gif|webp|svg)$", re.IGNORECASE)
# "Form 1.png" -> "Form.png", the suffix some exporters add to duplicate assets.
_ORDINAL_SUFFIX_RE = re.compile(
    r"\s+\d+(?=\.(?:png|jpg|jpeg|gif|webp|svg)$)", re.IGNORECASE
)
_UNSAFE_HREF_RE = re.compile(r"^\s*(?:javascript|vbscript|data):", re.IGNORECASE)
# Browsers drop tabs, newlines and other C0 controls inside a URL scheme.
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f]")
_READ_TIME_RE = re.compile(r"^[+-]?\d+", re.ASCII)

_EMPTY_PARAGRAPH_RE = re.compile(r"<p>\s*</p>")
_ADJACENT_UL_RE = re.compile(r"</ul>\s*<ul>")
_ADJACENT_OL_RE = re.compile(r"</ol>\s*<ol>")
_IMAGE_PARAGRAPH_RE = re.compile(r"<p>(<img[^>]*>)</p>")

_EXCERPT_RULES: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^#+\s+", re.MULTILINE), ""),
    (_BOLD_RE, r"\1"),
    (_LINK_RE, r"\1"),
    (re.compile(r"^[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"^>\s+", re.MULTILINE), ""),
)


def parse(markdown: str) -> ParsedMarkdown:
    """Split a help document into frontmatter, rendered HTML and an excerpt.

    The leading level-1 heading is removed from the body because callers
    render the document title separately. The table of contents covers the
    same body, so every heading anchor exists in the HTML.
    """
    lines = split_lines(markdown.replace("\r\n", "\n"))
    frontmatter, start = read_frontmatter(lines)

    content_lines = lines[start:]
    if content_lines and content_lines[0].strip().startswith("# "):
        content_lines = content_lines[1:]

    content = "\n".join(content_lines)
    return ParsedMarkdown(
        frontmatter=frontmatter,
        html_content=markdown_to_html(content),
        excerpt=generate_excerpt(content),
        headings=extract_headings(content),
    )


def read_frontmatter(lines: List[str]) -> Tuple[Frontmatter, int]:
    """Collect labelled metadata lines from the top of a document.

    Returns the frontmatter and the index of the first content line. Once a
    label has been seen, the first heading inside the window starts the
    content; without any label nothing is dropped.
    """
    frontmatter = Frontmatter()
    seen = False
    content_start = 0

    for index, line in enumerate(lines[:FRONTMATTER_WINDOW]):
        if AUTHOR_LABEL in line:
            frontmatter.author = _value_after(line, AUTHOR_LABEL)
            seen = True
        elif DATE_LABEL in line:
            frontmatter.date = _value_after(line, DATE_LABEL)
            seen = True
        elif CATEGORY_LABEL in line:
            frontmatter.category = _value_after(line, CATEGORY_LABEL)
            seen = True
        elif READ_TIME_LABEL in line:
            frontmatter.read_time_minutes = parse_read_time(
                _value_after(line, READ_TIME_LABEL)
            )
            seen = True
        elif seen and line.startswith("#"):
            content_start = index
            break

    return frontmatter, content_start


def _value_after(line: str, label: str) -> str:
    return line.split(label)[1].strip()


def parse_read_time(value: str) -> int:
    """Leading integer of ``value``; 0 when there is none."""
    match = _READ_TIME_RE.match(value.strip())
    if match is None:
        LOGGER.debug("Unparseable read time %r, using 0", value)
        return 0
    return int(match.group(0))


def generate_excerpt(markdown: str) -> str:
    text = markdown
    for pattern, replacement in _EXCERPT_RULES:
        text = pattern.sub(replacement, text)
    text = text.strip()

    first_paragraph = text.split("\n\n")[0] or text
    if len(first_paragraph) > EXCERPT_LENGTH:
        return first_paragraph[:EXCERPT_LENGTH] + "..."
    return first_paragraph


def markdown_to_html(markdown: str) -> str:
    html = _IMAGE_RE.sub(_render_image, markdown)
    html = _map_lines(html, _render_heading)
    html = _BOLD_RE.sub(r"<strong>\1</strong>", html)
    html = _ITALIC_RE.sub(r"<em>\1</em>", html)
    html = _LINK_RE.sub(_render_link, html)
    html = _map_lines(html, _render_rule_or_quote)
    html = "\n".join(_group_lists(split_lines(html)))
    html = "\n".join(_wrap_paragraph(line) for line in split_lines(html))
    return _cleanup(html)


def resolve_image_name(src: str) -> str:
    """Asset filename an image reference points at.

    ``"images/%E5%9C%96 1.png?raw"`` resolves to ``"圖.png"``.
    """
    decoded = unquote(src)
    name = decoded.split("/")[-1] or decoded.split("\\")[-1]
    name = name.split("?")[0].split("#")[0]
    return _ORDINAL_SUFFIX_RE.sub("", name)


def safe_href(href: str) -> str:
    if _UNSAFE_HREF_RE.match(_CONTROL_CHARS_RE.sub("", href)):
        return "#"
    return href


def heading_anchor(text: str) -> str:
    """Anchor for heading text, with any image references rendered first.

    Headings are converted after images, so the anchor is always derived from
    the same text whether it comes from raw markdown or partially rendered HTML.
    """
    return make_anchor_id(_IMAGE_RE.sub(_render_image, text))


def extract_headings(markdown: str) -> List[Heading]:
    """Table of contents with the anchors :func:`markdown_to_html` emits."""
    headings: List[Heading] = []
    for line in split_lines(markdown.replace("\r\n", "\n")):
        match = _HEADING_RE.match(line)
        if match:
            text = match.group(2)
            headings.append(
                Heading(level=len(match.group(1)), text=text, anchor=heading_anchor(text))
            )
    return headings


def _map_lines(text: str, render: Callable[[str], str]) -> str:
    return "\n".join(render(line) for line in split_lines(text))


def _render_image(match: re.Match[str]) -> str:
    alt, src = match.group(1), match.group(2)
    name = resolve_image_name(src)
    if not name or not _IMAGE_NAME_RE.search(name):
        return match.group(0)
    return (
        f'<img {IMAGE_ATTRIBUTE}="{escape(name)}" alt="{escape(alt)}" '
        'style="max-width: 100%; height: auto;" />'
    )


def _render_heading(line: str) -> str:
    match = _HEADING_RE.match(line)
    if match is None:
        return line
    level = len(match.group(1))
    text = match.group(2)
    anchor = escape(heading_anchor(text))
    return f'<h{level} id="{anchor}" data-anchor="{anchor}">{text}</h{level}>'


def _render_link(match: re.Match[str]) -> str:
    text, href = match.group(1), match.group(2)
    return (
        f'<a href="{escape(safe_href(href))}" target="_blank" '
        f'rel="noopener noreferrer">{text}</a>'
    )


def _render_rule_or_quote(line: str) -> str:
    if line == "---":
        return "<hr/>"
    match = _BLOCKQUOTE_RE.match(line)
    if match:
        return f"<blockquote>{match.group(1)}</blockquote>"
    return line


def _group_lists(lines: List[str]) -> List[str]:
    """Wrap runs of list items; a change of marker style starts a new list."""
    output: List[str] = []
    open_list: Optional[str] = None

    for line in lines:
        trimmed = line.strip()
        tag: Optional[str] = None
        match = _UNORDERED_ITEM_RE.match(trimmed)
        if match:
            tag = "ul"
        else:
            match = _ORDERED_ITEM_RE.match(trimmed)
            if match:
                tag = "ol"

        if open_list is not None and open_list != tag:
            output.append(f"</{open_list}>")
            open_list = None

        if tag is None:
            output.append(line)
            continue

        if open_list is None:
            output.append(f"<{tag}>")
            open_list = tag
        output.append(f"<li>{match.group(1)}</li>")

    if open_list is not None:
        output.append(f"</{open_list}>")
    return output


def _wrap_paragraph(line: str) -> str:
    trimmed = line.strip()
    if not trimmed:
        return ""
    if trimmed.startswith("<"):
        return trimmed
    return f"<p>{trimmed}</p>"


def _cleanup(html: str) -> str:
    html = _EMPTY_PARAGRAPH_RE.sub("", html)
    html = _ADJACENT_UL_RE.sub("", html)
    html = _ADJACENT_OL_RE.sub("", html)
    return _IMAGE_PARAGRAPH_RE.sub(r"\1", html)
