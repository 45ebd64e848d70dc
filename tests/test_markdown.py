"""Tests for markdown parsing and HTML rendering."""

from __future__ import annotations

from html import escape

from helpcenter.models import Heading
from helpcenter.rendering.markdown import (
    extract_headings,
    generate_excerpt,
    heading_anchor,
    markdown_to_html,
    parse,
    parse_read_time,
    resolve_image_name,
    safe_href,
)


class TestParse:
    """Test the parse entry point."""

    def test_title_and_paragraph(self) -> None:
        """Should drop the leading H1 and use the paragraph as excerpt."""
        parsed = parse("# Title\nThis is the first paragraph.")

        assert parsed.html_content == "<p>This is the first paragraph.</p>"
        assert "<h1" not in parsed.html_content
        assert parsed.excerpt == "This is the first paragraph."

    def test_frontmatter(self) -> None:
        """Should read labelled metadata and start content at the first heading."""
        markdown = (
            "撰寫人: 王小明\n"
            "撰寫時間: 2024-05-01\n"
            "種類: 基礎操作\n"
            "閱讀時間（分鐘）: 5\n"
            "\n"
            "# 基礎操作\n"
            "\n"
            "登入系統後即可開始使用。\n"
        )
        parsed = parse(markdown)

        assert parsed.frontmatter.author == "王小明"
        assert parsed.frontmatter.date == "2024-05-01"
        assert parsed.frontmatter.category == "基礎操作"
        assert parsed.frontmatter.read_time_minutes == 5
        assert "撰寫人" not in parsed.html_content
        assert "<h1" not in parsed.html_content
        assert parsed.html_content == "\n<p>登入系統後即可開始使用。</p>\n"
        assert parsed.excerpt == "登入系統後即可開始使用。"

    def test_frontmatter_keeps_subheadings(self) -> None:
        """Should only drop the H1, not later headings."""
        markdown = "種類: 教學\n# 標題\n## 第一步\n內容"
        parsed = parse(markdown)

        assert parsed.frontmatter.category == "教學"
        assert '<h2 id="第一步" data-anchor="第一步">第一步</h2>' in parsed.html_content

    def test_invalid_read_time(self) -> None:
        """Should default an unparseable read time to 0."""
        parsed = parse("閱讀時間（分鐘）: 約五分鐘\n# T\nBody")

        assert parsed.frontmatter.read_time_minutes == 0

    def test_no_frontmatter_keeps_everything(self) -> None:
        """Should not drop lines when no label is present."""
        parsed = parse("Intro line\n# Heading\nBody")

        assert parsed.frontmatter.author is None
        assert parsed.frontmatter.read_time_minutes is None
        assert "<p>Intro line</p>" in parsed.html_content
        assert '<h1 id="heading" data-anchor="heading">Heading</h1>' in parsed.html_content
        assert parsed.excerpt == "Intro line\nHeading\nBody"

    def test_frontmatter_without_heading(self) -> None:
        """Should keep all lines when no heading follows the labels."""
        parsed = parse("撰寫人: A\nBody text")

        assert parsed.frontmatter.author == "A"
        assert "<p>Body text</p>" in parsed.html_content

    def test_heading_past_window_keeps_everything(self) -> None:
        """Should ignore a heading on line 11 and keep every line."""
        parsed = parse("撰寫人: A\n" + "x\n" * 9 + "# Late\nbody")

        assert parsed.frontmatter.author == "A"
        assert "<p>撰寫人: A</p>" in parsed.html_content
        assert parsed.html_content.count("<p>x</p>") == 9
        assert '<h1 id="late" data-anchor="late">Late</h1>' in parsed.html_content

    def test_heading_on_last_window_line_starts_content(self) -> None:
        """Should start content at a heading on line 10 and drop it as the title."""
        parsed = parse("撰寫人: A\n" + "x\n" * 8 + "# Late\nbody")

        assert parsed.frontmatter.author == "A"
        assert parsed.html_content == "<p>body</p>"

    def test_headings_cover_rendered_body(self) -> None:
        """Should leave the dropped title out of the table of contents."""
        parsed = parse("撰寫人: A\n# Title\n## Step\nbody")

        assert parsed.headings == [Heading(level=2, text="Step", anchor="step")]
        for heading in parsed.headings:
            assert f'id="{heading.anchor}"' in parsed.html_content

    def test_crlf_input(self) -> None:
        """Should normalize Windows line endings."""
        parsed = parse("# T\r\nLine one\r\n")

        assert parsed.html_content == "<p>Line one</p>\n"
        assert "\r" not in parsed.excerpt

    def test_empty_input(self) -> None:
        """Should return empty content for empty input."""
        parsed = parse("")

        assert parsed.html_content == ""
        assert parsed.excerpt == ""


class TestReadTime:
    """Test parse_read_time."""

    def test_plain_number(self) -> None:
        assert parse_read_time(" 12 ") == 12

    def test_leading_digits(self) -> None:
        """Should parse leading digits like parseInt."""
        assert parse_read_time("12 分鐘") == 12

    def test_not_a_number(self) -> None:
        assert parse_read_time("abc") == 0
        assert parse_read_time("") == 0


class TestExcerpt:
    """Test excerpt generation."""

    def test_strips_markup(self) -> None:
        """Should remove bold and link syntax from the first paragraph."""
        excerpt = generate_excerpt("First **bold** [link](http://x.test)\n\nSecond")

        assert excerpt == "First bold link"

    def test_strips_list_and_quote_markers(self) -> None:
        excerpt = generate_excerpt("- item\n> quote")

        assert excerpt == "item\nquote"

    def test_truncates_long_paragraph(self) -> None:
        """Should cap the excerpt at 200 characters plus ellipsis."""
        excerpt = parse("# T\n" + "字" * 250).excerpt

        assert len(excerpt) == 203
        assert excerpt.endswith("...")

    def test_short_paragraph_unchanged(self) -> None:
        text = "x" * 200
        assert generate_excerpt(text) == text


class TestImages:
    """Test image conversion."""

    def test_ordinal_suffix_removed(self) -> None:
        """Should resolve duplicate-asset names to the base filename."""
        html = parse("![圖片](images/場次邀請表單 1.png)").html_content

        assert 'data-help-image="場次邀請表單.png"' in html
        assert 'alt="圖片"' in html
        assert html.startswith("<img ")
        assert "<p>" not in html

    def test_resolve_encoded_path(self) -> None:
        """Should decode, take the last segment and drop the query string."""
        assert resolve_image_name("images/%E5%9C%96 1.png?raw=1") == "圖.png"
        assert resolve_image_name("a/b/Photo.JPG#frag") == "Photo.JPG"

    def test_resolve_backslash_path(self) -> None:
        assert resolve_image_name("images\\shot.png") == "images\\shot.png"
        assert resolve_image_name("images/") == "images/"

    def test_non_image_left_alone(self) -> None:
        """Should not produce an image element for non-image targets."""
        html = markdown_to_html("![doc](files/manual.pdf)")

        assert "<img" not in html
        assert "files/manual.pdf" in html

    def test_attributes_escaped(self) -> None:
        html = markdown_to_html('![say "hi"](pic.png)')

        assert 'alt="say &quot;hi&quot;"' in html


class TestInlineMarkup:
    """Test headings, emphasis and links."""

    def test_heading_levels(self) -> None:
        html = markdown_to_html("# One\n## Setup Guide\n### 常見問題？")

        assert '<h1 id="one" data-anchor="one">One</h1>' in html
        assert '<h2 id="setup-guide" data-anchor="setup-guide">Setup Guide</h2>' in html
        assert '<h3 id="常見問題" data-anchor="常見問題">常見問題？</h3>' in html

    def test_deeper_heading_not_converted(self) -> None:
        assert markdown_to_html("#### Deep") == "<p>#### Deep</p>"

    def test_bold_and_italic(self) -> None:
        html = markdown_to_html("This is **bold** and *italic*")

        assert html == "<p>This is <strong>bold</strong> and <em>italic</em></p>"

    def test_bold_inside_heading(self) -> None:
        html = markdown_to_html("## **Note**")

        assert html == '<h2 id="note" data-anchor="note"><strong>Note</strong></h2>'

    def test_link(self) -> None:
        """Should open links in a new context without an opener reference."""
        html = markdown_to_html("[Docs](https://example.com)")

        assert html == (
            '<a href="https://example.com" target="_blank" '
            'rel="noopener noreferrer">Docs</a>'
        )

    def test_link_inside_text_is_wrapped(self) -> None:
        html = markdown_to_html("See [Docs](https://example.com) first")

        assert html.startswith("<p>See <a href=")
        assert html.endswith("</a> first</p>")

    def test_unsafe_link(self) -> None:
        html = markdown_to_html("[x](javascript:alert(1))")

        assert 'href="#"' in html
        assert "javascript" not in html

    def test_safe_href(self) -> None:
        assert safe_href("https://example.com") == "https://example.com"
        assert safe_href(" JavaScript:void(0)") == "#"
        assert safe_href("data:text/html,hi") == "#"

    def test_control_characters_in_scheme(self) -> None:
        """Should see through tabs, newlines and NULs that browsers ignore."""
        assert safe_href("java\tscript:alert(1)") == "#"
        assert safe_href("java\nscript:alert(1)") == "#"
        assert safe_href("\x00javascript:alert(1)") == "#"

        html = markdown_to_html("[x](java\tscript:alert(1))")

        assert 'href="#"' in html
        assert "script" not in html


class TestBlocks:
    """Test rules, quotes, lists and paragraphs."""

    def test_rule_and_quote(self) -> None:
        html = markdown_to_html("---\n> Note this")

        assert html == "<hr/>\n<blockquote>Note this</blockquote>"

    def test_list_type_switch(self) -> None:
        """Should close the unordered list before opening the ordered one."""
        html = parse("- a\n- b\n1. c\n").html_content

        assert "<ul>\n<li>a</li>\n<li>b</li>\n</ul>\n<ol>\n<li>c</li>\n</ol>" in html
        assert html.count("<ul>") == 1
        assert html.count("<ol>") == 1

    def test_adjacent_lists_merged(self) -> None:
        """Should merge lists separated only by blank lines."""
        html = markdown_to_html("- a\n\n- b")

        assert html.count("<ul>") == 1
        assert html.count("</ul>") == 1
        assert "<li>a</li>" in html and "<li>b</li>" in html

    def test_list_closed_by_text(self) -> None:
        html = markdown_to_html("1. one\n2. two\nAfter")

        assert html == "<ol>\n<li>one</li>\n<li>two</li>\n</ol>\n<p>After</p>"

    def test_plus_marker(self) -> None:
        html = markdown_to_html("+ item")

        assert html == "<ul>\n<li>item</li>\n</ul>"

    def test_blank_lines_produce_nothing(self) -> None:
        html = markdown_to_html("a\n\n   \nb")

        assert html == "<p>a</p>\n\n\n<p>b</p>"


class TestExtractHeadings:
    """Test table of contents extraction."""

    def test_headings(self) -> None:
        headings = extract_headings("# Title\n## Part One\n### 細節？\n#### skipped\nbody")

        assert headings == [
            Heading(level=1, text="Title", anchor="title"),
            Heading(level=2, text="Part One", anchor="part-one"),
            Heading(level=3, text="細節？", anchor="細節"),
        ]

    def test_anchors_match_rendered_html(self) -> None:
        markdown = "## Getting Started!"
        anchor = extract_headings(markdown)[0].anchor

        assert f'id="{anchor}"' in markdown_to_html(markdown)

    def test_anchor_with_image_matches_rendered_html(self) -> None:
        """Should derive the anchor from the heading as rendered, image included."""
        markdown = "## Step ![shot](a.png)"
        anchor = extract_headings(markdown)[0].anchor

        assert anchor == heading_anchor("Step ![shot](a.png)")
        assert f'id="{escape(anchor)}"' in markdown_to_html(markdown)
