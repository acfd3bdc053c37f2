"""HTML to Markdown conversion for sanitized job-page markup.

Produces GitHub-flavoured Markdown: ATX headings, fenced code blocks, GFM
tables and ``~~strikethrough~~``. The conversion is a pure function of its
input; the converter keeps no state between calls.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag
from bs4.element import (
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
)

logger = logging.getLogger(__name__)

# Sentinels that survive whitespace cleanup and are swapped out at the end
_HARD_BREAK = "\x00"
_PRE_MARK = "\x01"
_INDENT = "\x02"
_QUOTE = "\x03"

_WS = re.compile(r"[ \t\r\n\f\v]+")
# Stripped from page text so only the converter emits sentinels
_SENTINELS = re.compile(r"[\x00-\x03]")
_SPACE_AROUND_NEWLINE = re.compile(r"[ \t]*\n[ \t]*")
_SPACE_AROUND_BREAK = re.compile(r"[ \t]*\x00[ \t]*")
_BLANK_LINES = re.compile(r"\n{3,}")
_PRE_PLACEHOLDER = re.compile(r"\x01(\d+)\x01")
_INLINE_ESCAPE = re.compile(r"([\\*_`\[\]~])")
_LINE_START_ESCAPE = re.compile(r"^(#{1,6} |[-+] |\d+\. |> )")
_LANGUAGE_CLASS = re.compile(r"^(?:language|lang)-(.+)$")

_SKIPPED_TAGS = frozenset({"script", "style", "head", "title", "noscript", "template"})
_BLOCK_TAGS = frozenset({
    "div", "section", "article", "main", "header", "footer", "aside",
    "thead", "tbody", "tfoot", "body", "html", "nav", "figure",
})
_EMPHASIS = {
    "strong": "**",
    "b": "**",
    "em": "_",
    "i": "_",
    "s": "~~",
    "strike": "~~",
    "del": "~~",
}


@dataclass
class _RenderContext:
    preformatted: list[str] = field(default_factory=list)
    in_table: bool = False


class MarkdownConverter:
    """Converts an HTML fragment into Markdown text."""

    def __init__(self, bullet: str = "-") -> None:
        self.bullet = bullet

    def convert(self, html: str) -> str:
        soup = BeautifulSoup(html or "", "html.parser")
        ctx = _RenderContext()
        text = self._render_children(soup, ctx)
        return self._finalize(text, ctx)

    # -- Dispatch ---------------------------------------------------------------

    def _render_children(self, node: Tag, ctx: _RenderContext) -> str:
        return "".join(self._render(child, ctx) for child in node.children)

    def _render(self, node, ctx: _RenderContext) -> str:
        if isinstance(node, (Comment, Doctype, Declaration, CData, ProcessingInstruction)):
            return ""
        if isinstance(node, NavigableString):
            return self._render_text(str(node), ctx)
        if not isinstance(node, Tag):
            return ""

        name = (node.name or "").lower()
        if name in _SKIPPED_TAGS:
            return ""
        if re.fullmatch(r"h[1-6]", name):
            return self._render_heading(node, int(name[1]), ctx)
        if name == "p":
            content = _escape_line_starts(_clean(self._render_children(node, ctx)))
            return _block(content)
        if name in _BLOCK_TAGS:
            return _block(_clean(self._render_children(node, ctx)))
        if name in _EMPHASIS:
            return _wrap(self._render_children(node, ctx), _EMPHASIS[name])
        if name == "br":
            return " " if ctx.in_table else _HARD_BREAK
        if name == "hr":
            return "" if ctx.in_table else _block("---")
        if name == "code":
            return self._render_inline_code(node, ctx)
        if name == "pre":
            return self._render_pre(node, ctx)
        if name == "blockquote":
            return self._render_blockquote(node, ctx)
        if name in ("ul", "ol"):
            return self._render_list(node, ctx)
        if name == "dt":
            return _block(_clean(self._render_children(node, ctx)))
        if name == "dd":
            return _block(": " + _clean(self._render_children(node, ctx)))
        if name == "table":
            return self._render_table(node, ctx)
        if name in ("li", "dl", "tr", "caption"):
            return _block(_clean(self._render_children(node, ctx)))
        # u, mark, small, sub, sup, span and anything unknown render as plain content
        return self._render_children(node, ctx)

    # -- Inline -----------------------------------------------------------------

    def _render_text(self, text: str, ctx: _RenderContext) -> str:
        text = _WS.sub(" ", _SENTINELS.sub("", text))
        return _INLINE_ESCAPE.sub(r"\\\1", text)

    def _render_inline_code(self, node: Tag, ctx: _RenderContext) -> str:
        code = _WS.sub(" ", _SENTINELS.sub("", node.get_text()))
        if not code.strip():
            return code
        fence = "``" if "`" in code else "`"
        if fence == "``":
            code = f" {code} "
        return f"{fence}{code}{fence}"

    # -- Blocks -----------------------------------------------------------------

    def _render_heading(self, node: Tag, level: int, ctx: _RenderContext) -> str:
        content = _clean(self._render_children(node, ctx))
        content = content.replace("\n", " ").replace(_HARD_BREAK, " ").strip()
        if not content:
            return ""
        if ctx.in_table:
            return f" {content} "
        return _block(f"{'#' * level} {content}")

    def _render_pre(self, node: Tag, ctx: _RenderContext) -> str:
        code = _SENTINELS.sub("", node.get_text())
        if ctx.in_table:
            return self._render_inline_code(node, ctx)
        if code.startswith("\n"):
            code = code[1:]
        code = code.rstrip("\n")

        language = _code_language(node)
        fence = "```"
        while fence in code:
            fence += "`"

        ctx.preformatted.append(f"{fence}{language}\n{code}\n{fence}")
        return _block(f"{_PRE_MARK}{len(ctx.preformatted) - 1}{_PRE_MARK}")

    def _render_blockquote(self, node: Tag, ctx: _RenderContext) -> str:
        content = _clean(self._render_children(node, ctx))
        if not content:
            return ""
        if ctx.in_table:
            return f" {content} "
        lines = [f"{_QUOTE} {line}" if line else _QUOTE for line in content.split("\n")]
        return _block("\n".join(lines))

    def _render_list(self, node: Tag, ctx: _RenderContext) -> str:
        ordered = node.name == "ol"
        try:
            number = int(node.get("start", 1))
        except (TypeError, ValueError):
            number = 1

        items: list[str] = []
        for li in _list_items(node):
            content = _clean(self._render_children(li, ctx))
            content = re.sub(r"\n{2,}", "\n", content)

            if ctx.in_table:
                items.append(content.replace("\n", " "))
                continue

            marker = f"{number}. " if ordered else f"{self.bullet} "
            number += 1
            indent = _INDENT * len(marker)
            lines = content.split("\n")
            rendered = [marker + lines[0]]
            rendered.extend(indent + line if line else line for line in lines[1:])
            items.append("\n".join(rendered))

        if not items:
            # No list items at all: keep whatever text the list holds
            content = _clean(self._render_children(node, ctx))
            return f" {content} " if ctx.in_table and content else _block(content)
        if ctx.in_table:
            return " " + "; ".join(items) + " "
        return _block("\n".join(items))

    def _render_table(self, node: Tag, ctx: _RenderContext) -> str:
        rows = [tr for tr in node.find_all("tr") if tr.find_parent("table") is node]
        if not rows or ctx.in_table:
            return _block(_clean(self._render_children(node, ctx)))

        cell_ctx = _RenderContext(preformatted=ctx.preformatted, in_table=True)
        table: list[list[str]] = []
        for tr in rows:
            cells: list[str] = []
            for cell in tr.find_all(["th", "td"], recursive=False):
                cells.append(self._render_cell(cell, cell_ctx))
                cells.extend([""] * (_span(cell.get("colspan")) - 1))
            table.append(cells)

        width = max(len(row) for row in table)
        if width == 0:
            return ""
        for row in table:
            row.extend([""] * (width - len(row)))

        lines = [_table_row(table[0]), _table_row(["---"] * width)]
        lines.extend(_table_row(row) for row in table[1:])

        caption = node.find("caption", recursive=False)
        parts = []
        if caption is not None:
            caption_text = _clean(self._render_children(caption, ctx))
            if caption_text:
                parts.append(_block(caption_text))
        parts.append(_block("\n".join(lines)))
        return "".join(parts)

    def _render_cell(self, cell: Tag, ctx: _RenderContext) -> str:
        text = self._render_children(cell, ctx)
        text = text.replace(_HARD_BREAK, " ")
        text = _WS.sub(" ", text).strip()
        return text.replace("|", "\\|")

    # -- Output -----------------------------------------------------------------

    def _finalize(self, text: str, ctx: _RenderContext) -> str:
        text = _clean(text)
        text = "\n".join(line.rstrip() for line in text.split("\n"))
        text = _BLANK_LINES.sub("\n\n", text)
        text = (
            text.replace(_INDENT, " ")
            .replace(_QUOTE, ">")
            .replace(_HARD_BREAK, "  \n")
        )
        return _PRE_PLACEHOLDER.sub(lambda m: ctx.preformatted[int(m.group(1))], text)


# =============================================================================
# Helpers
# =============================================================================


def _clean(text: str) -> str:
    """Normalize whitespace inside a rendered block, keeping sentinels intact."""
    text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    text = _SPACE_AROUND_BREAK.sub(_HARD_BREAK, text)
    text = text.replace(_HARD_BREAK + "\n", "\n")
    text = _BLANK_LINES.sub("\n\n", text)
    return text.strip(" \t\n" + _HARD_BREAK)


def _block(content: str) -> str:
    if not content:
        return ""
    return f"\n\n{content}\n\n"


def _wrap(content: str, delimiter: str) -> str:
    stripped = content.strip()
    if not stripped:
        return content
    lead = " " if content[0].isspace() else ""
    trail = " " if content[-1].isspace() else ""
    return f"{lead}{delimiter}{stripped}{delimiter}{trail}"


def _escape_line_starts(text: str) -> str:
    return "\n".join(_LINE_START_ESCAPE.sub(_escape_marker, line) for line in text.split("\n"))


def _escape_marker(match: re.Match) -> str:
    marker = match.group(1)
    if marker[0].isdigit():
        return marker.replace(".", "\\.", 1)
    return "\\" + marker


def _code_language(node: Tag) -> str:
    candidates = [node]
    code = node.find("code")
    if isinstance(code, Tag):
        candidates.append(code)
    for candidate in candidates:
        for cls in candidate.get("class") or []:
            match = _LANGUAGE_CLASS.match(cls)
            if match:
                return match.group(1)
    return ""


def _list_items(node: Tag) -> list[Tag]:
    """Items owned by this list, including ones nested inside wrapper elements."""
    return [li for li in node.find_all("li") if li.find_parent(["ul", "ol"]) is node]


def _span(value) -> int:
    try:
        return min(max(int(value), 1), 50)
    except (TypeError, ValueError):
        return 1


def _table_row(cells: list[str]) -> str:
    return "| " + " | ".join(cells) + " |"


_default_converter = MarkdownConverter()


def html_to_markdown(html: str) -> str:
    """Convert sanitized HTML into Markdown text."""
    return _default_converter.convert(html)
