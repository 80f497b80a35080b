# -*- coding: utf-8 -*-
"""Markdown <-> HTML conversion for transport through the engine.

Markdown is rendered with markdown-it (CommonMark + strikethrough). The
translated HTML is walked with BeautifulSoup and written back as markdown.
"""

import re
from typing import List

from bs4 import BeautifulSoup, NavigableString, Tag
from markdown_it import MarkdownIt

_md = MarkdownIt("commonmark").enable("strikethrough")

BLOCK_TAGS = frozenset({
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "li",
    "blockquote", "pre", "hr", "div", "table",
})

_ESCAPE = re.compile(r"([\\`*_\[\]~<])")
_ENTITY = re.compile(r"&(?=#?\w+;)")
_BACKTICKS = re.compile(r"`+")

# Line openers markdown would read as block structure
_LINE_STARTS = (
    re.compile(r"^([ \t]*)(#{1,6})(?=[ \t]|$)"),
    re.compile(r"^([ \t]*)(>)"),
    re.compile(r"^([ \t]*)([-+])(?=[ \t]|$)"),
    re.compile(r"^([ \t]*)([-=])(?=[-= \t]*$)"),
    re.compile(r"^([ \t]*\d{1,9})([.)])(?=[ \t]|$)"),
)


def markdown_to_html(text: str) -> str:
    if not text:
        return ""
    return _md.render(text)


def html_to_markdown(html: str) -> str:
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    return "\n\n".join(_render_blocks(soup)).strip("\n")


def _escape(text: str) -> str:
    return _ENTITY.sub(r"\\&", _ESCAPE.sub(r"\\\1", text))


def _escape_line_starts(text: str) -> str:
    lines = []
    for line in text.split("\n"):
        for pattern in _LINE_STARTS:
            line, count = pattern.subn(r"\1\\\2", line, count=1)
            if count:
                break
        lines.append(line)
    return "\n".join(lines)


def _fence_for(code: str, minimum: int = 1) -> str:
    longest = max((len(run) for run in _BACKTICKS.findall(code)), default=0)
    return "`" * max(minimum, longest + 1)


def _code_span(code: str) -> str:
    fence = _fence_for(code)
    padded = code.startswith("`") or code.endswith("`") or (
        code.startswith(" ") and code.endswith(" ") and code.strip(" ")
    )
    if padded:
        code = f" {code} "
    return f"{fence}{code}{fence}"


def _render_blocks(parent: Tag) -> List[str]:
    blocks: List[str] = []
    inline: List[str] = []

    def flush():
        text = "".join(inline).strip()
        inline.clear()
        if text:
            blocks.append(_escape_line_starts(text))

    for child in parent.children:
        if isinstance(child, Tag) and child.name in BLOCK_TAGS:
            flush()
            rendered = _render_block(child)
            if rendered is not None:
                blocks.append(rendered)
        else:
            inline.append(_render_inline(child))
    flush()
    return blocks


def _render_block(tag: Tag):
    name = tag.name
    if name == "p" or name == "div":
        return "\n\n".join(_render_blocks(tag)) or None
    if name in ("h1", "h2", "h3", "h4", "h5", "h6"):
        return "#" * int(name[1]) + " " + _render_inline_children(tag).strip()
    if name in ("ul", "ol"):
        return _render_list(tag)
    if name == "blockquote":
        inner = "\n\n".join(_render_blocks(tag))
        return "\n".join(("> " + line).rstrip() for line in inner.split("\n"))
    if name == "pre":
        code = tag.find("code")
        source = code if code is not None else tag
        language = ""
        if code is not None:
            for cls in code.get("class", []):
                if cls.startswith("language-"):
                    language = cls[len("language-"):]
        body = source.get_text()
        if not body.endswith("\n"):
            body += "\n"
        fence = _fence_for(body, minimum=3)
        return f"{fence}{language}\n{body}{fence}"
    if name == "hr":
        return "---"
    if name == "li":
        return _render_list_item(tag, "- ")
    return _render_inline_children(tag).strip() or None


def _render_list(tag: Tag) -> str:
    ordered = tag.name == "ol"
    start = int(tag.get("start", 1) or 1)
    lines = []
    items = [c for c in tag.children if isinstance(c, Tag) and c.name == "li"]
    for offset, item in enumerate(items):
        marker = f"{start + offset}. " if ordered else "- "
        lines.append(_render_list_item(item, marker))
    # Loose lists (items wrapped in <p>) keep a blank line between items
    loose = any(isinstance(c, Tag) and c.name == "p" for item in items for c in item.children)
    return ("\n\n" if loose else "\n").join(lines)


def _render_list_item(item: Tag, marker: str) -> str:
    indent = " " * len(marker)
    parts = _render_blocks(item)
    body = "\n\n".join(parts) if any(
        isinstance(c, Tag) and c.name == "p" for c in item.children
    ) else "\n".join(parts)
    lines = body.split("\n")
    out = [marker + lines[0]]
    out.extend((indent + line) if line else "" for line in lines[1:])
    return "\n".join(out)


def _render_inline_children(tag: Tag) -> str:
    return "".join(_render_inline(c) for c in tag.children)


def _render_inline(node) -> str:
    if isinstance(node, NavigableString):
        text = str(node)
        previous = node.previous_sibling
        # A hard break already ends the line
        if isinstance(previous, Tag) and previous.name == "br" and text.startswith("\n"):
            text = text[1:]
        return _escape(text)
    if not isinstance(node, Tag):
        return ""
    name = node.name
    inner = _render_inline_children(node)
    if name in ("strong", "b"):
        return f"**{inner}**"
    if name in ("em", "i"):
        return f"*{inner}*"
    if name in ("del", "s", "strike"):
        return f"~~{inner}~~"
    if name == "code":
        return _code_span(node.get_text())
    if name == "br":
        return "\\\n"
    if name == "a":
        href = node.get("href", "")
        title = node.get("title")
        if title:
            return f'[{inner}]({href} "{title}")'
        return f"[{inner}]({href})"
    if name == "img":
        alt = node.get("alt", "")
        src = node.get("src", "")
        title = node.get("title")
        if title:
            return f'![{alt}]({src} "{title}")'
        return f"![{alt}]({src})"
    return inner
