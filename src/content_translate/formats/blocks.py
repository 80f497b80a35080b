# -*- coding: utf-8 -*-
"""
blocks.py - Structured block documents <-> HTML

Block documents are lists of nodes as stored by the rich-text "blocks"
field type:

    [{"type": "paragraph", "children": [{"type": "text", "text": "Hi", "bold": true}]},
     {"type": "heading", "level": 2, "children": [...]},
     {"type": "list", "format": "unordered", "children": [{"type": "list-item", ...}]},
     {"type": "quote", "children": [...]},
     {"type": "code", "language": "py", "children": [{"type": "text", "text": "..."}]},
     {"type": "image", "image": {...}, "children": [{"type": "text", "text": ""}]}]

Inline nodes are text nodes (with bold/italic/underline/strikethrough/code
modifiers) and links. Images keep their metadata in a ``data-image``
attribute, which the engine leaves untouched.
"""

import html
import json
from typing import Any, Dict, List, Optional, Set

from bs4 import BeautifulSoup, NavigableString, Tag

# Modifier -> tag, outermost first
MODIFIER_TAGS = [
    ("bold", "strong"),
    ("italic", "em"),
    ("underline", "u"),
    ("strikethrough", "s"),
    ("code", "code"),
]
TAG_MODIFIERS = {
    "strong": "bold", "b": "bold",
    "em": "italic", "i": "italic",
    "u": "underline",
    "s": "strikethrough", "del": "strikethrough", "strike": "strikethrough",
    "code": "code",
}


# ============================================================================
# Blocks -> HTML
# ============================================================================

def blocks_to_html(blocks: Any) -> str:
    if blocks in (None, ""):
        return ""
    if isinstance(blocks, str):
        blocks = json.loads(blocks)
    if not isinstance(blocks, list):
        raise ValueError(f"Expected a list of blocks, got {type(blocks).__name__}")
    return "".join(_block_to_html(block) for block in blocks)


def _block_to_html(block: Dict[str, Any]) -> str:
    kind = block.get("type")
    children = block.get("children", [])
    if kind == "paragraph":
        return f"<p>{_inline_to_html(children)}</p>"
    if kind == "heading":
        level = int(block.get("level", 1))
        if not 1 <= level <= 6:
            raise ValueError(f"Invalid heading level: {level}")
        return f"<h{level}>{_inline_to_html(children)}</h{level}>"
    if kind == "list":
        tag = "ol" if block.get("format") == "ordered" else "ul"
        items = []
        for child in children:
            if child.get("type") == "list":
                items.append(_block_to_html(child))
            else:
                items.append(f"<li>{_inline_to_html(child.get('children', []))}</li>")
        return f"<{tag}>{''.join(items)}</{tag}>"
    if kind == "quote":
        return f"<blockquote>{_inline_to_html(children)}</blockquote>"
    if kind == "code":
        text = "".join(c.get("text", "") for c in children)
        language = block.get("language")
        cls = f' class="language-{html.escape(language, quote=True)}"' if language else ""
        return f"<pre><code{cls}>{html.escape(text, quote=False)}</code></pre>"
    if kind == "image":
        payload = html.escape(json.dumps(block.get("image", {}), ensure_ascii=False), quote=True)
        return f'<img data-image="{payload}"/>'
    raise ValueError(f"Unknown block type: {kind!r}")


def _inline_to_html(nodes: List[Dict[str, Any]]) -> str:
    parts = []
    for node in nodes:
        if node.get("type") == "link":
            href = html.escape(node.get("url", ""), quote=True)
            parts.append(f'<a href="{href}">{_inline_to_html(node.get("children", []))}</a>')
            continue
        text = html.escape(node.get("text", ""), quote=False)
        for modifier, tag in reversed(MODIFIER_TAGS):
            if node.get(modifier):
                text = f"<{tag}>{text}</{tag}>"
        parts.append(text)
    return "".join(parts)


# ============================================================================
# HTML -> Blocks
# ============================================================================

def html_to_blocks(source: str) -> List[Dict[str, Any]]:
    if not source:
        return []
    soup = BeautifulSoup(source, "html.parser")
    blocks: List[Dict[str, Any]] = []
    stray: List[Any] = []

    def flush():
        children = _inline_from_nodes(stray, frozenset())
        stray.clear()
        if any(c.get("text", "").strip() or c.get("type") == "link" for c in children):
            blocks.append({"type": "paragraph", "children": children})

    for node in soup.children:
        block = _html_to_block(node) if isinstance(node, Tag) else None
        if block is None:
            if isinstance(node, NavigableString) and not str(node).strip():
                continue
            stray.append(node)
            continue
        flush()
        blocks.append(block)
    flush()
    return blocks


def _html_to_block(tag: Tag) -> Optional[Dict[str, Any]]:
    name = tag.name
    if name == "p":
        return {"type": "paragraph", "children": _inline_children(tag)}
    if name in ("h1", "h2", "h3", "h4", "h5", "h6"):
        return {"type": "heading", "level": int(name[1]), "children": _inline_children(tag)}
    if name in ("ul", "ol"):
        return _list_from_html(tag)
    if name == "blockquote":
        return {"type": "quote", "children": _inline_children(tag)}
    if name == "pre":
        code = tag.find("code")
        block: Dict[str, Any] = {
            "type": "code",
            "children": [{"type": "text", "text": tag.get_text()}],
        }
        if code is not None:
            for cls in code.get("class", []):
                if cls.startswith("language-"):
                    block["language"] = cls[len("language-"):]
        return block
    if name == "img":
        raw = tag.get("data-image")
        image = json.loads(raw) if raw else {"url": tag.get("src", ""), "alternativeText": tag.get("alt", "")}
        return {"type": "image", "image": image, "children": [{"type": "text", "text": ""}]}
    return None


def _list_from_html(tag: Tag) -> Dict[str, Any]:
    children = []
    for child in tag.children:
        if not isinstance(child, Tag):
            continue
        if child.name in ("ul", "ol"):
            children.append(_list_from_html(child))
        elif child.name == "li":
            children.append({"type": "list-item", "children": _inline_children(child)})
    return {
        "type": "list",
        "format": "ordered" if tag.name == "ol" else "unordered",
        "children": children,
    }


def _inline_children(tag: Tag) -> List[Dict[str, Any]]:
    children = _inline_from_nodes(list(tag.children), frozenset())
    return children or [{"type": "text", "text": ""}]


def _inline_from_nodes(nodes: List[Any], modifiers: Set[str]) -> List[Dict[str, Any]]:
    result: List[Dict[str, Any]] = []
    for node in nodes:
        if isinstance(node, NavigableString):
            text = str(node)
            if not text:
                continue
            item: Dict[str, Any] = {"type": "text", "text": text}
            for modifier, _ in MODIFIER_TAGS:
                if modifier in modifiers:
                    item[modifier] = True
            result.append(item)
        elif isinstance(node, Tag):
            if node.name == "a":
                result.append({
                    "type": "link",
                    "url": node.get("href", ""),
                    "children": _inline_from_nodes(list(node.children), modifiers)
                    or [{"type": "text", "text": ""}],
                })
            elif node.name == "br":
                result.append({"type": "text", "text": "\n"})
            else:
                modifier = TAG_MODIFIERS.get(node.name)
                nested = modifiers | {modifier} if modifier else modifiers
                result.extend(_inline_from_nodes(list(node.children), nested))
    return result
