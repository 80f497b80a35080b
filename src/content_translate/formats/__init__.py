# -*- coding: utf-8 -*-
"""
Transport formats for the translation engine.

Each field format maps to a TransportFormat that turns field values into
engine input (``to_transport``) and engine output back into field values
(``from_transport``). Everything except ``plain`` travels as HTML with tag
handling enabled so inline markup survives translation.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

from ..constants import FORMAT_BLOCKS, FORMAT_HTML, FORMAT_MARKDOWN, FORMAT_PLAIN
from ..errors import ConversionError, InvalidRequest
from .blocks import blocks_to_html, html_to_blocks
from .markdown import html_to_markdown, markdown_to_html


def _identity(value: Any) -> Any:
    return "" if value is None else value


class TransportFormat:
    """Conversion capability for one field format."""

    def __init__(self, name: str,
                 tag_handling: Optional[str],
                 forward: Callable[[Any], str] = _identity,
                 reverse: Callable[[str], Any] = _identity):
        self.name = name
        self.tag_handling = tag_handling
        self._forward = forward
        self._reverse = reverse

    def to_transport(self, values: Sequence[Any]) -> List[str]:
        return [self._convert(self._forward, value) for value in values]

    def from_transport(self, texts: Sequence[str]) -> List[Any]:
        return [self._convert(self._reverse, text) for text in texts]

    def _convert(self, func: Callable[[Any], Any], value: Any) -> Any:
        try:
            return func(value)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise ConversionError(self.name, str(e)) from e

    def __repr__(self) -> str:
        return f"TransportFormat({self.name!r})"


FORMATS: Dict[str, TransportFormat] = {
    FORMAT_PLAIN: TransportFormat(FORMAT_PLAIN, None),
    FORMAT_HTML: TransportFormat(FORMAT_HTML, "html"),
    FORMAT_MARKDOWN: TransportFormat(FORMAT_MARKDOWN, "html", markdown_to_html, html_to_markdown),
    FORMAT_BLOCKS: TransportFormat(FORMAT_BLOCKS, "html", blocks_to_html, html_to_blocks),
}

# Older schemas call the blocks format "jsonb"
FORMAT_ALIASES = {"jsonb": FORMAT_BLOCKS}


def get_format(name: Optional[str]) -> TransportFormat:
    key = FORMAT_ALIASES.get(name or FORMAT_PLAIN, name or FORMAT_PLAIN)
    try:
        return FORMATS[key]
    except KeyError:
        raise InvalidRequest(f"Unknown field format: {name!r}") from None


__all__ = [
    "TransportFormat",
    "FORMATS",
    "get_format",
    "blocks_to_html",
    "html_to_blocks",
    "markdown_to_html",
    "html_to_markdown",
]
