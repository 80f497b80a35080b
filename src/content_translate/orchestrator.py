# -*- coding: utf-8 -*-
"""
orchestrator.py - Translate the translatable fields of one entry

Fields are grouped by format and each group becomes a single provider
request; groups run concurrently. The result is a shallow copy of the entry
with only the translated paths overwritten.
"""

import asyncio
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Sequence

from .constants import FORMAT_PLAIN, TRANSLATE_PRIORITY_DEFAULT
from .field_path import get_path, set_path

logger = logging.getLogger(__name__)


def _field_name(field: Dict[str, Any]) -> str:
    return field.get("field") or field["path"]


def group_by_format(fields_to_translate: Sequence[Dict[str, Any]]) -> "OrderedDict[str, List[Dict[str, Any]]]":
    groups: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
    for field in fields_to_translate:
        groups.setdefault(field.get("format") or FORMAT_PLAIN, []).append(field)
    return groups


class FieldTranslator:
    """Translates entry data through a TranslationProvider."""

    def __init__(self, provider: Any):
        self.provider = provider

    async def estimate_usage(self, data: Dict[str, Any],
                             fields_to_translate: Sequence[Dict[str, Any]]) -> int:
        """Characters that translating these fields would send."""
        return sum(
            len(str(get_path(data, _field_name(f), "") or ""))
            for f in fields_to_translate
        )

    async def translate(
        self,
        data: Dict[str, Any],
        source_locale: str,
        target_locale: str,
        fields_to_translate: Sequence[Dict[str, Any]],
        priority: Optional[int] = TRANSLATE_PRIORITY_DEFAULT,
    ) -> Dict[str, Any]:
        # Same locale: nothing to translate
        if source_locale == target_locale:
            return data

        groups = group_by_format(fields_to_translate)
        translated = dict(data)

        async def translate_group(fmt: str, fields: List[Dict[str, Any]]) -> None:
            texts = [get_path(data, _field_name(f), "") for f in fields]
            result = await self.provider.translate(
                texts,
                source_locale,
                target_locale,
                priority=priority,
                format=fmt,
            )
            for field, value in zip(fields, result):
                set_path(translated, _field_name(field), value)
            logger.debug("Translated %d %s field(s) %s -> %s",
                         len(fields), fmt, source_locale, target_locale)

        await asyncio.gather(*[
            translate_group(fmt, fields) for fmt, fields in groups.items() if fields
        ])
        return translated
