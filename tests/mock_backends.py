#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
mock_backends.py

In-memory stand-ins for the engine and the external collaborators, so the
pipeline can be exercised without DeepL or a database.

Features:
- FakeEngine: word-substitution "translation" with call recording,
  latency simulation and error injection
- RecordingProvider: provider-level fake that tracks concurrency
- InMemoryEntryStore / InMemoryLocaleDirectory / InMemoryMarkerStore

Usage:
    engine = FakeEngine()
    provider = TranslationProvider(TranslateConfig(api_key="k"), engine=engine,
                                   limiter=PriorityRateLimiter(5, 0))
"""

import asyncio
import copy
from typing import Any, Callable, Dict, List, Optional

from content_translate.errors import EngineFailure
from content_translate.store import ChangeMarkerStore, EntryStore, LocaleDirectory

GERMAN = {"Hello": "Hallo", "World": "Welt", "world": "Welt", "Goodbye": "Tschüss"}
FRENCH = {"Hello": "Bonjour", "World": "Monde", "world": "monde", "Goodbye": "Au revoir"}
DICTIONARIES = {"DE": GERMAN, "FR": FRENCH}

ARTICLE_UID = "api::article.article"
CATEGORY_UID = "api::category.category"
TAG_UID = "api::tag.tag"


def substitute(text: str, target_lang: str) -> str:
    for word, replacement in DICTIONARIES.get(target_lang, {}).items():
        text = text.replace(word, replacement)
    return text


class FakeEngine:
    """Engine double recording every call."""

    def __init__(self, delay: float = 0.0,
                 fail_when: Optional[Callable[[List[str], str], bool]] = None,
                 characters_used: int = 1234):
        self.delay = delay
        self.fail_when = fail_when
        self.characters_used = characters_used
        self.calls: List[Dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def translate(self, texts, source_lang, target_lang,
                        tag_handling=None, glossary_id=None, options=None):
        self.calls.append({
            "texts": list(texts),
            "source_lang": source_lang,
            "target_lang": target_lang,
            "tag_handling": tag_handling,
            "glossary_id": glossary_id,
            "options": dict(options or {}),
        })
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_when and self.fail_when(list(texts), target_lang):
                raise EngineFailure("upstream", "Upstream error HTTP 503: unavailable",
                                    retryable=True, http_status=503)
            return [substitute(t, target_lang) for t in texts]
        finally:
            self.in_flight -= 1

    async def usage(self) -> int:
        return self.characters_used


class RecordingProvider:
    """Provider double: one call per format group, tracked for concurrency."""

    def __init__(self, delay: float = 0.0, fail_formats: Optional[List[str]] = None,
                 fail_locales: Optional[List[str]] = None):
        self.delay = delay
        self.fail_formats = set(fail_formats or [])
        self.fail_locales = set(fail_locales or [])
        self.calls: List[Dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def translate(self, texts, source_locale, target_locale, priority=None, format="plain"):
        self.calls.append({
            "texts": list(texts),
            "source_locale": source_locale,
            "target_locale": target_locale,
            "priority": priority,
            "format": format,
        })
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if format in self.fail_formats or target_locale in self.fail_locales:
                raise EngineFailure("upstream", f"{format} group failed", retryable=True)
            return [f"[{target_locale}] {t}" if isinstance(t, str) else t for t in texts]
        finally:
            self.in_flight -= 1


class InMemoryEntryStore(EntryStore):
    """Entries per content type, with localizations stored as {id, locale} lists."""

    def __init__(self):
        self.entries: Dict[str, Dict[Any, Dict[str, Any]]] = {}
        self._next_id = 1
        self.updates: List[Dict[str, Any]] = []
        self.created: List[Dict[str, Any]] = []

    def seed(self, uid: str, entry: Dict[str, Any]) -> Dict[str, Any]:
        entry = copy.deepcopy(entry)
        if "id" not in entry:
            entry["id"] = self._new_id()
        # keep generated ids clear of seeded ones
        self._next_id = max(self._next_id, entry["id"] + 1)
        entry.setdefault("localizations", [])
        self.entries.setdefault(uid, {})[entry["id"]] = entry
        return copy.deepcopy(entry)

    def _new_id(self) -> int:
        entry_id = self._next_id
        self._next_id += 1
        return entry_id

    def get(self, uid: str, entry_id: Any) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self.entries.get(uid, {}).get(entry_id))

    async def find_one(self, uid, entry_id, populate=None):
        return self.get(uid, entry_id)

    async def find_many(self, uid, where=None):
        where = where or {}
        return [
            copy.deepcopy(e) for e in self.entries.get(uid, {}).values()
            if all(e.get(k) == v for k, v in where.items())
        ]

    async def create(self, uid, data):
        entry = copy.deepcopy(data)
        entry["id"] = self._new_id()
        entry.setdefault("localizations", [])
        self.entries.setdefault(uid, {})[entry["id"]] = entry
        self.created.append(copy.deepcopy(entry))
        return copy.deepcopy(entry)

    async def update(self, uid, entry_id, data):
        entry = self.entries[uid][entry_id]
        entry.update(copy.deepcopy(data))
        self.updates.append({"uid": uid, "id": entry_id, "data": copy.deepcopy(data)})
        return copy.deepcopy(entry)

    async def exists(self, uid, field, value, exclude_id=None):
        return any(
            e.get(field) == value and e["id"] != exclude_id
            for e in self.entries.get(uid, {}).values()
        )


class InMemoryLocaleDirectory(LocaleDirectory):
    def __init__(self, codes: List[str]):
        self.codes = list(codes)

    async def find(self):
        return [{"code": code} for code in self.codes]


class InMemoryMarkerStore(ChangeMarkerStore):
    def __init__(self, markers: Optional[List[Dict[str, Any]]] = None):
        self.markers = {m["id"]: dict(m) for m in (markers or [])}
        self.deleted: List[Any] = []

    async def find_one(self, marker_id):
        marker = self.markers.get(marker_id)
        return dict(marker) if marker else None

    async def delete(self, marker_id):
        self.markers.pop(marker_id, None)
        self.deleted.append(marker_id)


def link_group(store: InMemoryEntryStore, uid: str, ids: List[Any]) -> None:
    """Make every entry in ``ids`` list every other one."""
    for entry_id in ids:
        store.entries[uid][entry_id]["localizations"] = [
            {"id": other, "locale": store.entries[uid][other]["locale"]}
            for other in ids if other != entry_id
        ]
