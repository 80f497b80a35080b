# -*- coding: utf-8 -*-
"""
reconciler.py - Propagate a source entry into every other locale

For each configured locale (strictly one after another, since each step
reads the localization group the previous one wrote):

    existing sibling  -> partial update of the translated fields
    no sibling        -> relations -> uids -> deleted fields -> clean
                         -> create -> link into the group
                         -> sync localizations -> sync non-localized values
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from .config import TranslateConfig
from .constants import TRANSLATE_PRIORITY_DIRECT_TRANSLATION
from .field_path import get_path, parse_path, set_path
from .schema import (
    SchemaRegistry,
    clean_data,
    copy_non_localized_attributes,
    filter_deleted_fields,
    translate_relations,
    update_uids,
)
from .store import EntryStore, LocaleDirectory
from .tracing import trace

logger = logging.getLogger(__name__)


@dataclass
class LocalizationGroup:
    """In-memory view of one content item across locales."""
    source_id: Any
    source_locale: str
    members: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: Dict[str, Any]) -> "LocalizationGroup":
        members = [{"id": entry["id"], "locale": entry["locale"]}]
        for loc in entry.get("localizations") or []:
            if loc["id"] != entry["id"]:
                members.append({"id": loc["id"], "locale": loc["locale"]})
        return cls(entry["id"], entry["locale"], members)

    def find(self, locale: str) -> Optional[Dict[str, Any]]:
        for member in self.members:
            if member["locale"] == locale:
                return member
        return None

    def add(self, entry_id: Any, locale: str) -> None:
        self.members.append({"id": entry_id, "locale": locale})

    def siblings_of(self, entry_id: Any) -> List[Dict[str, Any]]:
        return [dict(m) for m in self.members if m["id"] != entry_id]

    def others(self) -> List[Dict[str, Any]]:
        return self.siblings_of(self.source_id)


def _lines_up(stored: Any, source: Any, segments: Sequence[Any]) -> bool:
    """True when every list index on the path exists in ``stored`` with the source's component type."""
    for seg in segments:
        if isinstance(seg, int):
            if not isinstance(stored, list) or seg >= len(stored):
                return False
            stored = stored[seg]
            source = source[seg] if isinstance(source, list) and seg < len(source) else None
            if (isinstance(stored, dict) and isinstance(source, dict)
                    and stored.get("__component") != source.get("__component")):
                return False
        else:
            stored = stored.get(seg) if isinstance(stored, dict) else None
            source = source.get(seg) if isinstance(source, dict) else None
    return True


def translated_fields_payload(translated: Dict[str, Any],
                              fields_to_translate: Sequence[Dict[str, Any]],
                              current: Optional[Dict[str, Any]] = None,
                              clean: Optional[Callable[[str, Any], Any]] = None) -> Dict[str, Any]:
    """
    Top-level update payload carrying only the translated paths.

    Nested paths are written over ``current`` (the sibling as stored), so
    untranslated parts of a component keep the sibling's own values. When a
    stored repeatable component or dynamic zone does not line up with the
    source (shorter, or other component types), the whole translated
    top-level value is written instead, passed through ``clean`` if given.
    """
    payload: Dict[str, Any] = {}
    replaced = set()
    current = current or {}
    for f in fields_to_translate:
        segments = parse_path(f.get("field") or f["path"])
        key = segments[0]
        if key in replaced:
            continue
        value = get_path(translated, segments)
        if len(segments) == 1:
            payload[key] = value
            continue
        if not _lines_up(current.get(key), translated.get(key), segments[1:]):
            whole = translated.get(key)
            payload[key] = clean(key, whole) if clean is not None else whole
            replaced.add(key)
            continue
        holder = {key: payload[key] if key in payload else current.get(key)}
        set_path(holder, segments, value)
        payload[key] = holder[key]
    return payload


class LocaleReconciler:
    """Creates or updates the sibling localizations of a source entry."""

    def __init__(
        self,
        translator: Any,
        store: EntryStore,
        locales: LocaleDirectory,
        schemas: SchemaRegistry,
        config: Optional[TranslateConfig] = None,
    ):
        self.translator = translator
        self.store = store
        self.locales = locales
        self.schemas = schemas
        self.config = config or TranslateConfig()

    async def propagate(
        self,
        source_entry: Dict[str, Any],
        fields_to_translate: Sequence[Dict[str, Any]],
        content_type_uid: str,
    ) -> Dict[str, List[Any]]:
        """
        Translate ``source_entry`` into every other configured locale.

        ``source_entry`` must be loaded with its localizations. Its
        ``localizations`` list is extended in place as siblings are created.
        Any failure aborts the remaining locales.
        """
        source_locale = source_entry["locale"]
        schema = self.schemas.get_content_type(content_type_uid)
        group = LocalizationGroup.from_entry(source_entry)
        summary: Dict[str, List[Any]] = {"created": [], "updated": []}

        targets = [loc["code"] for loc in await self.locales.find() if loc["code"] != source_locale]

        for target_locale in targets:
            translated = await self.translator.translate(
                source_entry,
                source_locale,
                target_locale,
                fields_to_translate,
                priority=TRANSLATE_PRIORITY_DIRECT_TRANSLATION,
            )

            existing = group.find(target_locale)
            if existing is not None:
                await self._update_existing(content_type_uid, existing["id"], translated, fields_to_translate)
                summary["updated"].append(existing["id"])
                action = "updated"
                entry_id = existing["id"]
            else:
                created = await self._create_localization(
                    content_type_uid, schema, source_entry, translated, target_locale, group,
                )
                summary["created"].append(created["id"])
                action = "created"
                entry_id = created["id"]

            trace({
                "type": "propagate_locale",
                "content_type": content_type_uid,
                "source_id": source_entry["id"],
                "source_locale": source_locale,
                "target_locale": target_locale,
                "entry_id": entry_id,
                "action": action,
            })
            logger.info("%s %s localization %s of %s#%s", action.capitalize(), target_locale,
                        entry_id, content_type_uid, source_entry["id"])

        return summary

    async def _update_existing(self, uid: str, entry_id: Any, translated: Dict[str, Any],
                               fields_to_translate: Sequence[Dict[str, Any]]) -> None:
        nested = any(len(parse_path(f.get("field") or f["path"])) > 1 for f in fields_to_translate)
        current = await self.store.find_one(uid, entry_id) if nested else None
        schema = self.schemas.get_content_type(uid)

        def clean(key: str, value: Any) -> Any:
            kept = filter_deleted_fields({key: value}, schema, self.schemas)
            return clean_data(kept, schema, self.schemas).get(key)

        data = translated_fields_payload(translated, fields_to_translate, current, clean)
        await self.store.update(uid, entry_id, data)

    async def _create_localization(
        self,
        uid: str,
        schema: Dict[str, Any],
        source_entry: Dict[str, Any],
        translated: Dict[str, Any],
        target_locale: str,
        group: LocalizationGroup,
    ) -> Dict[str, Any]:
        with_relations = await translate_relations(translated, schema, target_locale, self.store, self.schemas)
        uids_updated = await update_uids(with_relations, schema, uid, self.store, self.config.regenerate_uids)
        without_deleted = filter_deleted_fields(uids_updated, schema, self.schemas)
        data = clean_data(without_deleted, schema, self.schemas)

        data["locale"] = target_locale
        data["publishedAt"] = datetime.now(timezone.utc).isoformat()

        created = await self.store.create(uid, data)

        link = {"id": created["id"], "locale": created.get("locale", target_locale)}
        group.add(link["id"], link["locale"])
        source_entry.setdefault("localizations", []).append(dict(link))
        await self.store.update(uid, source_entry["id"], {"localizations": group.others()})

        await self._sync_localizations(uid, group)
        await self._sync_non_localized_attributes(uid, schema, source_entry, group)
        return created

    async def _sync_localizations(self, uid: str, group: LocalizationGroup) -> None:
        """Every sibling lists every other member of the group."""
        for member in group.others():
            await self.store.update(uid, member["id"], {"localizations": group.siblings_of(member["id"])})

    async def _sync_non_localized_attributes(self, uid: str, schema: Dict[str, Any],
                                             source_entry: Dict[str, Any],
                                             group: LocalizationGroup) -> None:
        shared = copy_non_localized_attributes(source_entry, schema, self.schemas)
        if not shared:
            return
        for member in group.others():
            await self.store.update(uid, member["id"], shared)
