# -*- coding: utf-8 -*-
"""
batch_update.py - Re-translate groups whose source entry changed

Consumes change markers. For each marker the whole localization group is
loaded, every sibling other than the source is re-translated from the source
and overwritten, and the marker is deleted once all siblings succeeded.

A marker whose group fails half-way is kept, so the next run retranslates
the whole group (including siblings that were already updated).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .config import TranslateConfig
from .constants import TRANSLATE_PRIORITY_BATCH_UPDATE
from .errors import BatchUpdateError, MissingMarker, MissingSourceSibling
from .schema import (
    SchemaRegistry,
    clean_data,
    filter_deleted_fields,
    get_translatable_fields,
    top_level_keys,
    uid_attribute_names,
    update_uids,
)
from .store import ChangeMarkerStore, EntryStore
from .tracing import trace

logger = logging.getLogger(__name__)


def entry_id_from_group(group_id: Any) -> Any:
    """Group ids are the dash-joined member ids; the first is the source entry."""
    if isinstance(group_id, int):
        return group_id
    head = str(group_id).split("-", 1)[0]
    return int(head) if head.isdigit() else head


@dataclass
class BatchUpdateReport:
    processed: List[Any] = field(default_factory=list)
    skipped: List[Any] = field(default_factory=list)
    failed: Dict[Any, BaseException] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": list(self.processed),
            "skipped": list(self.skipped),
            "failed": {str(k): str(v) for k, v in self.failed.items()},
        }


class BatchDiffReconciler:
    """Re-runs translation for every sibling of each changed group."""

    def __init__(
        self,
        translator: Any,
        store: EntryStore,
        markers: ChangeMarkerStore,
        schemas: SchemaRegistry,
        config: Optional[TranslateConfig] = None,
    ):
        self.translator = translator
        self.store = store
        self.markers = markers
        self.schemas = schemas
        self.config = config or TranslateConfig()

    async def reconcile(self, marker_ids: Sequence[Any], source_locale: str,
                        raise_on_error: bool = True) -> BatchUpdateReport:
        """
        Process ``marker_ids`` one group at a time.

        Missing markers are skipped. A failing group does not stop the others;
        failures are collected and raised together as BatchUpdateError unless
        ``raise_on_error`` is False.
        """
        report = BatchUpdateReport()
        for marker_id in marker_ids:
            try:
                updated = await self._process_marker(marker_id, source_locale)
            except MissingMarker:
                logger.debug("Change marker %s no longer exists, skipping", marker_id)
                report.skipped.append(marker_id)
                continue
            except Exception as e:
                logger.error("Batch update of marker %s failed: %s", marker_id, e, exc_info=True)
                trace({"type": "batch_update_marker", "marker_id": marker_id,
                       "status": "failed", "error": str(e)})
                report.failed[marker_id] = e
                continue

            report.processed.append(marker_id)
            trace({"type": "batch_update_marker", "marker_id": marker_id,
                   "status": "processed", "updated": updated})

        if report.failed and raise_on_error:
            raise BatchUpdateError(report.failed, report)
        return report

    async def _process_marker(self, marker_id: Any, source_locale: str) -> List[Any]:
        marker = await self.markers.find_one(marker_id)
        if marker is None:
            raise MissingMarker(marker_id)

        uid = marker["content_type"]
        group_id = marker["group_id"]
        entry = await self.store.find_one(uid, entry_id_from_group(group_id), populate=["localizations"])
        if entry is None:
            raise MissingSourceSibling(str(group_id), source_locale)

        siblings = [entry]
        for loc in entry.get("localizations") or []:
            sibling = await self.store.find_one(uid, loc["id"])
            if sibling is not None:
                siblings.append(sibling)

        source = next((s for s in siblings if s.get("locale") == source_locale), None)
        if source is None:
            raise MissingSourceSibling(str(group_id), source_locale)

        schema = self.schemas.get_content_type(uid)
        fields_to_translate = get_translatable_fields(source, schema, self.schemas)
        keys = top_level_keys(fields_to_translate)
        if self.config.regenerate_uids:
            keys += [k for k in uid_attribute_names(schema) if k not in keys]

        updated = []
        for sibling in siblings:
            if sibling["id"] == source["id"]:
                continue
            translated = await self.translator.translate(
                source,
                source_locale,
                sibling["locale"],
                fields_to_translate,
                priority=TRANSLATE_PRIORITY_BATCH_UPDATE,
            )
            uids_updated = await update_uids(translated, schema, uid, self.store,
                                             self.config.regenerate_uids, exclude_id=sibling["id"])
            without_deleted = filter_deleted_fields(uids_updated, schema, self.schemas)
            cleaned = clean_data(without_deleted, schema, self.schemas)

            data = {k: cleaned[k] for k in keys if k in cleaned}
            await self.store.update(uid, sibling["id"], data)
            updated.append(sibling["id"])

        await self.markers.delete(marker_id)
        logger.info("Batch updated %d localization(s) of %s group %s", len(updated), uid, group_id)
        return updated
