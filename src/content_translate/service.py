# -*- coding: utf-8 -*-
"""Single entry point wiring provider, translator and reconcilers together."""

import logging
from typing import Any, Dict, Optional, Sequence

from .batch_update import BatchDiffReconciler, BatchUpdateReport
from .config import TranslateConfig
from .constants import TRANSLATE_PRIORITY_DEFAULT
from .orchestrator import FieldTranslator
from .provider import TranslationProvider
from .reconciler import LocaleReconciler
from .schema import SchemaRegistry
from .store import ChangeMarkerStore, EntryStore, JobManager, LocaleDirectory

logger = logging.getLogger(__name__)


class TranslationService:
    """
    Facade over the pipeline.

    Usage:
        service = TranslationService(store=..., locales=..., schemas=..., markers=...)
        await service.translate_other_locales(entry, fields, "api::article.article")
    """

    def __init__(
        self,
        store: EntryStore,
        locales: LocaleDirectory,
        schemas: SchemaRegistry,
        markers: Optional[ChangeMarkerStore] = None,
        jobs: Optional[JobManager] = None,
        config: Optional[TranslateConfig] = None,
        provider: Optional[TranslationProvider] = None,
    ):
        self.config = config or TranslateConfig.load()
        self.provider = provider or TranslationProvider(self.config)
        self.translator = FieldTranslator(self.provider)
        self.schemas = schemas
        self.jobs = jobs
        self.reconciler = LocaleReconciler(self.translator, store, locales, schemas, self.config)
        self.batch_updater = (
            BatchDiffReconciler(self.translator, store, markers, schemas, self.config)
            if markers is not None else None
        )

    async def close(self) -> None:
        await self.provider.close()

    async def translate(self, data: Dict[str, Any], source_locale: str, target_locale: str,
                        fields_to_translate: Sequence[Dict[str, Any]],
                        priority: Optional[int] = TRANSLATE_PRIORITY_DEFAULT) -> Dict[str, Any]:
        return await self.translator.translate(data, source_locale, target_locale,
                                               fields_to_translate, priority)

    async def estimate_usage(self, data: Dict[str, Any],
                             fields_to_translate: Sequence[Dict[str, Any]]) -> int:
        return await self.translator.estimate_usage(data, fields_to_translate)

    async def usage(self) -> int:
        return await self.provider.usage()

    async def translate_other_locales(self, source_entry: Dict[str, Any],
                                      fields_to_translate: Sequence[Dict[str, Any]],
                                      content_type_uid: str) -> Dict[str, Any]:
        return await self.reconciler.propagate(source_entry, fields_to_translate, content_type_uid)

    async def batch_update(self, marker_ids: Sequence[Any], source_locale: str,
                           raise_on_error: bool = True) -> BatchUpdateReport:
        if self.batch_updater is None:
            raise RuntimeError("No change marker store configured")
        return await self.batch_updater.reconcile(marker_ids, source_locale, raise_on_error)

    # Batch jobs are owned by the job manager; these only forward.

    def _job_manager(self) -> JobManager:
        if self.jobs is None:
            raise RuntimeError("No job manager configured")
        return self.jobs

    async def batch_translate(self, params: Dict[str, Any]) -> Any:
        return await self._job_manager().submit_job(params)

    async def batch_translate_pause_job(self, job_id: Any) -> Any:
        return await self._job_manager().pause_job(job_id)

    async def batch_translate_resume_job(self, job_id: Any) -> Any:
        return await self._job_manager().resume_job(job_id)

    async def batch_translate_cancel_job(self, job_id: Any) -> Any:
        return await self._job_manager().cancel_job(job_id)
