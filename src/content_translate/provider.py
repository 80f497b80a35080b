# -*- coding: utf-8 -*-
"""
provider.py - Rate-limited dispatch of translation requests

TranslationProvider turns one request (ordered texts of one format, a locale
pair, a priority) into engine calls:

    to_transport -> parse_locale -> split_chunks -> limiter.schedule(engine)
    -> reassemble -> from_transport

Chunks of one request run concurrently through the shared limiter. If any
chunk fails the whole request fails; its chunks still queued in the limiter
are dropped, and nothing is retried here.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from .chunks import split_chunks
from .config import TranslateConfig
from .constants import DEEPL_PRIORITY_DEFAULT, FORMAT_PLAIN, SOURCE, TARGET
from .engine import DeepLEngine
from .errors import EngineFailure, InvalidRequest
from .formats import get_format
from .limiter import PriorityRateLimiter, get_shared_limiter
from .locales import parse_locale
from .tracing import trace

logger = logging.getLogger(__name__)


def find_glossary(glossaries: Sequence[Dict[str, Any]],
                  source_lang: str, target_lang: str) -> Optional[str]:
    """Exact (source, target) match on resolved engine codes."""
    for glossary in glossaries:
        if glossary.get("source_lang") == source_lang and glossary.get("target_lang") == target_lang:
            return glossary.get("id")
    return None


class TranslationProvider:
    """
    DeepL provider bound to a config, an engine and a limiter.

    The limiter defaults to the process-wide one, so direct and batch
    translations compete for the same engine budget and are ordered by
    priority only.
    """

    name = "deepl"

    def __init__(
        self,
        config: Optional[TranslateConfig] = None,
        engine: Optional[Any] = None,
        limiter: Optional[PriorityRateLimiter] = None,
    ):
        self.config = config or TranslateConfig.load()
        self.engine = engine or DeepLEngine(
            api_key=self.config.api_key,
            api_url=self.config.api_url or None,
            timeout_s=self.config.timeout_s,
        )
        self.limiter = limiter or get_shared_limiter(
            self.config.max_concurrent, self.config.min_interval_s
        )

    async def close(self) -> None:
        close = getattr(self.engine, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def translate(
        self,
        texts: Sequence[Any],
        source_locale: str,
        target_locale: str,
        priority: Optional[int] = None,
        format: str = FORMAT_PLAIN,
        api_options: Optional[Dict[str, Any]] = None,
    ) -> List[Any]:
        """
        Translate ``texts`` of one format.

        Returns a list aligned index-for-index with ``texts``. Raises
        InvalidRequest, UnsupportedLocale, ConversionError or EngineFailure.
        """
        if not texts:
            return []
        if not source_locale or not target_locale:
            raise InvalidRequest("source and target locale must be defined")

        transport = get_format(format)
        source_lang = parse_locale(source_locale, self.config.locale_map, SOURCE)
        target_lang = parse_locale(target_locale, self.config.locale_map, TARGET)

        payload = transport.to_transport(list(texts))
        plan = split_chunks(payload, self.config.max_texts, self.config.max_byte_size)

        glossary_id = find_glossary(self.config.glossaries, source_lang, target_lang)
        options = dict(self.config.api_options)
        options.update(api_options or {})
        if "glossary" in options or "glossary_id" in options:
            logger.warning(
                "Glossary provided in api_options will be ignored and overwritten "
                "by the glossary configured for %s -> %s", source_lang, target_lang,
            )
            options.pop("glossary", None)
            options.pop("glossary_id", None)

        if priority is None:
            priority = DEEPL_PRIORITY_DEFAULT

        started = [False] * len(plan.chunks)

        async def send(index: int, chunk: List[str]) -> List[str]:
            started[index] = True
            return await self.engine.translate(
                chunk,
                source_lang,
                target_lang,
                tag_handling=transport.tag_handling,
                glossary_id=glossary_id,
                options=options,
            )

        results = await self._dispatch(send, plan.chunks, started, priority)

        try:
            translated = plan.reassemble(results)
        except ValueError as e:
            raise EngineFailure("parse", str(e), retryable=True) from e

        trace({
            "type": "provider_translate",
            "format": transport.name,
            "source_lang": source_lang,
            "target_lang": target_lang,
            "texts": len(payload),
            "chunks": len(plan.chunks),
            "priority": priority,
            "glossary_id": glossary_id,
        })
        return transport.from_transport(translated)

    async def _dispatch(self, send, chunks: Sequence[List[str]], started: List[bool],
                        priority: int) -> List[List[str]]:
        """
        Schedule every chunk through the limiter and collect results in order.

        On the first failure, chunks still waiting in the limiter are
        cancelled; chunks already sent to the engine run to completion
        before the failure is raised.
        """
        tasks = [
            asyncio.ensure_future(self.limiter.schedule(send, index, chunk, priority=priority))
            for index, chunk in enumerate(chunks)
        ]
        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        if pending:
            dropped = 0
            for index, task in enumerate(tasks):
                if not task.done() and not started[index]:
                    task.cancel()
                    dropped += 1
            await asyncio.gather(*pending, return_exceptions=True)
            if dropped:
                logger.warning("Chunk failed; dropped %d queued chunk(s) of the same request", dropped)

        for task in tasks:
            if task.done() and not task.cancelled() and task.exception() is not None:
                raise task.exception()
        return [task.result() for task in tasks]

    async def usage(self) -> int:
        return await self.engine.usage()
