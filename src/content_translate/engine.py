# -*- coding: utf-8 -*-
"""
engine.py - DeepL translation engine client

Thin async client over the DeepL REST API:
- POST /v2/translate  (texts are translated in order, one result per text)
- GET  /v2/usage      (characters consumed in the current period)

The client never retries and never chunks: callers must stay within
DEEPL_API_MAX_TEXTS / DEEPL_API_ROUGH_MAX_REQUEST_SIZE per call.

Env:
  DEEPL_API_KEY, DEEPL_API_URL (optional, derived from the key type)
"""

import asyncio
import logging
import os
import time
from typing import Any, Dict, List, Optional

import aiohttp

from .constants import DEEPL_FREE_API, DEEPL_PAID_API
from .errors import EngineFailure
from .tracing import trace

logger = logging.getLogger(__name__)

APP_INFO = "content-translate/1.0.0"


def default_api_url(api_key: str) -> str:
    """Free-tier keys end in ':fx'."""
    return DEEPL_FREE_API if api_key.endswith(":fx") else DEEPL_PAID_API


class DeepLEngine:
    """
    Asynchronous DeepL client.

    Usage:
        async with DeepLEngine(api_key="...") as engine:
            texts = await engine.translate(["Hello"], "EN", "DE")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout_s: Optional[int] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.api_key = (api_key or os.getenv("DEEPL_API_KEY", "")).strip()
        url = api_url or os.getenv("DEEPL_API_URL", "") or default_api_url(self.api_key)
        self.api_url = url.strip().rstrip("/")
        self.timeout_s = timeout_s or 60
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_s, connect=10)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": APP_INFO},
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self):
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise EngineFailure(
                "config",
                "Missing DeepL configuration. Set env var DEEPL_API_KEY or api_key in config",
                retryable=False,
            )
        return {"Authorization": f"DeepL-Auth-Key {self.api_key}"}

    async def translate(
        self,
        texts: List[str],
        source_lang: str,
        target_lang: str,
        tag_handling: Optional[str] = None,
        glossary_id: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> List[str]:
        """Translate ``texts`` in one request; results keep input order."""
        headers = self._headers()
        payload: Dict[str, Any] = dict(options or {})
        payload.update({
            "text": list(texts),
            "source_lang": source_lang,
            "target_lang": target_lang,
        })
        if tag_handling:
            payload["tag_handling"] = tag_handling
        if glossary_id:
            payload["glossary_id"] = glossary_id

        data = await self._request("POST", "/v2/translate", headers, json=payload,
                                   event={"texts": len(texts),
                                          "source_lang": source_lang,
                                          "target_lang": target_lang})
        try:
            translations = [item["text"] for item in data["translations"]]
        except (KeyError, TypeError) as e:
            raise EngineFailure("parse", f"Response parse error: {e}", retryable=True) from e

        if len(translations) != len(texts):
            raise EngineFailure(
                "parse",
                f"Engine returned {len(translations)} translations for {len(texts)} texts",
                retryable=True,
            )
        return translations

    async def usage(self) -> int:
        """Characters consumed in the current billing period."""
        data = await self._request("GET", "/v2/usage", self._headers(), event={})
        try:
            return int(data["character_count"])
        except (KeyError, TypeError, ValueError) as e:
            raise EngineFailure("parse", f"Usage parse error: {e}", retryable=True) from e

    async def _request(self, method: str, path: str, headers: Dict[str, str],
                       event: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        session = await self._get_session()
        url = f"{self.api_url}{path}"
        t0 = time.time()
        try:
            async with session.request(method, url, headers=headers, **kwargs) as resp:
                latency_ms = int((time.time() - t0) * 1000)

                if resp.status in (429, 500, 502, 503, 504, 529):
                    text = await resp.text()
                    raise EngineFailure(
                        "upstream",
                        f"Upstream error HTTP {resp.status}: {text[:200]}",
                        retryable=True,
                        http_status=resp.status,
                    )
                if resp.status == 456:
                    raise EngineFailure(
                        "quota",
                        "DeepL quota exceeded",
                        retryable=False,
                        http_status=resp.status,
                    )
                if resp.status >= 400:
                    text = await resp.text()
                    raise EngineFailure(
                        "http",
                        f"HTTP error {resp.status}: {text[:200]}",
                        retryable=False,
                        http_status=resp.status,
                    )

                try:
                    data = await resp.json(content_type=None)
                except ValueError as e:
                    raise EngineFailure("parse", f"Response parse error: {e}", retryable=True) from e

        except EngineFailure as e:
            trace({"type": "engine_error", "path": path, "kind": e.kind,
                   "http_status": e.http_status, "error": str(e), **event})
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            trace({"type": "engine_error", "path": path, "kind": "network", "error": str(e), **event})
            raise EngineFailure("network", f"Network error: {e}", retryable=True) from e

        trace({"type": "engine_call", "path": path, "latency_ms": latency_ms,
               "base_url": self.api_url, **event})
        logger.debug("DeepL %s %s took %dms", method, path, latency_ms)
        if not isinstance(data, dict):
            raise EngineFailure("parse", "Response is not a JSON object", retryable=True)
        return data
