# -*- coding: utf-8 -*-
"""
errors.py - Error taxonomy for the translation pipeline

Every error carries a ``kind`` and a ``retryable`` hint, the same way the
LLM runtime errors do, so callers (job managers, CLIs) can decide whether a
unit of work is worth resubmitting.

Kinds:
  - request:   missing/invalid input, no engine call made (not retryable)
  - locale:    no engine code can be derived for a locale (not retryable)
  - format:    content could not be converted for transport (not retryable)
  - config:    engine credentials/endpoint missing (not retryable)
  - upstream:  engine 429/5xx (retryable)
  - quota:     engine quota exhausted (not retryable)
  - http:      engine 4xx (not retryable)
  - network:   connection error or timeout (retryable)
  - parse:     engine response could not be read (retryable)
  - reconcile: localization group is inconsistent (not retryable)
  - marker:    change marker vanished (skipped, never surfaced)
"""

from typing import Any, Dict, Optional


class TranslateError(Exception):
    """Base error with retry hints."""

    def __init__(self, kind: str, message: str,
                 retryable: bool = False,
                 http_status: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.retryable = retryable
        self.http_status = http_status


class InvalidRequest(TranslateError):
    def __init__(self, message: str):
        super().__init__("request", message, retryable=False)


class UnsupportedLocale(TranslateError):
    def __init__(self, locale: str, direction: str):
        super().__init__(
            "locale",
            f"Unsupported {direction} locale: {locale!r}",
            retryable=False,
        )
        self.locale = locale
        self.direction = direction


class ConversionError(TranslateError):
    def __init__(self, fmt: str, message: str):
        super().__init__("format", f"Cannot convert {fmt} content: {message}", retryable=False)
        self.format = fmt


class EngineFailure(TranslateError):
    """A chunk call to the translation engine failed."""


class MissingSourceSibling(TranslateError):
    def __init__(self, group_id: str, source_locale: str):
        super().__init__(
            "reconcile",
            f"Localization group {group_id} has no entry in source locale {source_locale!r}",
            retryable=False,
        )
        self.group_id = group_id
        self.source_locale = source_locale


class MissingMarker(TranslateError):
    def __init__(self, marker_id: Any):
        super().__init__("marker", f"Change marker {marker_id} not found", retryable=False)
        self.marker_id = marker_id


class BatchUpdateError(TranslateError):
    """Raised after a batch update run in which at least one marker failed."""

    def __init__(self, failed: Dict[Any, BaseException], report: Any = None):
        ids = ", ".join(str(k) for k in failed)
        super().__init__("reconcile", f"Batch update failed for markers: {ids}", retryable=True)
        self.failed = failed
        self.report = report
