"""
content_translate - DeepL-backed content localization pipeline
"""
from .batch_update import BatchDiffReconciler, BatchUpdateReport
from .chunks import ChunkPlan, split_chunks
from .config import TranslateConfig, load_translate_config
from .engine import DeepLEngine
from .errors import (
    BatchUpdateError,
    ConversionError,
    EngineFailure,
    InvalidRequest,
    MissingMarker,
    MissingSourceSibling,
    TranslateError,
    UnsupportedLocale,
)
from .limiter import PriorityRateLimiter, get_shared_limiter
from .locales import parse_locale
from .orchestrator import FieldTranslator
from .provider import TranslationProvider
from .reconciler import LocaleReconciler
from .schema import SchemaRegistry, get_translatable_fields
from .service import TranslationService

__version__ = "1.0.0"

__all__ = [
    "BatchDiffReconciler",
    "BatchUpdateReport",
    "ChunkPlan",
    "split_chunks",
    "TranslateConfig",
    "load_translate_config",
    "DeepLEngine",
    "BatchUpdateError",
    "ConversionError",
    "EngineFailure",
    "InvalidRequest",
    "MissingMarker",
    "MissingSourceSibling",
    "TranslateError",
    "UnsupportedLocale",
    "PriorityRateLimiter",
    "get_shared_limiter",
    "parse_locale",
    "FieldTranslator",
    "TranslationProvider",
    "LocaleReconciler",
    "SchemaRegistry",
    "get_translatable_fields",
    "TranslationService",
]
