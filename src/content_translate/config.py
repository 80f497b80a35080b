# -*- coding: utf-8 -*-
"""
config.py - Pipeline configuration

Loads the ``translate:`` section of a YAML file on top of
DEFAULT_TRANSLATE_CONFIG. DEEPL_API_KEY / DEEPL_API_URL from the environment
win over values from the file.

Example (config/translate.yaml):

    translate:
      regenerate_uids: true
      max_concurrent: 5
      min_interval_ms: 200
      locale_map:
        en: EN-GB
      glossaries:
        - source_lang: EN
          target_lang: DE
          id: 1f8a...
"""

import copy
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .constants import DEEPL_API_MAX_TEXTS, DEEPL_API_ROUGH_MAX_REQUEST_SIZE

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/translate.yaml"

DEFAULT_TRANSLATE_CONFIG: Dict[str, Any] = {
    "api_key": "",
    "api_url": "",
    "timeout_s": 60,
    "max_concurrent": 5,
    "min_interval_ms": 200,
    "max_texts": DEEPL_API_MAX_TEXTS,
    "max_byte_size": DEEPL_API_ROUGH_MAX_REQUEST_SIZE,
    "regenerate_uids": False,
    "locale_map": {},
    "api_options": {},
    "glossaries": [],
}


def load_translate_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load translate configuration from YAML or use defaults."""
    if config_path is None:
        config_path = os.getenv("TRANSLATE_CONFIG_PATH", DEFAULT_CONFIG_PATH)

    config = copy.deepcopy(DEFAULT_TRANSLATE_CONFIG)

    if Path(config_path).exists():
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
        if "translate" in yaml_config:
            config.update(yaml_config["translate"] or {})
        logger.debug("Loaded translate config from %s", config_path)

    api_key = os.getenv("DEEPL_API_KEY", "").strip()
    if api_key:
        config["api_key"] = api_key
    api_url = os.getenv("DEEPL_API_URL", "").strip()
    if api_url:
        config["api_url"] = api_url

    return config


@dataclass
class TranslateConfig:
    """Typed view over the translate configuration."""
    api_key: str = ""
    api_url: str = ""
    timeout_s: int = 60
    max_concurrent: int = 5
    min_interval_ms: int = 200
    max_texts: int = DEEPL_API_MAX_TEXTS
    max_byte_size: int = DEEPL_API_ROUGH_MAX_REQUEST_SIZE
    regenerate_uids: bool = False
    locale_map: Dict[str, str] = field(default_factory=dict)
    api_options: Dict[str, Any] = field(default_factory=dict)
    glossaries: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslateConfig":
        merged = copy.deepcopy(DEFAULT_TRANSLATE_CONFIG)
        merged.update(data or {})
        # Malformed option blocks are dropped
        if not isinstance(merged.get("locale_map"), dict):
            merged["locale_map"] = {}
        if not isinstance(merged.get("api_options"), dict):
            merged["api_options"] = {}
        if not isinstance(merged.get("glossaries"), list):
            merged["glossaries"] = []
        known = {name for name in cls.__dataclass_fields__}
        unknown = sorted(set(merged) - known)
        if unknown:
            logger.warning("Ignoring unknown translate config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in merged.items() if k in known})

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "TranslateConfig":
        return cls.from_dict(load_translate_config(config_path))

    @property
    def min_interval_s(self) -> float:
        return self.min_interval_ms / 1000.0
