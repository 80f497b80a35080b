# -*- coding: utf-8 -*-
"""JSONL trace events for engine calls and reconciliation steps.

Env:
  TRANSLATE_TRACE_PATH (default data/translate_trace.jsonl, empty disables)
"""

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_TRACE_PATH = "data/translate_trace.jsonl"


def trace(event: Dict[str, Any]) -> None:
    """Append trace event to JSONL file."""
    path = os.getenv("TRANSLATE_TRACE_PATH", DEFAULT_TRACE_PATH).strip()
    if not path:
        return
    event = dict(event)
    event["timestamp"] = datetime.now().isoformat()
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(event, ensure_ascii=False, default=str) + "\n")
    except OSError as e:
        # Trace failures are logged, not raised
        logger.warning("Could not write trace event to %s: %s", path, e)
