# -*- coding: utf-8 -*-
"""Engine limits and request priorities shared across the pipeline."""

# DeepL accepts at most 50 texts per request and ~128 KiB of request body.
DEEPL_API_MAX_TEXTS = 50
DEEPL_API_ROUGH_MAX_REQUEST_SIZE = 128 * 1024

DEEPL_FREE_API = "https://api-free.deepl.com"
DEEPL_PAID_API = "https://api.deepl.com"

# Priorities run 0..9, lower is more urgent.
DEEPL_PRIORITY_DEFAULT = 5
TRANSLATE_PRIORITY_DIRECT_TRANSLATION = 3
TRANSLATE_PRIORITY_DEFAULT = 5
TRANSLATE_PRIORITY_BATCH_UPDATE = 6
TRANSLATE_PRIORITY_BATCH_TRANSLATION = 7

FORMAT_PLAIN = "plain"
FORMAT_HTML = "html"
FORMAT_MARKDOWN = "markdown"
FORMAT_BLOCKS = "blocks"
FORMATS_ALL = (FORMAT_PLAIN, FORMAT_HTML, FORMAT_MARKDOWN, FORMAT_BLOCKS)

SOURCE = "source"
TARGET = "target"
