"""Pytest configuration and shared fixtures for content-translate tests."""
import pytest
import sys
from pathlib import Path

# Add src and tests directories to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
SRC_DIR = PROJECT_ROOT / 'src'
TESTS_DIR = PROJECT_ROOT / 'tests'
sys.path.insert(0, str(SRC_DIR))
sys.path.insert(0, str(TESTS_DIR))

from content_translate.config import TranslateConfig  # noqa: E402
from content_translate.limiter import PriorityRateLimiter, reset_shared_limiter  # noqa: E402
from content_translate.provider import TranslationProvider  # noqa: E402
from content_translate.schema import SchemaRegistry  # noqa: E402
from mock_backends import ARTICLE_UID, CATEGORY_UID, TAG_UID, FakeEngine  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_trace(tmp_path, monkeypatch):
    """Send trace events to a per-test file."""
    path = tmp_path / "trace.jsonl"
    monkeypatch.setenv("TRANSLATE_TRACE_PATH", str(path))
    return path


@pytest.fixture(autouse=True)
def fresh_shared_limiter():
    """The shared limiter must not leak between event loops."""
    reset_shared_limiter()
    yield
    reset_shared_limiter()


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def translate_config():
    """Config with a dummy key and no pacing between calls."""
    return TranslateConfig(api_key="test-key:fx", min_interval_ms=0)


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def provider(translate_config, fake_engine):
    """TranslationProvider over the fake engine with an unpaced limiter."""
    return TranslationProvider(
        translate_config,
        engine=fake_engine,
        limiter=PriorityRateLimiter(max_concurrent=5, min_interval=0),
    )


@pytest.fixture
def article_schema():
    """Content type covering every attribute kind the pipeline handles."""
    return {
        "uid": ARTICLE_UID,
        "localized": True,
        "attributes": {
            "title": {"type": "string"},
            "slug": {"type": "uid", "targetField": "title"},
            "body": {"type": "richtext"},
            "price": {"type": "decimal", "localized": False},
            "internal_note": {"type": "text", "translate": "delete"},
            "sku": {"type": "string", "translate": "copy"},
            "seo": {"type": "component", "component": "shared.seo"},
            "faq": {"type": "component", "component": "shared.faq", "repeatable": True},
            "sections": {"type": "dynamiczone", "components": ["page.text", "page.banner"]},
            "category": {"type": "relation", "relation": "manyToOne", "target": CATEGORY_UID},
            "tags": {"type": "relation", "relation": "manyToMany", "target": TAG_UID},
            "cover_owner": {"type": "relation", "relation": "oneToOne",
                            "target": TAG_UID, "inversedBy": "cover_of"},
        },
    }


@pytest.fixture
def registry(article_schema):
    return SchemaRegistry(
        content_types={
            ARTICLE_UID: article_schema,
            CATEGORY_UID: {"uid": CATEGORY_UID, "localized": True,
                           "attributes": {"name": {"type": "string"}}},
            TAG_UID: {"uid": TAG_UID, "localized": False,
                      "attributes": {"label": {"type": "string"}}},
        },
        components={
            "shared.seo": {"attributes": {
                "metaTitle": {"type": "string"},
                "metaDescription": {"type": "text"},
                "canonical": {"type": "string", "translate": "copy"},
            }},
            "shared.faq": {"attributes": {
                "question": {"type": "string"},
                "answer": {"type": "richtext"},
            }},
            "page.text": {"attributes": {
                "body": {"type": "richtext"},
                "draft_note": {"type": "text", "translate": "delete"},
            }},
            "page.banner": {"attributes": {
                "headline": {"type": "string"},
                "image_url": {"type": "string", "localized": False},
            }},
        },
    )
