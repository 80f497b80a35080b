# -*- coding: utf-8 -*-
"""
schema.py - Content-type schemas and the data transforms built on them

Schemas are plain dicts:

    {
        "uid": "api::article.article",
        "localized": True,
        "attributes": {
            "title": {"type": "string"},
            "slug": {"type": "uid", "targetField": "title"},
            "body": {"type": "richtext"},
            "content": {"type": "blocks"},
            "price": {"type": "decimal", "localized": False},
            "internal_note": {"type": "text", "translate": "delete"},
            "seo": {"type": "component", "component": "shared.seo"},
            "sections": {"type": "dynamiczone", "components": ["page.text"]},
            "category": {"type": "relation", "relation": "manyToOne",
                         "target": "api::category.category"},
        },
    }

Attribute options:
  localized  False keeps the value identical in every locale (default True)
  translate  "translate" | "copy" | "delete" (default "translate" for text types)
"""

import copy
import logging
import re
import unicodedata
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .constants import FORMAT_BLOCKS, FORMAT_HTML, FORMAT_MARKDOWN, FORMAT_PLAIN
from .field_path import Segment, format_path, top_level_key

logger = logging.getLogger(__name__)

TYPE_FORMATS = {
    "string": FORMAT_PLAIN,
    "text": FORMAT_PLAIN,
    "richtext": FORMAT_MARKDOWN,
    "blocks": FORMAT_BLOCKS,
    "html": FORMAT_HTML,
}

# Relations whose far side can hold a single owner only
EXCLUSIVE_RELATIONS = frozenset({"oneToOne", "oneToMany"})


class SchemaRegistry:
    """In-process lookup of content-type and component schemas."""

    def __init__(self, content_types: Optional[Dict[str, Dict[str, Any]]] = None,
                 components: Optional[Dict[str, Dict[str, Any]]] = None):
        self.content_types = dict(content_types or {})
        self.components = dict(components or {})

    def get_content_type(self, uid: str) -> Dict[str, Any]:
        try:
            return self.content_types[uid]
        except KeyError:
            raise KeyError(f"Unknown content type: {uid}") from None

    def get_component(self, uid: str) -> Dict[str, Any]:
        try:
            return self.components[uid]
        except KeyError:
            raise KeyError(f"Unknown component: {uid}") from None

    def is_localized(self, uid: str) -> bool:
        schema = self.content_types.get(uid)
        return bool(schema and schema.get("localized", False))


def attribute_format(attr: Dict[str, Any]) -> Optional[str]:
    return attr.get("format") or TYPE_FORMATS.get(attr.get("type"))


def is_localized_attribute(attr: Dict[str, Any]) -> bool:
    # Relations and uids always differ per locale
    if attr.get("type") in ("relation", "uid"):
        return True
    return attr.get("localized", True) is not False


# ============================================================================
# Translatable fields
# ============================================================================

def get_translatable_fields(data: Dict[str, Any], schema: Dict[str, Any],
                            registry: SchemaRegistry) -> List[Dict[str, str]]:
    """All ``{"field", "format"}`` pairs of ``data`` that should be translated."""
    fields: List[Dict[str, str]] = []
    _collect_fields(data, schema, registry, (), fields)
    return fields


def _collect_fields(data: Any, schema: Dict[str, Any], registry: SchemaRegistry,
                    prefix: Tuple[Segment, ...], out: List[Dict[str, str]]) -> None:
    if not isinstance(data, dict):
        return
    for name, attr in schema.get("attributes", {}).items():
        if name not in data or data[name] is None:
            continue
        if not is_localized_attribute(attr):
            continue
        value = data[name]
        path = prefix + (name,)
        kind = attr.get("type")

        if kind == "component":
            component = registry.get_component(attr["component"])
            if attr.get("repeatable"):
                for index, item in enumerate(value or []):
                    _collect_fields(item, component, registry, path + (index,), out)
            else:
                _collect_fields(value, component, registry, path, out)
        elif kind == "dynamiczone":
            for index, item in enumerate(value or []):
                component = registry.get_component(item["__component"])
                _collect_fields(item, component, registry, path + (index,), out)
        else:
            fmt = attribute_format(attr)
            if fmt is None or attr.get("translate", "translate") != "translate":
                continue
            out.append({"field": format_path(path), "format": fmt})


# ============================================================================
# Field deletion / cleaning
# ============================================================================

def _walk_components(data: Dict[str, Any], schema: Dict[str, Any], registry: SchemaRegistry,
                     transform) -> Dict[str, Any]:
    """Apply ``transform(item, component_schema)`` to every nested component."""
    result = dict(data)
    for name, attr in schema.get("attributes", {}).items():
        value = result.get(name)
        if value is None:
            continue
        kind = attr.get("type")
        if kind == "component":
            component = registry.get_component(attr["component"])
            if attr.get("repeatable"):
                result[name] = [transform(item, component) for item in value]
            else:
                result[name] = transform(value, component)
        elif kind == "dynamiczone":
            result[name] = [
                transform(item, registry.get_component(item["__component"])) for item in value
            ]
    return result


def filter_deleted_fields(data: Dict[str, Any], schema: Dict[str, Any],
                          registry: SchemaRegistry) -> Dict[str, Any]:
    """Drop attributes marked ``translate: delete`` at any depth."""
    result = _walk_components(
        data, schema, registry,
        lambda item, component: filter_deleted_fields(item, component, registry),
    )
    for name, attr in schema.get("attributes", {}).items():
        if attr.get("translate") == "delete":
            result.pop(name, None)
    return result


def clean_data(data: Dict[str, Any], schema: Dict[str, Any],
               registry: SchemaRegistry) -> Dict[str, Any]:
    """Keep only attributes the schema knows about; drop component ids."""
    attributes = schema.get("attributes", {})
    cleaned = {k: v for k, v in data.items() if k in attributes}
    cleaned = _walk_components(cleaned, schema, registry, lambda item, component: _clean_component(item, component, registry))
    for name, attr in attributes.items():
        if attr.get("type") == "relation" and name in cleaned:
            cleaned[name] = _relation_ids(cleaned[name])
    return cleaned


def _clean_component(item: Dict[str, Any], component: Dict[str, Any],
                     registry: SchemaRegistry) -> Dict[str, Any]:
    cleaned = clean_data(item, component, registry)
    if "__component" in item:
        cleaned["__component"] = item["__component"]
    return cleaned


def _relation_ids(value: Any) -> Any:
    if isinstance(value, list):
        return [_relation_id(v) for v in value]
    return _relation_id(value)


def _relation_id(value: Any) -> Any:
    if isinstance(value, dict):
        return value.get("id")
    return value


# ============================================================================
# Non-localized attributes
# ============================================================================

def non_localized_attribute_names(schema: Dict[str, Any]) -> List[str]:
    return [
        name for name, attr in schema.get("attributes", {}).items()
        if not is_localized_attribute(attr)
    ]


def copy_non_localized_attributes(entry: Dict[str, Any], schema: Dict[str, Any],
                                  registry: SchemaRegistry) -> Dict[str, Any]:
    """Values every sibling must share with ``entry``, component ids removed."""
    names = non_localized_attribute_names(schema)
    picked = {name: copy.deepcopy(entry[name]) for name in names if name in entry}
    picked_schema = {"attributes": {n: schema["attributes"][n] for n in picked}}
    return _walk_components(
        picked, picked_schema, registry,
        lambda item, component: _clean_component(item, component, registry),
    )


# ============================================================================
# Relations
# ============================================================================

async def translate_relations(data: Dict[str, Any], schema: Dict[str, Any],
                              target_locale: str, store: Any,
                              registry: SchemaRegistry) -> Dict[str, Any]:
    """
    Point relations at their ``target_locale`` counterparts.

    Relations to localized types are replaced by the related entry's
    localization in the target locale, or dropped when there is none.
    Relations to non-localized types are kept, except exclusive ones
    (oneToOne / oneToMany) which would be taken away from the source entry.
    """
    result = dict(data)
    for name, attr in schema.get("attributes", {}).items():
        if name not in result or result[name] is None:
            continue
        kind = attr.get("type")
        if kind == "relation":
            result[name] = await _translate_relation(result[name], attr, target_locale, store, registry)
        elif kind == "component":
            component = registry.get_component(attr["component"])
            if attr.get("repeatable"):
                result[name] = [
                    await translate_relations(item, component, target_locale, store, registry)
                    for item in result[name]
                ]
            else:
                result[name] = await translate_relations(result[name], component, target_locale, store, registry)
        elif kind == "dynamiczone":
            result[name] = [
                await translate_relations(item, registry.get_component(item["__component"]),
                                          target_locale, store, registry)
                for item in result[name]
            ]
    return result


async def _translate_relation(value: Any, attr: Dict[str, Any], target_locale: str,
                              store: Any, registry: SchemaRegistry) -> Any:
    target_uid = attr.get("target")
    many = isinstance(value, list)
    refs = value if many else [value]

    if not registry.is_localized(target_uid):
        if attr.get("relation") in EXCLUSIVE_RELATIONS and (attr.get("inversedBy") or attr.get("mappedBy")):
            return [] if many else None
        return value

    mapped = []
    for ref in refs:
        related = await _related_in_locale(_relation_id(ref), target_uid, target_locale, store)
        if related is not None:
            mapped.append({"id": related} if isinstance(ref, dict) else related)
    if many:
        return mapped
    return mapped[0] if mapped else None


async def _related_in_locale(related_id: Any, target_uid: str, target_locale: str,
                             store: Any) -> Optional[Any]:
    related = await store.find_one(target_uid, related_id, populate=["localizations"])
    if related is None:
        return None
    if related.get("locale") == target_locale:
        return related["id"]
    for loc in related.get("localizations") or []:
        if loc.get("locale") == target_locale:
            return loc["id"]
    logger.debug("No %s localization of %s#%s, dropping relation", target_locale, target_uid, related_id)
    return None


# ============================================================================
# UIDs
# ============================================================================

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    normalized = unicodedata.normalize("NFKD", str(value)).encode("ascii", "ignore").decode("ascii")
    return _NON_SLUG.sub("-", normalized.lower()).strip("-")


def uid_attribute_names(schema: Dict[str, Any]) -> List[str]:
    return [name for name, attr in schema.get("attributes", {}).items() if attr.get("type") == "uid"]


async def update_uids(data: Dict[str, Any], schema: Dict[str, Any], content_type_uid: str,
                      store: Any, regenerate: bool,
                      exclude_id: Optional[Any] = None) -> Dict[str, Any]:
    """Regenerate unique uid attributes, or strip them when ``regenerate`` is off."""
    result = dict(data)
    for name in uid_attribute_names(schema):
        if not regenerate:
            result.pop(name, None)
            continue
        attr = schema["attributes"][name]
        source = result.get(attr.get("targetField") or "") or result.get(name)
        base = slugify(source) if source else ""
        if not base:
            result.pop(name, None)
            continue
        result[name] = await unique_uid(store, content_type_uid, name, base, exclude_id)
    return result


async def unique_uid(store: Any, content_type_uid: str, field: str, base: str,
                     exclude_id: Optional[Any] = None) -> str:
    candidate = base
    suffix = 0
    while await store.exists(content_type_uid, field, candidate, exclude_id=exclude_id):
        suffix += 1
        candidate = f"{base}-{suffix}"
    return candidate


def top_level_keys(fields: Iterable[Dict[str, Any]]) -> List[Segment]:
    keys: List[Segment] = []
    for f in fields:
        key = top_level_key(f.get("field") or f["path"])
        if key not in keys:
            keys.append(key)
    return keys
