# -*- coding: utf-8 -*-
"""Map internal locale codes to DeepL language codes.

DeepL accepts generic codes as source languages but requires a regional
variant for a few target languages (English, Portuguese, Chinese script).
"""

from typing import Dict, Optional

from .constants import SOURCE, TARGET
from .errors import InvalidRequest, UnsupportedLocale

GENERIC_LANGUAGES = frozenset({
    "AR", "BG", "CS", "DA", "DE", "EL", "ES", "ET", "FI", "FR", "HU", "ID",
    "IT", "JA", "KO", "LT", "LV", "NL", "PL", "RO", "RU", "SK", "SL", "SV",
    "TR", "UK",
})

TRADITIONAL_CHINESE = frozenset({"ZH-HANT", "ZH-TW", "ZH-HK", "ZH-MO"})


def parse_locale(locale: str,
                 locale_map: Optional[Dict[str, str]] = None,
                 direction: str = TARGET) -> str:
    """Resolve ``locale`` to the engine code for ``direction``.

    Overrides in ``locale_map`` take precedence; otherwise the code is derived
    from the language part. Raises UnsupportedLocale when nothing fits.
    """
    if direction not in (SOURCE, TARGET):
        raise InvalidRequest(f"Unknown locale direction: {direction!r}")
    if not locale:
        raise InvalidRequest("Locale must be defined")

    locale_map = locale_map or {}
    if locale in locale_map:
        return locale_map[locale]

    unstripped = locale.upper().replace("_", "-")
    stripped = unstripped.split("-")[0]

    if stripped in GENERIC_LANGUAGES:
        return stripped
    if stripped in ("NB", "NO"):
        return "NB"
    if stripped == "EN":
        if direction == SOURCE:
            return "EN"
        return "EN-GB" if unstripped == "EN-GB" else "EN-US"
    if stripped == "PT":
        if direction == SOURCE:
            return "PT"
        return "PT-PT" if unstripped == "PT-PT" else "PT-BR"
    if stripped == "ZH":
        if direction == SOURCE:
            return "ZH"
        traditional = any(
            unstripped == code or unstripped.startswith(code + "-")
            for code in TRADITIONAL_CHINESE
        )
        return "ZH-HANT" if traditional else "ZH-HANS"

    raise UnsupportedLocale(locale, direction)
