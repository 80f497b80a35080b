#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Tests for locale -> engine code resolution."""

import pytest

from content_translate.constants import SOURCE, TARGET
from content_translate.errors import InvalidRequest, UnsupportedLocale
from content_translate.locales import parse_locale


class TestParseLocale:

    @pytest.mark.parametrize("locale,direction,expected", [
        ("de", TARGET, "DE"),
        ("de-AT", TARGET, "DE"),
        ("de_CH", SOURCE, "DE"),
        ("fr", SOURCE, "FR"),
        ("nb-NO", TARGET, "NB"),
        ("no", SOURCE, "NB"),
        ("en", SOURCE, "EN"),
        ("en-GB", SOURCE, "EN"),
        ("en", TARGET, "EN-US"),
        ("en-GB", TARGET, "EN-GB"),
        ("en-US", TARGET, "EN-US"),
        ("pt", SOURCE, "PT"),
        ("pt", TARGET, "PT-BR"),
        ("pt-PT", TARGET, "PT-PT"),
        ("zh", SOURCE, "ZH"),
        ("zh", TARGET, "ZH-HANS"),
        ("zh-CN", TARGET, "ZH-HANS"),
        ("zh-Hant", TARGET, "ZH-HANT"),
        ("zh-TW", TARGET, "ZH-HANT"),
        ("zh-Hant-HK", TARGET, "ZH-HANT"),
    ])
    def test_01_derived_codes(self, locale, direction, expected):
        assert parse_locale(locale, direction=direction) == expected

    def test_02_override_wins(self):
        """An explicit mapping is used for both directions, before derivation."""
        mapping = {"en": "EN-GB", "x-klingon": "DE"}
        assert parse_locale("en", mapping, TARGET) == "EN-GB"
        assert parse_locale("en", mapping, SOURCE) == "EN-GB"
        assert parse_locale("x-klingon", mapping, TARGET) == "DE"

    def test_03_unsupported(self):
        with pytest.raises(UnsupportedLocale) as exc_info:
            parse_locale("xx-YY", direction=TARGET)
        assert exc_info.value.kind == "locale"
        assert exc_info.value.retryable is False
        assert exc_info.value.locale == "xx-YY"

    def test_04_bad_direction(self):
        with pytest.raises(InvalidRequest):
            parse_locale("de", direction="sideways")

    def test_05_empty_locale(self):
        with pytest.raises(InvalidRequest):
            parse_locale("", direction=SOURCE)
