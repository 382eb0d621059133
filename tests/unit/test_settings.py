import logging

import pytest

from feuille.settings import DEFAULT_SCANNER_EXCLUDE, Settings


def test_defaults():
    settings = Settings()
    assert settings.scanner_depth == 30
    assert settings.scanner_exclude == DEFAULT_SCANNER_EXCLUDE
    assert settings.scanner_limit == 1000
    assert settings.scan_imported_files is True
    assert settings.show_errors is False


def test_defaults_are_not_shared():
    first = Settings()
    first.scanner_exclude.append("**/vendor")
    assert Settings().scanner_exclude == DEFAULT_SCANNER_EXCLUDE


def test_from_camel_case_section():
    settings = Settings.from_dict(
        {"scss": {"scannerDepth": 2, "scanImportedFiles": False, "logLevel": "debug"}}
    )
    assert settings.scanner_depth == 2
    assert settings.scan_imported_files is False
    assert settings.log_level == "debug"


def test_from_top_level_snake_case():
    settings = Settings.from_dict({"scanner_limit": 3})
    assert settings.scanner_limit == 3


def test_unknown_keys_are_ignored():
    settings = Settings.from_dict({"scannerLimit": 7, "suggestMixins": True})
    assert settings.scanner_limit == 7
    assert not hasattr(settings, "suggest_mixins")


def test_missing_payload_gives_defaults():
    assert Settings.from_dict(None) == Settings()
    assert Settings.from_dict({"scss": "nope"}) == Settings()


def test_string_values_are_converted():
    settings = Settings.from_dict(
        {
            "scannerDepth": "3",
            "scannerLimit": "50",
            "showErrors": "true",
            "scanImportedFiles": "False",
            "scannerExclude": "**/vendor",
        }
    )
    assert settings.scanner_depth == 3
    assert settings.scanner_limit == 50
    assert settings.show_errors is True
    assert settings.scan_imported_files is False
    assert settings.scanner_exclude == ["**/vendor"]


@pytest.mark.parametrize(
    "key, value, attribute",
    [
        ("scannerDepth", "deep", "scanner_depth"),
        ("scannerLimit", True, "scanner_limit"),
        ("scannerLimit", None, "scanner_limit"),
        ("showErrors", "sometimes", "show_errors"),
        ("scannerExclude", 4, "scanner_exclude"),
    ],
)
def test_invalid_values_keep_default(caplog, key, value, attribute):
    with caplog.at_level(logging.WARNING, logger="feuille"):
        settings = Settings.from_dict({key: value})
    assert getattr(settings, attribute) == getattr(Settings(), attribute)
    assert f"Ignoring invalid value for {key}" in caplog.text


def test_invalid_value_does_not_drop_other_settings():
    settings = Settings.from_dict({"scannerDepth": "deep", "scannerLimit": 9})
    assert settings.scanner_depth == 30
    assert settings.scanner_limit == 9
