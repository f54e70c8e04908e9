from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from formrelay.core.config import Settings
from formrelay.core.forms import load_forms_catalog
from formrelay.models.form_config import FormConfig, FormsCatalog, form_key_from_path


def _settings(**overrides) -> Settings:
    values = {
        "mailgun_api_key": "key-test",
        "mailgun_domain": "mg.example.com",
        "notify_to": None,
        "from_email": None,
        "thank_you_url": None,
        "forms_config": None,
        "forms_config_path": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/quote/submit", "quote"),
        ("/quote/submit/", "quote"),
        ("//quote//submit", "quote"),
        ("/submit", None),
        ("/", None),
        ("/quote", None),
        ("/quote/send", None),
        ("/Quote/submit", "Quote"),
    ],
)
def test_form_key_from_path(path: str, expected: str | None) -> None:
    assert form_key_from_path(path) == expected


def test_catalog_lookup_is_exact_and_case_sensitive() -> None:
    catalog = FormsCatalog.model_validate(
        {"forms": {"quote": {"notifyTo": ["sales@example.com"]}}}
    )
    assert catalog.resolve("/quote/submit") is not None
    assert catalog.resolve("/Quote/submit") is None
    assert catalog.resolve("/unknown/submit") is None
    assert catalog.resolve("/submit") is None


def test_form_config_defaults() -> None:
    config = FormConfig.model_validate({"notifyTo": ["a@example.com"]})
    assert config.enabled is True
    assert config.from_email is None
    assert config.thank_you_url is None


def test_form_config_requires_recipients() -> None:
    with pytest.raises(ValidationError):
        FormConfig.model_validate({"name": "Empty", "notifyTo": []})


def test_addresses_keep_display_names() -> None:
    config = FormConfig.model_validate(
        {
            "notifyTo": ["Sales <sales@example.com>", "ops@example.com"],
            "fromEmail": "Website Forms <forms@mg.example.com>",
        }
    )
    assert config.notify_to == ["Sales <sales@example.com>", "ops@example.com"]
    assert config.from_email == "Website Forms <forms@mg.example.com>"


@pytest.mark.parametrize("field", ["notifyTo", "fromEmail"])
def test_invalid_addresses_are_rejected(field: str) -> None:
    raw = {"notifyTo": ["sales@example.com"]}
    raw[field] = ["not-an-address"] if field == "notifyTo" else "not-an-address"
    with pytest.raises(ValidationError):
        FormConfig.model_validate(raw)


def test_catalog_falls_back_to_environment_defaults() -> None:
    catalog = load_forms_catalog(
        _settings(notify_to="a@example.com, b@example.com", from_email="forms@example.com")
    )
    assert catalog.forms == {}
    assert catalog.defaults.default_notify_to == ["a@example.com", "b@example.com"]
    assert catalog.defaults.default_from_email == "forms@example.com"
    assert catalog.defaults.default_thank_you_url is None


def test_catalog_defaults_win_over_environment() -> None:
    raw = {
        "defaults": {
            "defaultNotifyTo": ["file@example.com"],
            "defaultThankYouUrl": "/done",
        },
        "forms": {"quote": {"name": "Quote", "notifyTo": ["sales@example.com"]}},
    }
    catalog = load_forms_catalog(
        _settings(
            forms_config=json.dumps(raw),
            notify_to="env@example.com",
            from_email="env-forms@example.com",
            thank_you_url="/env-done",
        )
    )
    assert catalog.defaults.default_notify_to == ["file@example.com"]
    assert catalog.defaults.default_from_email == "env-forms@example.com"
    assert catalog.defaults.default_thank_you_url == "/done"
    assert catalog.forms["quote"].name == "Quote"


def test_catalog_loads_from_file(tmp_path) -> None:
    path = tmp_path / "forms.json"
    path.write_text(
        json.dumps({"forms": {"careers": {"notifyTo": ["hr@example.com"], "enabled": False}}}),
        encoding="utf-8",
    )
    catalog = load_forms_catalog(_settings(forms_config_path=path))
    assert catalog.forms["careers"].enabled is False
    assert catalog.forms["careers"].notify_to == ["hr@example.com"]


def test_inline_catalog_wins_over_file(tmp_path) -> None:
    path = tmp_path / "forms.json"
    path.write_text(json.dumps({"forms": {"from-file": {"notifyTo": ["a@example.com"]}}}))
    inline = json.dumps({"forms": {"inline": {"notifyTo": ["b@example.com"]}}})

    catalog = load_forms_catalog(_settings(forms_config_path=path, forms_config=inline))

    assert set(catalog.forms) == {"inline"}


def test_invalid_catalog_json_fails_loudly() -> None:
    with pytest.raises(ValidationError):
        load_forms_catalog(_settings(forms_config="{not json"))


def test_settings_split_default_recipients() -> None:
    assert _settings(notify_to=" a@example.com ,,b@example.com ").default_recipients == [
        "a@example.com",
        "b@example.com",
    ]
    assert _settings(notify_to=None).default_recipients == []
