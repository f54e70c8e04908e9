"""Load-once form catalog built from settings."""

from __future__ import annotations

import logging
from functools import lru_cache

from formrelay.core.config import Settings, get_settings
from formrelay.models.form_config import DefaultsConfig, FormsCatalog

_LOGGER = logging.getLogger(__name__)


def load_forms_catalog(settings: Settings) -> FormsCatalog:
    """Parse the configured catalog JSON and fill unset defaults from the environment.

    ``FORMS_CONFIG`` wins over ``FORMS_CONFIG_PATH``; with neither set the
    catalog holds no named forms and only environment defaults.
    """
    if settings.forms_config:
        catalog = FormsCatalog.model_validate_json(settings.forms_config)
    elif settings.forms_config_path is not None:
        catalog = FormsCatalog.model_validate_json(
            settings.forms_config_path.read_text(encoding="utf-8")
        )
    else:
        catalog = FormsCatalog()

    loaded = catalog.defaults
    defaults = DefaultsConfig(
        default_notify_to=loaded.default_notify_to or settings.default_recipients,
        default_from_email=loaded.default_from_email or settings.from_email,
        default_thank_you_url=loaded.default_thank_you_url or settings.thank_you_url,
    )
    _LOGGER.info("Loaded form catalog", extra={"forms": sorted(catalog.forms)})
    return catalog.model_copy(update={"defaults": defaults})


@lru_cache
def get_forms_catalog() -> FormsCatalog:
    return load_forms_catalog(get_settings())
