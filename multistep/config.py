from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from multistep.errors import ConfigurationError


AJAX_WRAPPER_PREFIX = "ajax-wrapper-"

DEFAULT_FORM_ID = "contact_details_form"
DEFAULT_PAGE_TITLE = "Multistep form"
DEFAULT_LOG_LEVEL = "WARNING"

ENV_FORM_ID = "MULTISTEP_FORM_ID"
ENV_USE_AJAX = "MULTISTEP_USE_AJAX"
ENV_PAGE_TITLE = "MULTISTEP_PAGE_TITLE"
ENV_LOG_LEVEL = "MULTISTEP_LOG_LEVEL"

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


@dataclass(frozen=True)
class FormSettings:
    form_id: str = DEFAULT_FORM_ID
    use_ajax: bool = True
    page_title: str = DEFAULT_PAGE_TITLE
    log_level: str = DEFAULT_LOG_LEVEL


def build_wrapper_id(form_id: str, use_ajax: bool) -> str:
    if not form_id or not form_id.strip():
        raise ConfigurationError("form_id must not be empty.")
    base = form_id.strip().replace("_", "-")
    if use_ajax:
        return f"{AJAX_WRAPPER_PREFIX}{base}"
    return base


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}.")


def _parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"{ENV_LOG_LEVEL} is not a logging level: {raw!r}.")
    return level


def load_settings(env: Optional[Mapping[str, str]] = None) -> FormSettings:
    source = os.environ if env is None else env

    form_id = source.get(ENV_FORM_ID, DEFAULT_FORM_ID).strip()
    if not form_id:
        raise ConfigurationError(f"{ENV_FORM_ID} must not be empty.")

    use_ajax = True
    if ENV_USE_AJAX in source:
        use_ajax = _parse_bool(ENV_USE_AJAX, source[ENV_USE_AJAX])

    page_title = source.get(ENV_PAGE_TITLE, "").strip() or DEFAULT_PAGE_TITLE
    log_level = _parse_log_level(source.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL))

    return FormSettings(
        form_id=form_id,
        use_ajax=use_ajax,
        page_title=page_title,
        log_level=log_level,
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
