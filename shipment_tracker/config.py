from __future__ import annotations

import json
import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ValidationError

from .const import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, GLS_TIMEZONE

_LOGGER = logging.getLogger(__name__)


class BringSettings(BaseModel):
    api_uid: str = ""
    api_key: str = ""
    client_url: str = ""


class GLSSettings(BaseModel):
    timezone: str = GLS_TIMEZONE
    country: str = "DE"


class TrackerSettings(BaseModel):
    language: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    bring: BringSettings = BringSettings()
    gls: GLSSettings = GLSSettings()


# environment variable -> (section, field); section None means top level
ENV_OVERRIDES = {
    "SHIPMENT_TRACKER_LANGUAGE": (None, "language"),
    "SHIPMENT_TRACKER_TIMEOUT": (None, "timeout"),
    "BRING_API_UID": ("bring", "api_uid"),
    "BRING_API_KEY": ("bring", "api_key"),
    "BRING_CLIENT_URL": ("bring", "client_url"),
    "GLS_TIMEZONE": ("gls", "timezone"),
    "GLS_COUNTRY": ("gls", "country"),
}


def load_settings(
    path: Optional[str] = None, env: Optional[Mapping[str, str]] = None
) -> TrackerSettings:
    """Read settings from an options JSON file, then apply environment overrides.

    A missing file is not an error and yields the defaults.
    """
    env = os.environ if env is None else env
    opts: dict = {}
    if path and os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                opts = json.load(f)
        except (OSError, json.JSONDecodeError) as err:
            raise ValueError(f"Cannot read tracker options from {path}: {err}") from err
        if not isinstance(opts, dict):
            raise ValueError(f"Tracker options in {path} must be a JSON object")
    elif path:
        _LOGGER.debug("Options file %s not found, using defaults", path)

    for var, (section, field) in ENV_OVERRIDES.items():
        value = env.get(var)
        if not value:
            continue
        target = opts.setdefault(section, {}) if section else opts
        target[field] = value

    try:
        return TrackerSettings(**opts)
    except ValidationError as err:
        raise ValueError(f"Invalid tracker options: {err}") from err
