"""Carrier-agnostic shipment tracking for Bring and GLS."""

from .config import BringSettings, GLSSettings, TrackerSettings, load_settings
from .data_providers import (
    AiohttpDataProvider,
    RequestOptions,
    RequestsDataProvider,
    TransportError,
    get_data_provider,
)
from .exceptions import CarrierError, DecodeError, FetchError, TrackerError, UnknownCarrierError
from .models import Event, Track, TrackStatus
from .trackers import get_carrier_names, get_tracker

__version__ = "0.1.0"


def get(carrier, data_provider=None, settings=None):
    """Return a ready-to-use tracker for ``carrier``, e.g. ``get("gls").track(number)``."""
    return get_tracker(carrier, data_provider=data_provider, settings=settings)


__all__ = [
    "AiohttpDataProvider",
    "BringSettings",
    "CarrierError",
    "DecodeError",
    "Event",
    "FetchError",
    "GLSSettings",
    "RequestOptions",
    "RequestsDataProvider",
    "Track",
    "TrackStatus",
    "TrackerError",
    "TrackerSettings",
    "TransportError",
    "UnknownCarrierError",
    "get",
    "get_carrier_names",
    "get_data_provider",
    "get_tracker",
    "load_settings",
]
