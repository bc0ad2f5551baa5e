"""Carrier registry.

Maps a carrier name to its tracker class so callers can pick a tracker from
configuration.
"""
from __future__ import annotations

from typing import Dict, Optional, Type

from ..config import TrackerSettings
from ..const import CARRIER_BRING, CARRIER_GLS
from ..exceptions import UnknownCarrierError
from .base import AbstractTracker
from .bring import Bring
from .gls import GLS

REGISTRY: Dict[str, Type[AbstractTracker]] = {
    CARRIER_BRING: Bring,
    CARRIER_GLS: GLS,
}


def get_tracker(
    carrier: str,
    data_provider=None,
    settings: Optional[TrackerSettings] = None,
) -> AbstractTracker:
    try:
        cls = REGISTRY[(carrier or "").lower().strip()]
    except KeyError:
        raise UnknownCarrierError(carrier) from None
    return cls(data_provider=data_provider, settings=settings)


def get_carrier_names() -> list[str]:
    return sorted(REGISTRY.keys())


__all__ = ["AbstractTracker", "Bring", "GLS", "REGISTRY", "get_tracker", "get_carrier_names"]
