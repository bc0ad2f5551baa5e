"""Errors raised while tracking a parcel.

Every error names the parcel number it was raised for so callers polling
several parcels can tell them apart. Transport details are never part of the
message; the underlying exception stays reachable through ``__cause__``.
"""

from __future__ import annotations

from typing import Optional

from .const import RAW_EXCERPT_LENGTH


class TrackerError(Exception):
    """Base class for all tracking failures."""

    def __init__(self, message: str, parcel_number: Optional[str] = None) -> None:
        super().__init__(message)
        self.parcel_number = parcel_number


class FetchError(TrackerError):
    """The carrier endpoint could not be reached."""

    def __init__(self, parcel_number: str) -> None:
        super().__init__(f"Could not fetch tracking data for [{parcel_number}].", parcel_number)


class DecodeError(TrackerError):
    """The carrier answered with something that is not the expected JSON."""

    def __init__(self, parcel_number: str, raw: str, carrier: str = "") -> None:
        self.raw = (raw or "")[:RAW_EXCERPT_LENGTH]
        label = f"{carrier} " if carrier else ""
        super().__init__(
            f"Unable to decode {label}response [{self.raw}] for [{parcel_number}].",
            parcel_number,
        )


class CarrierError(TrackerError):
    """The carrier rejected the query, e.g. for an unknown parcel number."""

    def __init__(self, parcel_number: str, text: str) -> None:
        self.text = text
        super().__init__(
            f"Unable to retrieve tracking data for [{parcel_number}]: {text}",
            parcel_number,
        )


class UnknownCarrierError(TrackerError):
    def __init__(self, carrier: str) -> None:
        self.carrier = carrier
        super().__init__(f"Unknown carrier: {carrier}")
