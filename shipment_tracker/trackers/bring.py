from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import ValidationError

from ..const import BRING_LANGUAGE, BRING_NOOP_STATUSES, BRING_TRACKING_URL, CARRIER_BRING
from ..data_providers import RequestOptions
from ..exceptions import CarrierError, DecodeError
from ..models import Event, Track, TrackStatus
from .base import AbstractTracker, parse_timestamp

_LOGGER = logging.getLogger(__name__)

BRING_STATUSES: Mapping[str, TrackStatus] = MappingProxyType({
    "PRE_NOTIFIED": TrackStatus.IN_TRANSIT,
    "IN_TRANSIT": TrackStatus.IN_TRANSIT,
    "TRANSPORT_TO_RECIPIENT": TrackStatus.IN_TRANSIT,
    "ATTEMPTED_DELIVERY": TrackStatus.IN_TRANSIT,
    "DELIVERED": TrackStatus.DELIVERED,
    "READY_FOR_PICKUP": TrackStatus.PICKUP,
})


def resolve_status(code: Any) -> TrackStatus:
    if not isinstance(code, str):
        return TrackStatus.UNKNOWN
    return BRING_STATUSES.get(code, TrackStatus.UNKNOWN)


class Bring(AbstractTracker):
    """Bring (Posten Norge) tracking API v2."""

    carrier = CARRIER_BRING
    tracking_url_base = BRING_TRACKING_URL
    default_language = BRING_LANGUAGE
    query_param = "q"

    def build_request(self) -> RequestOptions:
        options = super().build_request()
        bring = self.settings.bring
        options.headers["X-Mybring-API-Uid"] = bring.api_uid
        options.headers["X-Mybring-API-Key"] = bring.api_key
        if bring.client_url:
            options.headers["X-Bring-Client-URL"] = bring.client_url
        return options

    def build_response(self, parcel_number: str, raw: str) -> Track:
        data = self.decode_json(parcel_number, raw)
        try:
            consignment = data["consignmentSet"][0]
            error = consignment.get("error")
            if error:
                text = error.get("message") if isinstance(error, dict) else str(error)
                _LOGGER.warning("Bring rejected %s: %s", parcel_number, text)
                raise CarrierError(parcel_number, text or "unknown error")
            events = consignment["packageSet"][0]["eventSet"]
            return self._build_track(events)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError, ValidationError) as err:
            raise DecodeError(parcel_number, raw, self.carrier) from err

    def _build_track(self, events: list) -> Track:
        track = Track()
        for item in events:
            code = item["status"]
            if code in BRING_NOOP_STATUSES:
                continue
            track.add_event(Event(
                status=resolve_status(code),
                location=item.get("city") or "",
                description=item.get("description") or "",
                timestamp=parse_timestamp(item["dateIso"]),
                additional_details={"statusCode": code},
            ))
        return track
