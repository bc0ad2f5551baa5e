from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from ..const import (
    CARRIER_GLS,
    GLS_ENDPOINT_URL,
    GLS_LANGUAGE,
    GLS_PROGRESS_DELIVERED,
    GLS_TRACKING_URLS,
)
from ..exceptions import CarrierError, DecodeError
from ..models import Event, Track, TrackStatus
from .base import AbstractTracker, Params, parse_timestamp

_LOGGER = logging.getLogger(__name__)

GLS_STATUSES: Mapping[TrackStatus, frozenset] = MappingProxyType({
    TrackStatus.DELIVERED: frozenset({
        "3.120",  # unconfirmed
        "3.121",
        "3.0",
    }),
    TrackStatus.IN_TRANSIT: frozenset({
        "0.0", "0.100", "1.0", "11.0", "2.0", "2.106",
        "2.29", "4.40", "90.132", "35.40", "8.0", "6.211",
    }),
    TrackStatus.PICKUP: frozenset({"2.124", "3.124"}),
    TrackStatus.EXCEPTION: frozenset(),
})

_EVENT_STATUS: Mapping[str, TrackStatus] = MappingProxyType({
    code: status for status, codes in GLS_STATUSES.items() for code in codes
})


def resolve_status(event_number: Any, progress_status: Optional[str]) -> TrackStatus:
    """Map a GLS event number to a canonical status.

    A delivered event only counts once the shipment's progress bar says
    DELIVERED as well; until then it is reported as in transit.
    """
    if event_number is None:
        return TrackStatus.UNKNOWN
    status = _EVENT_STATUS.get(str(event_number), TrackStatus.UNKNOWN)
    if status is TrackStatus.DELIVERED and progress_status != GLS_PROGRESS_DELIVERED:
        return TrackStatus.IN_TRANSIT
    return status


class GLS(AbstractTracker):
    carrier = CARRIER_GLS
    tracking_urls: Mapping[str, str] = MappingProxyType(GLS_TRACKING_URLS)
    default_language = GLS_LANGUAGE
    query_param = "match"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.tz = ZoneInfo(self.settings.gls.timezone)

    def tracking_base_url(self, language: str) -> str:
        return (
            self.tracking_urls.get(language)
            or self.tracking_urls.get(self.language)
            or self.tracking_urls[self.default_language]
        )

    def endpoint_url(self, parcel_number: str, language: Optional[str] = None, params: Params = None) -> str:
        base = GLS_ENDPOINT_URL.format(
            country=self.settings.gls.country,
            language=language or self.language,
        )
        return self._build_url(base, parcel_number, params, self.endpoint_url_params)

    def build_response(self, parcel_number: str, raw: str) -> Track:
        data = self.decode_json(parcel_number, raw)

        text = data.get("exceptionText")
        if text is not None:
            _LOGGER.warning("GLS rejected %s: %s", parcel_number, text)
            raise CarrierError(parcel_number, str(text))

        try:
            return self._build_track(data["tuStatus"][0])
        except (KeyError, IndexError, TypeError, AttributeError, ValueError, ValidationError) as err:
            raise DecodeError(parcel_number, raw, self.carrier) from err

    def _build_track(self, status: Dict[str, Any]) -> Track:
        history = status["history"]
        progress = status["progressBar"]
        event_numbers = progress["evtNos"]
        progress_status = progress.get("statusInfo")
        if len(event_numbers) < len(history):
            raise ValueError("progressBar.evtNos shorter than history")

        track = Track()
        for index, item in enumerate(history):
            event_number = event_numbers[index]
            event_status = resolve_status(event_number, progress_status)

            track.add_event(Event(
                status=event_status,
                location=self._location(item),
                description=item.get("evtDscr") or "",
                timestamp=parse_timestamp(f"{item['date']} {item['time']}", self.tz),
                additional_details={"eventNumber": event_number},
            ))

            if event_status is TrackStatus.DELIVERED:
                recipient = self._recipient(status)
                if recipient:
                    track.set_recipient(recipient)

            if event_status is TrackStatus.PICKUP:
                track.add_additional_details("parcelShop", self._parcel_shop(status))

        return track

    @staticmethod
    def _location(item: Dict[str, Any]) -> str:
        address = item.get("address") or {}
        parts = [address.get("city"), address.get("countryName")]
        return ", ".join(p for p in parts if p)

    @staticmethod
    def _recipient(status: Dict[str, Any]) -> Optional[str]:
        signature = status.get("signature") or {}
        return signature.get("value")

    @staticmethod
    def _parcel_shop(status: Dict[str, Any]) -> Dict[str, Any]:
        shop = status.get("parcelShop") or {}
        return shop.get("address") or {}
