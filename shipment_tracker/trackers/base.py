from __future__ import annotations

import asyncio
import functools
import inspect
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone, tzinfo
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode

from ..config import TrackerSettings
from ..data_providers import (
    AsyncDataProvider,
    DataProvider,
    RequestOptions,
    RequestsDataProvider,
    TransportError,
)
from ..exceptions import DecodeError, FetchError
from ..models import Track

_LOGGER = logging.getLogger(__name__)

Params = Optional[Mapping[str, Any]]

_FALLBACK_FORMATS = (
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y %H:%M",
    "%d.%m.%Y",
)


def parse_timestamp(value: str, tz: tzinfo = timezone.utc) -> datetime:
    """Parse a carrier date string into an aware datetime.

    Naive values are interpreted in ``tz``. Raises ``ValueError`` when no
    known format matches.
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("empty timestamp")
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        for fmt in _FALLBACK_FORMATS:
            try:
                dt = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue
        else:
            raise ValueError(f"unrecognized timestamp: {value!r}") from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return dt


class AbstractTracker(ABC):
    """Shared request and URL handling for all carriers.

    Subclasses set the class attributes below and implement
    :meth:`build_response`. Everything a tracker is configured with is fixed in
    ``__init__``; a single instance may serve concurrent ``track`` calls.
    """

    carrier: str = ""
    tracking_url_base: str = ""
    default_language: str = "en"
    # name of the query parameter carrying the parcel number
    query_param: str = "q"
    tracking_url_params: Mapping[str, Any] = MappingProxyType({})
    endpoint_url_params: Mapping[str, Any] = MappingProxyType({})

    def __init__(
        self,
        data_provider: Union[DataProvider, AsyncDataProvider, None] = None,
        settings: Optional[TrackerSettings] = None,
    ) -> None:
        self.settings = settings or TrackerSettings()
        self.data_provider = data_provider or RequestsDataProvider(timeout=self.settings.timeout)
        self.language = self.settings.language or self.default_language

    def __repr__(self) -> str:
        return f"<{type(self).__name__} language={self.language!r}>"

    # URLs

    def tracking_url(self, parcel_number: str, language: Optional[str] = None, params: Params = None) -> str:
        """Build the URL of the carrier's human-facing tracking page."""
        base = self.tracking_base_url(language or self.language)
        return self._build_url(base, parcel_number, params, self.tracking_url_params)

    def endpoint_url(self, parcel_number: str, language: Optional[str] = None, params: Params = None) -> str:
        """URL the tracking data is fetched from; the tracking page unless overridden."""
        return self.tracking_url(parcel_number, language, params)

    def tracking_base_url(self, language: str) -> str:
        return self.tracking_url_base

    def _build_url(self, base: str, parcel_number: str, params: Params, defaults: Mapping[str, Any]) -> str:
        # explicit params replace the defaults, parcel number included
        if params:
            query = dict(params)
        else:
            query = {self.query_param: parcel_number, **defaults}
        return f"{base}?{urlencode(query)}"

    # Pipeline

    def build_request(self) -> RequestOptions:
        return RequestOptions(
            headers={
                "Accept": "application/json",
                "User-Agent": self.settings.user_agent,
            },
            timeout=self.settings.timeout,
        )

    def track(self, parcel_number: str, language: Optional[str] = None, params: Params = None) -> Track:
        """Fetch, parse and normalize the tracking history of ``parcel_number``."""
        if self._is_async_provider():
            raise TypeError(f"{type(self.data_provider).__name__} is asynchronous, use async_track()")
        url = self.endpoint_url(parcel_number, language, params)
        raw = self.fetch(parcel_number, url)
        return self._finish(parcel_number, raw)

    async def async_track(
        self, parcel_number: str, language: Optional[str] = None, params: Params = None
    ) -> Track:
        """Same as :meth:`track` for use inside an event loop.

        Blocking providers are run in the default executor.
        """
        url = self.endpoint_url(parcel_number, language, params)
        raw = await self.async_fetch(parcel_number, url)
        return self._finish(parcel_number, raw)

    def fetch(self, parcel_number: str, url: str) -> str:
        _LOGGER.debug("Fetching %s data for %s from %s", self.carrier, parcel_number, url)
        try:
            return self.data_provider.fetch(url, self.build_request())
        except (TransportError, OSError) as err:
            raise FetchError(parcel_number) from err

    async def async_fetch(self, parcel_number: str, url: str) -> str:
        _LOGGER.debug("Fetching %s data for %s from %s", self.carrier, parcel_number, url)
        options = self.build_request()
        try:
            if self._is_async_provider():
                return await self.data_provider.fetch(url, options)
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(
                None, functools.partial(self.data_provider.fetch, url, options)
            )
        except (TransportError, OSError) as err:
            raise FetchError(parcel_number) from err

    def _is_async_provider(self) -> bool:
        return inspect.iscoroutinefunction(getattr(self.data_provider, "fetch", None))

    def _finish(self, parcel_number: str, raw: str) -> Track:
        track = self.build_response(parcel_number, raw).sort_events()
        _LOGGER.debug(
            "%s parcel %s: %d events, current status %s",
            self.carrier,
            parcel_number,
            len(track.events),
            track.current_status().value,
        )
        return track

    @abstractmethod
    def build_response(self, parcel_number: str, raw: str) -> Track:
        """Turn the raw carrier payload into a Track."""

    # Helpers for subclasses

    def decode_json(self, parcel_number: str, raw: str) -> Dict[str, Any]:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as err:
            _LOGGER.warning("Malformed %s payload for %s", self.carrier, parcel_number)
            raise DecodeError(parcel_number, raw, self.carrier) from err
        if not data or not isinstance(data, dict):
            _LOGGER.warning("Unexpected %s payload for %s", self.carrier, parcel_number)
            raise DecodeError(parcel_number, raw, self.carrier)
        return data
