"""Transports used by the trackers to reach carrier endpoints.

A tracker only needs ``fetch(url, options) -> str``. Anything a transport
raises must be a :class:`TransportError` so the tracker can tell "could not
talk to the carrier" apart from "the carrier sent garbage".
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Protocol, Union

import aiohttp
import requests

from .const import DEFAULT_TIMEOUT

_LOGGER = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised by a data provider when the request did not succeed."""


@dataclass
class RequestOptions:
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None


class DataProvider(Protocol):
    def fetch(self, url: str, options: RequestOptions) -> str: ...


class AsyncDataProvider(Protocol):
    async def fetch(self, url: str, options: RequestOptions) -> str: ...


class RequestsDataProvider:
    """Blocking transport on top of a ``requests.Session``."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, url: str, options: RequestOptions) -> str:
        timeout = options.timeout or self.timeout
        try:
            r = self.session.get(url, headers=options.headers, timeout=timeout)
            r.raise_for_status()
        except requests.RequestException as err:
            _LOGGER.debug("GET %s failed: %s", url, err)
            raise TransportError(str(err)) from err
        return r.text


class AiohttpDataProvider:
    """Non-blocking transport on top of an ``aiohttp.ClientSession``.

    The session is created lazily and only closed by :meth:`close` when this
    provider created it.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, timeout: float = 30) -> None:
        self._session = session
        self._owns_session = session is None
        self.timeout = timeout

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def fetch(self, url: str, options: RequestOptions) -> str:
        timeout = aiohttp.ClientTimeout(total=options.timeout or self.timeout)
        try:
            async with self.session.get(url, headers=options.headers, timeout=timeout) as resp:
                txt = await resp.text(errors="replace")
                if resp.status != 200:
                    raise TransportError(f"HTTP {resp.status}: {txt[:200]}")
                return txt
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            _LOGGER.debug("GET %s failed: %r", url, err)
            raise TransportError(str(err) or type(err).__name__) from err

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None


_PROVIDERS: Dict[str, Callable[[], Union[DataProvider, AsyncDataProvider]]] = {
    "requests": RequestsDataProvider,
    "aiohttp": AiohttpDataProvider,
}


def get_data_provider(name: str = "requests") -> Union[DataProvider, AsyncDataProvider]:
    try:
        factory = _PROVIDERS[name]
    except KeyError:
        raise ValueError(f"Unknown data provider: {name}") from None
    return factory()


def get_provider_names() -> list[str]:
    return sorted(_PROVIDERS.keys())
