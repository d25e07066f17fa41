"""resource fetcher: grab a url's bytes through a running browser without
navigating the page.

picks one of two strategies per call from the browser milestone:
- chrome 88+: `ProtocolFetchStrategy` (`Network.loadNetworkResource` + `IO.read`)
- older: `IframeFetchStrategy` (hidden iframe + `Fetch.requestPaused`)

the milestone is asked for on every call so a restarted browser is picked up.
"""

from __future__ import annotations

import asyncio
import logging

import nodriver

from .errors import NotEnabledError
from .models import FetcherConfig, FetchRequest, FetchResult
from .session import Session
from .strategies import (
    FetchStrategy,
    FetchStrategyKind,
    IframeFetchStrategy,
    ProtocolFetchStrategy,
    select_strategy,
)
from .version import BrowserVersionProbe, VersionProbe

logger = logging.getLogger("nodriverfetch.ResourceFetcher")


class ResourceFetcher:
    """fetch resource bytes through a devtools session.

    lifecycle:
    1. `enable()`: open the gate (idempotent)
    - `fetch_resource()`: fetch a url, raising `NotEnabledError` while disabled
    2. `disable()`: close the gate again

    errors raised by the strategies reach the caller unchanged.

    :param session: session every fetch runs against (owned by the caller).
    :param version_probe: reports the browser milestone.
    :param config: tunables; defaults to `FetcherConfig()`.
    :param protocol_strategy: override the chrome 88+ strategy.
    :param iframe_strategy: override the pre-88 strategy.
    """

    session: Session
    version_probe: VersionProbe
    config: FetcherConfig
    strategies: dict[FetchStrategyKind, FetchStrategy]

    def __init__(self,
        session: Session,
        version_probe: VersionProbe,
        config: FetcherConfig | None = None,
        *,
        protocol_strategy: FetchStrategy | None = None,
        iframe_strategy: FetchStrategy | None = None,
    ):
        self.session = session
        self.version_probe = version_probe
        self.config = config or FetcherConfig()
        self.strategies = {
            FetchStrategyKind.PROTOCOL: protocol_strategy or ProtocolFetchStrategy(
                disable_cache=self.config.disable_cache,
                include_credentials=self.config.include_credentials,
                ok_status_codes=self.config.ok_status_codes,
            ),
            FetchStrategyKind.IFRAME: iframe_strategy or IframeFetchStrategy(
                timeout=self.config.iframe_timeout,
                ok_status_codes=self.config.ok_status_codes,
            ),
        }
        self._enabled = False

    @classmethod
    def from_tab(cls, tab: nodriver.Tab, config: FetcherConfig | None = None, **kwargs):
        """build a fetcher (session + `Browser.getVersion` probe) for `tab`."""
        session = Session(tab)
        return cls(session, BrowserVersionProbe(session), config, **kwargs)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self):
        if self._enabled:
            return
        self._enabled = True
        logger.info("fetcher enabled")

    def disable(self):
        if not self._enabled:
            return
        self._enabled = False
        logger.info("fetcher disabled")

    async def fetch_resource(self, url: str, *, timeout: float | None = None) -> FetchResult:
        """fetch `url` and return its bytes.

        :param url: resource to fetch.
        :param timeout: seconds for the whole call; falls back to `config.timeout`.
        `asyncio.TimeoutError` is raised as-is when it runs out.
        :return: the complete resource.
        :rtype: FetchResult
        :raises NotEnabledError: `enable()` hasn't been called.
        :raises FetchError: whatever the chosen strategy raised.
        """
        if not self._enabled:
            raise NotEnabledError()
        request = FetchRequest(url=url)
        timeout = timeout if timeout is not None else self.config.timeout
        if timeout is None:
            return await self._fetch(request)
        return await asyncio.wait_for(self._fetch(request), timeout=timeout)

    async def _fetch(self, request: FetchRequest) -> FetchResult:
        milestone = await self.version_probe.get_milestone()
        kind = select_strategy(milestone, self.config.protocol_min_milestone)
        logger.info("fetching %s with %s strategy (milestone=%d)", request.url, kind.value, milestone)
        return await self.strategies[kind].fetch(self.session, request)


__all__ = ["ResourceFetcher"]
