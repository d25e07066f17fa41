"""gatherer lifecycle shim for the audit layer that drives `ResourceFetcher`.

a `Gatherer` exposes two hook sets with no-op defaults:
- modern: `start_instrumentation`, `start_sensitive_instrumentation`,
  `stop_sensitive_instrumentation`, `stop_instrumentation`, `collect_artifact`
- legacy: `before_pass`, `pass_`, `after_pass`, which delegate to the modern hooks

subclasses override only the hooks they need.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import urljoin

from .errors import FetchError
from .fetcher import ResourceFetcher
from .models import FetchResult
from .session import Session

logger = logging.getLogger("nodriverfetch.Gatherer")


@dataclass
class GathererMeta:
    """which gather modes ("navigation", "timespan", "snapshot") a gatherer supports."""
    supported_modes: list[str] = field(default_factory=list)


@dataclass
class GatherContext:
    """what a gatherer hook gets to work with.

    attributes:
    - session: session the pass runs against
    - fetcher: fetcher bound to `session`
    - url: url of the page being gathered (base for relative urls)
    - gather_mode: "navigation", "timespan" or "snapshot"
    """
    session: Session
    fetcher: ResourceFetcher
    url: str | None = None
    gather_mode: str = "navigation"


class Gatherer:
    """base class for a gatherer.

    override methods to hook different points of a gather pass.

    hooks:
    - start_instrumentation
    - start_sensitive_instrumentation
    - stop_sensitive_instrumentation
    - stop_instrumentation
    - collect_artifact
    """

    meta: GathererMeta

    def __init__(self):
        self.meta = GathererMeta()

    @property
    def name(self) -> str:
        return type(self).__name__

    def supports(self, context: GatherContext) -> bool:
        """whether this gatherer supports `context.gather_mode`."""
        return context.gather_mode in self.meta.supported_modes

    async def start_instrumentation(self, context: GatherContext):
        pass

    async def start_sensitive_instrumentation(self, context: GatherContext):
        pass

    async def stop_sensitive_instrumentation(self, context: GatherContext):
        pass

    async def stop_instrumentation(self, context: GatherContext):
        pass

    async def collect_artifact(self, context: GatherContext):
        """
        produce this gatherer's artifact

        :param context: the current `GatherContext`.
        :return: the artifact (`None` by default).
        """
        return None

    async def before_pass(self, context: GatherContext):
        await self.start_instrumentation(context)
        await self.start_sensitive_instrumentation(context)

    async def pass_(self, context: GatherContext):
        pass

    async def after_pass(self, context: GatherContext, load_data=None):
        """legacy hook: stop instrumentation (timespan gatherers only) then
        return `collect_artifact()`.

        :param context: the current `GatherContext`.
        :param load_data: page load data from the pass (unused by default).
        """
        if "timespan" in self.meta.supported_modes:
            await self.stop_sensitive_instrumentation(context)
            await self.stop_instrumentation(context)
        return await self.collect_artifact(context)


class ResourceGatherer(Gatherer):
    """fetch a fixed list of urls and report bytes (or the error) per url.

    the fetcher is enabled for the duration of `collect_artifact()` and left
    the way it was found afterwards. relative urls resolve against
    `context.url`. per-url failures are recorded in the artifact instead of
    aborting the pass. unsupported gather modes (snapshot) yield an empty
    artifact.

    :param urls: urls to fetch, in order.
    """

    def __init__(self, urls: list[str]):
        super().__init__()
        self.meta = GathererMeta(supported_modes=["timespan", "navigation"])
        self.urls = list(urls)

    async def collect_artifact(self, context: GatherContext) -> dict[str, FetchResult | FetchError]:
        if not self.supports(context):
            logger.warning("%s does not support %s mode, skipping", self.name, context.gather_mode)
            return {}
        urls = [urljoin(context.url, url) if context.url else url for url in self.urls]
        fetcher = context.fetcher
        was_enabled = fetcher.enabled
        fetcher.enable()
        artifact: dict[str, FetchResult | FetchError] = {}
        try:
            for url in dict.fromkeys(urls):
                try:
                    artifact[url] = await fetcher.fetch_resource(url)
                except FetchError as e:
                    logger.warning("failed to fetch %s: %s", url, e)
                    artifact[url] = e
        finally:
            if not was_enabled:
                fetcher.disable()
        logger.info("gathered %d/%d resources",
            sum(isinstance(v, FetchResult) for v in artifact.values()), len(artifact))
        return artifact


__all__ = [
    "Gatherer",
    "GathererMeta",
    "GatherContext",
    "ResourceGatherer",
]
