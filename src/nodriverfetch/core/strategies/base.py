from __future__ import annotations

import enum

from ..models import FetchRequest, FetchResult
from ..session import Session

# first chrome milestone where Network.loadNetworkResource is reliable for us
PROTOCOL_MIN_MILESTONE = 88


class FetchStrategyKind(enum.Enum):
    """the two ways a resource can be fetched."""
    PROTOCOL = "protocol"
    IFRAME = "iframe"


def select_strategy(milestone: int, threshold: int = PROTOCOL_MIN_MILESTONE) -> FetchStrategyKind:
    """pick a strategy from the browser milestone alone.

    :param milestone: major version of the running browser.
    :param threshold: first milestone that gets the protocol strategy.
    """
    if milestone >= threshold:
        return FetchStrategyKind.PROTOCOL
    return FetchStrategyKind.IFRAME


class FetchStrategy:
    """base class for a fetch strategy used by `ResourceFetcher`.

    override `fetch()`. implementations return a `FetchResult` built from the
    complete contents or raise a `FetchError`; they must never return partial
    bytes.
    """

    kind: FetchStrategyKind

    async def fetch(self, session: Session, request: FetchRequest) -> FetchResult:
        """
        fetch `request.url` through `session`

        :param session: session the fetch runs against.
        :param request: what to fetch.
        """
        raise NotImplementedError


__all__ = [
    "PROTOCOL_MIN_MILESTONE",
    "FetchStrategyKind",
    "FetchStrategy",
    "select_strategy",
]
