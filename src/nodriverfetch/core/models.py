"""lightweight data containers passed between the fetcher and its strategies."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FetchRequest:
    """one fetch_resource() call's input."""
    url: str


@dataclass(frozen=True)
class FetchResult:
    """bytes of a fully read resource.

    only ever built from complete contents; partial reads raise instead.

    :param url: requested url.
    :param contents: raw resource bytes.
    :param status: reported http status when the strategy knows it.
    """
    url: str
    contents: bytes = field(repr=False)
    status: int | None = None

    def text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        return self.contents.decode(encoding, errors)


@dataclass(frozen=True)
class Frame:
    """top-level frame a resource load is scoped to."""
    id: str
    url: str | None = None


@dataclass(frozen=True)
class FetcherConfig:
    """tunables for `ResourceFetcher` and its stock strategies.

    attributes:
    - protocol_min_milestone: first chrome milestone that gets `Network.loadNetworkResource`
    - timeout: seconds for a whole `fetch_resource()` call (`None` = no limit)
    - iframe_timeout: seconds the iframe strategy waits for the paused response
    - disable_cache: bypass the http cache when loading over the protocol
    - include_credentials: send cookies with protocol loads
    - ok_status_codes: statuses accepted as a successful load
    """
    protocol_min_milestone: int = 88
    timeout: float | None = None
    iframe_timeout: float = 2.0
    disable_cache: bool = True
    include_credentials: bool = True
    ok_status_codes: frozenset[int] = frozenset({200})


__all__ = [
    "FetchRequest",
    "FetchResult",
    "Frame",
    "FetcherConfig",
]
