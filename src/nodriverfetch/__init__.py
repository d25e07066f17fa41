from .core.fetcher import ResourceFetcher
from .core.session import Session, raw_command
from .core.version import VersionProbe, BrowserVersionProbe, parse_milestone
from .core.frames import resolve_active_frame
from .core.models import (
    FetchRequest,
    FetchResult,
    Frame,
    FetcherConfig,
)
from .core.errors import (
    FetchError,
    NotEnabledError,
    FrameUnresolvedError,
    ResourceLoadFailedError,
    TransportFailureError,
    FetchTimeoutError,
)
from .core.strategies import (
    PROTOCOL_MIN_MILESTONE,
    FetchStrategy,
    FetchStrategyKind,
    ProtocolFetchStrategy,
    IframeFetchStrategy,
    select_strategy,
)
from .core.gatherer import (
    Gatherer,
    GathererMeta,
    GatherContext,
    ResourceGatherer,
)
from . import utils
import nodriver
from nodriver import cdp

__all__ = [
    "nodriver",
    "cdp",
    "utils",
    "ResourceFetcher",
    "Session",
    "raw_command",
    "VersionProbe",
    "BrowserVersionProbe",
    "parse_milestone",
    "resolve_active_frame",
    "FetchRequest",
    "FetchResult",
    "Frame",
    "FetcherConfig",
    "FetchError",
    "NotEnabledError",
    "FrameUnresolvedError",
    "ResourceLoadFailedError",
    "TransportFailureError",
    "FetchTimeoutError",
    "PROTOCOL_MIN_MILESTONE",
    "FetchStrategy",
    "FetchStrategyKind",
    "ProtocolFetchStrategy",
    "IframeFetchStrategy",
    "select_strategy",
    "Gatherer",
    "GathererMeta",
    "GatherContext",
    "ResourceGatherer",
]
