from .base import (
    PROTOCOL_MIN_MILESTONE,
    FetchStrategy,
    FetchStrategyKind,
    select_strategy,
)
from .protocol import ProtocolFetchStrategy
from .iframe import IframeFetchStrategy

__all__ = [
    "PROTOCOL_MIN_MILESTONE",
    "FetchStrategy",
    "FetchStrategyKind",
    "select_strategy",
    "ProtocolFetchStrategy",
    "IframeFetchStrategy",
]
