"""fetch a resource with `Network.loadNetworkResource` + `IO.read`.

two phases:
1. ask the browser to load the url inside the active top-level frame. it
   answers with `success`, `httpStatusCode` and (on success) a stream handle.
2. read the stream handle to eof.

a rejected load is detected in phase 1, so a known-bad stream is never read.
"""

import logging

from ..errors import FetchError, ResourceLoadFailedError, TransportFailureError
from ..frames import resolve_active_frame
from ..models import FetchRequest, FetchResult, Frame
from ..session import Session
from .base import FetchStrategy, FetchStrategyKind

logger = logging.getLogger("nodriverfetch.ProtocolFetchStrategy")


class ProtocolFetchStrategy(FetchStrategy):
    """load resources over the devtools protocol (chrome 88+).

    `OK_STATUS_CODES` is the default set of statuses accepted as a successful
    load; override it on a subclass or pass `ok_status_codes`.

    :param disable_cache: bypass the http cache for the load.
    :param include_credentials: send cookies with the load.
    :param ok_status_codes: statuses accepted as success.
    """

    kind = FetchStrategyKind.PROTOCOL
    OK_STATUS_CODES: frozenset[int] = frozenset({200})

    def __init__(self,
        *,
        disable_cache: bool = True,
        include_credentials: bool = True,
        ok_status_codes: frozenset[int] | None = None,
    ):
        self.disable_cache = disable_cache
        self.include_credentials = include_credentials
        self.ok_status_codes = (
            frozenset(ok_status_codes) if ok_status_codes is not None else self.OK_STATUS_CODES
        )

    def is_ok_status(self, status: int | None) -> bool:
        return status is not None and int(status) in self.ok_status_codes

    async def fetch(self, session: Session, request: FetchRequest) -> FetchResult:
        frame = await resolve_active_frame(session)
        resource = await self.load_network_resource(session, frame, request.url)

        success = bool(resource.get("success"))
        status = resource.get("httpStatusCode")
        stream = resource.get("stream")

        if not success or not self.is_ok_status(status):
            logger.warning("loading %s failed (success=%s status=%s)", request.url, success, status)
            if stream:
                try:
                    await session.close_stream(stream)
                except FetchError as e:
                    logger.debug("failed to close stream %s:\n  %s", stream, e)
            raise ResourceLoadFailedError(request.url, status)
        if not stream:
            raise TransportFailureError(
                f"Network.loadNetworkResource reported success for {request.url} without a stream"
            )

        contents = await session.read_stream(stream)
        logger.info("successfully fetched %s over protocol (%d bytes)", request.url, len(contents))
        return FetchResult(url=request.url, contents=contents, status=int(status))

    async def load_network_resource(self, session: Session, frame: Frame, url: str) -> dict:
        """issue `Network.loadNetworkResource` and return its `resource` dict.

        the Network domain is held enabled around the load through
        `Session.domain_enabled()`, which leaves a caller-enabled domain alone.
        """
        async with session.domain_enabled("Network"):
            response = await session.send_command("Network.loadNetworkResource", {
                "frameId": frame.id,
                "url": url,
                "options": {
                    "disableCache": self.disable_cache,
                    "includeCredentials": self.include_credentials,
                },
            })

        resource = response.get("resource")
        if not isinstance(resource, dict):
            raise TransportFailureError(f"malformed Network.loadNetworkResource response: {response!r}")
        return resource


__all__ = ["ProtocolFetchStrategy"]
