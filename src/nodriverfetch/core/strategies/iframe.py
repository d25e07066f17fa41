"""fetch a resource by loading it in a hidden iframe (chrome < 88).

older browsers can't be trusted with `Network.loadNetworkResource`, so the
page is made to request the url itself and the response body is taken off
`Fetch.requestPaused` before chrome hands it to the iframe.

flow:
1. attach a `RequestPaused` handler, then `Fetch.enable` for request + response stages
2. inject `<iframe src=url>` into the page
3. requests for other urls are continued untouched
4. at the response stage for `url`: accepted status -> `Fetch.getResponseBody`,
   anything else -> `ResourceLoadFailedError`
5. teardown (always): detach handler, drain tasks, `Fetch.disable`, remove the iframe
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import uuid

from nodriver import cdp

from ...js.load import render as render_js
from ...utils.urls import same_url
from ..errors import (
    FetchError,
    FetchTimeoutError,
    ResourceLoadFailedError,
)
from ..models import FetchRequest, FetchResult
from ..session import Session
from .base import FetchStrategy, FetchStrategyKind

logger = logging.getLogger("nodriverfetch.IframeFetchStrategy")


class _PausedRequestHandler:
    """`Fetch.requestPaused` handler for one in-flight iframe fetch.

    resolves `future` with the body (or a `FetchError`) once the response
    for `url` is paused.
    """

    def __init__(self,
        session: Session,
        url: str,
        ok_status_codes: frozenset[int],
    ):
        self.session = session
        self.url = url
        self.ok_status_codes = ok_status_codes
        self.future: asyncio.Future[FetchResult] = asyncio.get_running_loop().create_future()
        self.tasks: set[asyncio.Task] = set()

    def handle(self, ev: cdp.fetch.RequestPaused):
        """schedule `_handle` as a task so the event loop isn't blocked."""
        task = asyncio.create_task(self._handle(ev))
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)

    async def wait_for_tasks(self):
        await asyncio.gather(*self.tasks, return_exceptions=True)

    def _resolve(self, result: FetchResult | None = None, error: FetchError | None = None):
        if self.future.done():
            return
        if error is not None:
            self.future.set_exception(error)
        else:
            self.future.set_result(result)

    async def _handle(self, ev: cdp.fetch.RequestPaused):
        if not same_url(ev.request.url, self.url):
            await self._continue_unrelated(ev)
            return
        try:
            if ev.response_status_code is None:
                logger.debug("successfully intercepted request for %s", ev.request.url)
                await self.session.send(cdp.fetch.continue_request(ev.request_id))
                return
            logger.debug("successfully intercepted response for %s (status=%s)",
                ev.request.url, ev.response_status_code)
            try:
                self._resolve(await self._read_response(ev))
            finally:
                await self.session.send(cdp.fetch.continue_request(ev.request_id))
        except FetchError as e:
            self._resolve(error=e)

    async def _read_response(self, ev: cdp.fetch.RequestPaused) -> FetchResult:
        status = ev.response_status_code
        if status not in self.ok_status_codes:
            logger.warning("loading %s failed in iframe (status=%s)", self.url, status)
            raise ResourceLoadFailedError(self.url, status)
        body, base64_encoded = await self.session.send(
            cdp.fetch.get_response_body(ev.request_id)
        )
        contents = base64.b64decode(body) if base64_encoded else body.encode("utf-8")
        return FetchResult(url=self.url, contents=contents, status=status)

    async def _continue_unrelated(self, ev: cdp.fetch.RequestPaused):
        try:
            await self.session.send(cdp.fetch.continue_request(ev.request_id))
        except FetchError as e:
            # the request may already be gone (navigation, iframe removed)
            logger.debug("failed to continue request for %s:\n  %s", ev.request.url, e)


async def _teardown(step: str, coro):
    # teardown runs in `finally`; its failures must not replace the fetch's outcome
    try:
        await coro
    except FetchError as e:
        logger.debug("failed %s during iframe teardown:\n  %s", step, e)


class IframeFetchStrategy(FetchStrategy):
    """load resources through an injected iframe + fetch interception.

    :param timeout: seconds to wait for the paused response.
    :param ok_status_codes: statuses accepted as success.
    """

    kind = FetchStrategyKind.IFRAME
    OK_STATUS_CODES: frozenset[int] = frozenset({200})

    def __init__(self,
        *,
        timeout: float = 2.0,
        ok_status_codes: frozenset[int] | None = None,
    ):
        self.timeout = timeout
        self.ok_status_codes = (
            frozenset(ok_status_codes) if ok_status_codes is not None else self.OK_STATUS_CODES
        )

    async def fetch(self, session: Session, request: FetchRequest) -> FetchResult:
        handler = _PausedRequestHandler(session, request.url, self.ok_status_codes)
        iframe_id = f"nodriverfetch-{uuid.uuid4().hex}"

        session.add_handler(cdp.fetch.RequestPaused, handler.handle)
        try:
            await session.send(cdp.fetch.enable(patterns=[
                cdp.fetch.RequestPattern(request_stage=cdp.fetch.RequestStage.REQUEST),
                cdp.fetch.RequestPattern(request_stage=cdp.fetch.RequestStage.RESPONSE),
            ]))
            await session.evaluate(render_js(
                "inject_iframe.js",
                url=json.dumps(request.url),
                iframe_id=json.dumps(iframe_id),
            ))
            try:
                result = await asyncio.wait_for(
                    asyncio.shield(handler.future), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                logger.warning("timed out fetching %s in iframe after %ss", request.url, self.timeout)
                raise FetchTimeoutError(request.url, self.timeout) from None
        finally:
            session.remove_handler(cdp.fetch.RequestPaused, handler.handle)
            await handler.wait_for_tasks()
            if not handler.future.done():
                handler.future.cancel()
            await _teardown("Fetch.disable", session.send(cdp.fetch.disable()))
            await _teardown("iframe removal", session.evaluate(
                render_js("remove_iframe.js", iframe_id=json.dumps(iframe_id))
            ))

        logger.info("successfully fetched %s in iframe (%d bytes)", request.url, len(result.contents))
        return result


__all__ = ["IframeFetchStrategy"]
