"""transport adapter over a nodriver `Tab` / `Connection`.

everything the fetcher says to the browser goes through `Session`, so this is
also the one place raw transport exceptions turn into `TransportFailureError`.
"""

import base64
import logging
from contextlib import asynccontextmanager
from typing import Callable

import nodriver
from nodriver import cdp
from nodriver.core.connection import ProtocolException
from websockets.exceptions import ConnectionClosed

from .errors import FetchError, TransportFailureError

logger = logging.getLogger("nodriverfetch.Session")


def raw_command(method: str, params: dict | None = None):
    """build an untyped devtools command for nodriver's generator-based `send()`.

    nodriver reads `method` + `params` off the first yield and hands the raw
    result dict back into the generator, which returns it unchanged.

    :param method: full method name (e.g. "Page.getFrameTree").
    :param params: payload dict; omit if none.
    """
    result = yield {"method": method, "params": params or {}}
    return result


class Session:
    """devtools session a fetch runs against.

    owned by the caller: `Session` never connects, reconnects or closes the
    underlying connection, it only issues commands and reads streams.

    :param target: the tab (or bare connection) to address.
    """

    target: nodriver.Tab | nodriver.Connection

    def __init__(self, target: nodriver.Tab | nodriver.Connection):
        self.target = target
        # domains enabled by callers through `send_command`
        self.enabled_domains: set[str] = set()
        # domains this session enabled itself, and how many scopes hold them
        self._owned_domains: set[str] = set()
        self._domain_users: dict[str, int] = {}

    async def send(self, cdp_obj):
        """send a typed `nodriver.cdp` command.

        :return: the command's parsed return value.
        :raises TransportFailureError: the command could not be delivered or
        the browser answered with a protocol error.
        """
        try:
            return await self.target.send(cdp_obj)
        except ProtocolException as e:
            raise TransportFailureError(f"protocol error: {e}") from e
        except ConnectionClosed as e:
            raise TransportFailureError("devtools connection closed") from e
        except OSError as e:
            raise TransportFailureError(f"devtools transport failed: {e}") from e
        except RuntimeError as e:
            # nodriver raises a bare RuntimeError once the websocket is gone
            raise TransportFailureError(f"devtools transport failed: {e}") from e

    async def send_command(self, method: str, params: dict | None = None) -> dict:
        """send a raw devtools command and return its result dict.

        `<Domain>.enable` / `<Domain>.disable` sent through here are
        remembered in `enabled_domains`, so `domain_enabled()` never turns
        off a domain the caller switched on.

        :param method: full method name (e.g. "Network.loadNetworkResource").
        :param params: payload dict; omit if none.
        """
        result = await self._send_command(method, params)
        domain, _, action = method.rpartition(".")
        if action == "enable":
            self.enabled_domains.add(domain)
        elif action == "disable":
            self.enabled_domains.discard(domain)
        return result

    async def _send_command(self, method: str, params: dict | None = None) -> dict:
        logger.debug("sending %s", method)
        result = await self.send(raw_command(method, params))
        if result is None:
            return {}
        if not isinstance(result, dict):
            raise TransportFailureError(f"unexpected {method} response: {result!r}")
        return result

    def is_domain_enabled(self, domain: str) -> bool:
        """whether `domain` is known to be enabled by someone other than
        `domain_enabled()`.

        checks domains enabled through `send_command` and, on nodriver
        builds that track it, the target's own `enabled_domains`.
        """
        if domain in self.enabled_domains:
            return True
        for enabled in getattr(self.target, "enabled_domains", None) or []:
            name = getattr(enabled, "__name__", str(enabled)).rsplit(".", 1)[-1]
            if name.lower() == domain.lower():
                return True
        return False

    @asynccontextmanager
    async def domain_enabled(self, domain: str):
        """keep `domain` enabled for the duration of the block.

        reference counted per session: the domain is enabled by the first
        holder (unless it was already enabled) and disabled when the last
        holder leaves, and only if this session enabled it. a failing
        disable is logged, never raised, so it can't replace the block's
        own error.

        :param domain: domain name (e.g. "Network").
        """
        self._domain_users[domain] = self._domain_users.get(domain, 0) + 1
        try:
            if domain not in self._owned_domains and not self.is_domain_enabled(domain):
                self._owned_domains.add(domain)
                await self._send_command(f"{domain}.enable")
            yield
        finally:
            self._domain_users[domain] -= 1
            if not self._domain_users[domain] and domain in self._owned_domains:
                self._owned_domains.discard(domain)
                try:
                    await self._send_command(f"{domain}.disable")
                except FetchError as e:
                    logger.debug("failed to disable %s:\n  %s", domain, e)

    async def read_stream(self, handle: str) -> bytes:
        """read an IO stream to `eof` and close it.

        flow:
        1. iteratively read chunks via IO.read
        2. decode base64 when flagged
        3. close the handle, whether or not eof was reached

        a failing `IO.close` is logged, not raised: it must not replace a
        read error, and after eof the contents are already complete.

        :param handle: stream handle returned by the browser.
        :return: the complete stream contents.
        """
        stream = cdp.io.StreamHandle(handle)
        buf = bytearray()
        chunks = 0
        try:
            while True:
                b64, data, eof = await self.send(cdp.io.read(handle=stream))
                buf.extend(base64.b64decode(data) if b64 else data.encode("utf-8"))
                chunks += 1
                if eof:
                    break
        finally:
            try:
                await self.close_stream(stream)
            except FetchError as e:
                logger.debug("failed to close stream %s:\n  %s", handle, e)
        logger.debug("read %d bytes in %d chunk(s) from stream %s", len(buf), chunks, handle)
        return bytes(buf)

    async def close_stream(self, handle: str):
        """release a stream handle without reading it."""
        await self.send(cdp.io.close(cdp.io.StreamHandle(handle)))

    async def evaluate(self, expression: str):
        """evaluate `expression` in the page and return its value.

        :raises TransportFailureError: the script threw.
        """
        result = await self.send_command("Runtime.evaluate", {
            "expression": expression,
            "awaitPromise": True,
            "returnByValue": True,
        })
        details = result.get("exceptionDetails")
        if details:
            raise TransportFailureError(
                f"in-page script failed: {details.get('text', 'unknown error')}"
            )
        return (result.get("result") or {}).get("value")

    def add_handler(self, event_type, handler: Callable):
        self.target.add_handler(event_type, handler)

    def remove_handler(self, event_type, handler: Callable):
        self.target.remove_handler(event_type, handler)


__all__ = [
    "Session",
    "raw_command",
]
