import base64
from types import SimpleNamespace

import pytest
from nodriver import cdp

from nodriverfetch import Session


class FakeTarget:
    """stand-in for a nodriver `Tab` that answers commands by method name.

    drives the command generator the same way nodriver's `Transaction`
    does: read method + params off the first yield, send the canned result
    back in, return whatever the generator returns.

    a canned response may be:
    - a dict (returned every time)
    - a list (popped in order)
    - a callable taking the params dict
    - an exception instance (raised)

    unknown methods answer `{}`.
    """

    def __init__(self):
        self.responses: dict = {}
        self.sent: list[tuple[str, dict]] = []
        self.handlers: dict = {}

    def mock_response(self, method: str, response):
        self.responses[method] = response
        return self

    def methods(self) -> list[str]:
        return [method for method, _ in self.sent]

    def params_for(self, method: str) -> dict:
        for sent_method, params in self.sent:
            if sent_method == method:
                return params
        raise KeyError(method)

    async def send(self, cdp_obj):
        request = next(cdp_obj)
        method, params = request["method"], request.get("params") or {}
        self.sent.append((method, params))
        response = self.responses.get(method, {})
        if isinstance(response, list):
            response = response.pop(0)
        if callable(response):
            response = response(params)
        if isinstance(response, BaseException):
            raise response
        try:
            cdp_obj.send(response)
        except StopIteration as e:
            return e.value
        raise AssertionError(f"{method} command generator did not finish")

    def add_handler(self, event_type, handler):
        self.handlers.setdefault(event_type, []).append(handler)

    def remove_handler(self, event_type, handler):
        self.handlers.get(event_type, []).remove(handler)

    def emit(self, event_type, event):
        for handler in list(self.handlers.get(event_type, [])):
            handler(event)


def paused_event(request_id: str, url: str, status: int | None = None):
    """minimal `Fetch.requestPaused` event (only the fields handlers read)."""
    return SimpleNamespace(
        request_id=cdp.fetch.RequestId(request_id),
        request=SimpleNamespace(url=url),
        response_status_code=status,
    )


def b64(text: str) -> str:
    return base64.b64encode(text.encode()).decode()


@pytest.fixture
def target():
    return FakeTarget()


@pytest.fixture
def session(target):
    return Session(target)
