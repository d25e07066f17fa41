import pytest
from nodriver import cdp
from nodriver.core.connection import ProtocolException

from nodriverfetch import (
    BrowserVersionProbe,
    TransportFailureError,
    parse_milestone,
)

from conftest import b64


@pytest.mark.asyncio
async def test_send_command_returns_raw_result(target, session):
    target.mock_response("Browser.getVersion", {"product": "Chrome/120.0.0.0"})

    result = await session.send_command("Browser.getVersion")

    assert result == {"product": "Chrome/120.0.0.0"}
    assert target.sent == [("Browser.getVersion", {})]


@pytest.mark.asyncio
async def test_send_command_passes_params(target, session):
    await session.send_command("Network.loadNetworkResource", {"frameId": "FRAME", "url": "https://example.com"})

    assert target.params_for("Network.loadNetworkResource") == {
        "frameId": "FRAME",
        "url": "https://example.com",
    }


@pytest.mark.asyncio
async def test_protocol_errors_become_transport_failures(target, session):
    target.mock_response("Page.getFrameTree", ProtocolException({"code": -32000, "message": "Target closed"}))

    with pytest.raises(TransportFailureError, match="Target closed"):
        await session.send_command("Page.getFrameTree")


@pytest.mark.asyncio
async def test_os_errors_become_transport_failures(target, session):
    target.mock_response("Page.getFrameTree", ConnectionResetError("reset by peer"))

    with pytest.raises(TransportFailureError) as exc_info:
        await session.send_command("Page.getFrameTree")

    assert isinstance(exc_info.value.__cause__, ConnectionResetError)


@pytest.mark.asyncio
async def test_disconnected_websocket_becomes_transport_failure(target, session):
    # what nodriver raises when a command is sent after the browser went away
    target.mock_response("Page.getFrameTree", RuntimeError("WebSocket is not connected"))

    with pytest.raises(TransportFailureError, match="WebSocket is not connected") as exc_info:
        await session.send_command("Page.getFrameTree")

    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_read_stream_until_eof(target, session):
    target.mock_response("IO.read", [
        {"base64Encoded": True, "data": b64("STREAM "), "eof": False},
        {"base64Encoded": False, "data": "CONT", "eof": False},
        {"data": "ENTS", "eof": True},
    ])

    contents = await session.read_stream("42")

    assert contents == b"STREAM CONTENTS"
    assert target.methods() == ["IO.read", "IO.read", "IO.read", "IO.close"]
    assert target.params_for("IO.close") == {"handle": "42"}


@pytest.mark.asyncio
async def test_read_stream_failure_propagates(target, session):
    target.mock_response("IO.read", [
        {"base64Encoded": False, "data": "PART", "eof": False},
        ProtocolException({"code": -32000, "message": "Invalid stream handle"}),
    ])

    with pytest.raises(TransportFailureError):
        await session.read_stream("42")

    # the handle is released even though eof was never reached
    assert target.methods() == ["IO.read", "IO.read", "IO.close"]
    assert target.params_for("IO.close") == {"handle": "42"}


@pytest.mark.asyncio
async def test_read_stream_ignores_close_failure_after_eof(target, session):
    target.mock_response("IO.read", {"base64Encoded": False, "data": "DONE", "eof": True})
    target.mock_response("IO.close", ProtocolException({"code": -32000, "message": "Invalid stream handle"}))

    assert await session.read_stream("42") == b"DONE"


@pytest.mark.asyncio
async def test_evaluate_returns_value(target, session):
    target.mock_response("Runtime.evaluate", {"result": {"type": "boolean", "value": True}})

    assert await session.evaluate("true") is True
    params = target.params_for("Runtime.evaluate")
    assert params["expression"] == "true"
    assert params["returnByValue"] is True


@pytest.mark.asyncio
async def test_evaluate_raises_on_script_exception(target, session):
    target.mock_response("Runtime.evaluate", {
        "result": {"type": "object"},
        "exceptionDetails": {"text": "Uncaught TypeError"},
    })

    with pytest.raises(TransportFailureError, match="Uncaught TypeError"):
        await session.evaluate("document.body.appendChild(null)")


@pytest.mark.parametrize("product, milestone", [
    ("Chrome/88.0.4324.96", 88),
    ("HeadlessChrome/120.0.6099.109", 120),
    ("Chrome/87.0.4280.88", 87),
    ("Chrome/140", 140),
])
def test_parse_milestone(product, milestone):
    assert parse_milestone(product) == milestone


def test_parse_milestone_rejects_garbage():
    with pytest.raises(ValueError):
        parse_milestone("Chrome")


@pytest.mark.asyncio
async def test_browser_version_probe(target, session):
    target.mock_response("Browser.getVersion", {
        "protocolVersion": "1.3",
        "product": "HeadlessChrome/120.0.6099.109",
        "revision": "@3c3fe5f",
    })

    assert await BrowserVersionProbe(session).get_milestone() == 120


@pytest.mark.asyncio
async def test_browser_version_probe_asks_every_time(target, session):
    target.mock_response("Browser.getVersion", [
        {"product": "Chrome/87.0.4280.88"},
        {"product": "Chrome/91.0.4472.77"},
    ])
    probe = BrowserVersionProbe(session)

    assert await probe.get_milestone() == 87
    assert await probe.get_milestone() == 91


@pytest.mark.asyncio
async def test_browser_version_probe_unparseable_product(target, session):
    target.mock_response("Browser.getVersion", {"product": ""})

    with pytest.raises(TransportFailureError):
        await BrowserVersionProbe(session).get_milestone()


@pytest.mark.asyncio
async def test_domain_enabled_is_reference_counted(target, session):
    async with session.domain_enabled("Network"):
        async with session.domain_enabled("Network"):
            pass
        assert target.methods() == ["Network.enable"]

    assert target.methods() == ["Network.enable", "Network.disable"]


@pytest.mark.asyncio
async def test_domain_enabled_leaves_caller_domain_alone(target, session):
    await session.send_command("Network.enable")

    async with session.domain_enabled("Network"):
        pass

    assert target.methods() == ["Network.enable"]
    assert session.is_domain_enabled("Network")


@pytest.mark.asyncio
async def test_domain_enabled_disable_failure_keeps_block_error(target, session):
    target.mock_response("Network.disable", ProtocolException({"code": -32000, "message": "Target closed"}))

    with pytest.raises(ValueError, match="inside"):
        async with session.domain_enabled("Network"):
            raise ValueError("inside")

    assert target.methods() == ["Network.enable", "Network.disable"]


@pytest.mark.asyncio
async def test_domain_enabled_respects_target_enabled_domains(target, session):
    # nodriver tabs track the cdp modules enabled through their own handlers
    target.enabled_domains = [cdp.network]

    async with session.domain_enabled("Network"):
        pass

    assert target.sent == []
