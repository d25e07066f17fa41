import logging
import re
from typing import Protocol

from .errors import TransportFailureError
from .session import Session

logger = logging.getLogger("nodriverfetch.version")

# "HeadlessChrome/120.0.6099.109", "Chrome/87.0.4280.88"
_PRODUCT_RE = re.compile(r"/(\d+)(?:\.|$)")


class VersionProbe(Protocol):
    """anything that can report the browser's major version."""

    async def get_milestone(self) -> int:
        ...


def parse_milestone(product: str) -> int:
    """pull the major version out of a `Browser.getVersion` product string.

    :param product: e.g. "HeadlessChrome/120.0.6099.109".
    :raises ValueError: no version number in `product`.
    """
    match = _PRODUCT_RE.search(product or "")
    if not match:
        raise ValueError(f"no milestone in product string {product!r}")
    return int(match.group(1))


class BrowserVersionProbe:
    """`VersionProbe` backed by `Browser.getVersion`.

    asks the browser every time so a restarted browser is never
    mistaken for the old one.
    """

    def __init__(self, session: Session):
        self.session = session

    async def get_milestone(self) -> int:
        response = await self.session.send_command("Browser.getVersion")
        product = response.get("product", "")
        try:
            milestone = parse_milestone(product)
        except ValueError as e:
            raise TransportFailureError(str(e)) from e
        logger.debug("browser product %s => milestone %d", product, milestone)
        return milestone


__all__ = [
    "VersionProbe",
    "BrowserVersionProbe",
    "parse_milestone",
]
