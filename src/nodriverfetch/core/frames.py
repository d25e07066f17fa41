import logging

from .errors import FrameUnresolvedError
from .models import Frame
from .session import Session

logger = logging.getLogger("nodriverfetch.frames")


async def resolve_active_frame(session: Session) -> Frame:
    """look up the top-level frame a resource load can be scoped to.

    reads `frameTree.frame` off `Page.getFrameTree`.

    :param session: session to query.
    :return: the root frame.
    :raises FrameUnresolvedError: the tree is empty or malformed.
    """
    response = await session.send_command("Page.getFrameTree")
    tree = response.get("frameTree")
    frame = tree.get("frame") if isinstance(tree, dict) else None
    frame_id = frame.get("id") if isinstance(frame, dict) else None
    if not frame_id or not isinstance(frame_id, str):
        logger.warning("no top-level frame in frame tree response: %r", response)
        raise FrameUnresolvedError()
    logger.debug("resolved active frame %s", frame_id)
    return Frame(id=frame_id, url=frame.get("url"))


__all__ = ["resolve_active_frame"]
