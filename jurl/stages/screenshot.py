from jurl.core import logger
from jurl.deadline import Deadline
from jurl.errors import DeadlineExceeded
from jurl.models import RenderRequest, ScreenshotBytes, SessionState
from jurl.session.base import BrowserSession

_log = logger.getChild("screenshot")


def capture(session: BrowserSession, request: RenderRequest, deadline: Deadline) -> ScreenshotBytes:
    """Captures one raster image of the rendered page. Terminal alternative to extract()."""
    if session.state is not SessionState.READY:
        raise RuntimeError(f"screenshot requires a ready session, got {session.state.value}")

    remaining = deadline.checkpoint("screenshot")
    fmt = request.screenshot_format
    _log.debug(f"* Taking {fmt} screenshot (full_page={request.full_page})")
    try:
        image = session.capture_screenshot(fmt, request.full_page, timeout=remaining)
    except DeadlineExceeded as exc:
        raise DeadlineExceeded(deadline.timeout, "screenshot") from exc
    return ScreenshotBytes(image=image, format=fmt)
