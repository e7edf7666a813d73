"""
Navigation stage: one load of the target through the session.
No local retry; a flaky navigation surfaces to the caller.
"""

from jurl.core import logger
from jurl.deadline import Deadline
from jurl.errors import DeadlineExceeded, HttpStatusError
from jurl.models import NavigationResponse, RenderRequest, SessionState
from jurl.session.base import BrowserSession

_log = logger.getChild("navigate")


def navigate(session: BrowserSession, request: RenderRequest, deadline: Deadline) -> NavigationResponse:
    remaining = deadline.checkpoint("navigation")
    _log.debug(f"* Navigating to {request.url} ({request.method}, {remaining:.1f}s left)...")

    try:
        response = session.navigate(
            request.url,
            request.method,
            request.headers,
            request.body,
            request.follow_redirects,
            request.wait_until,
            remaining,
        )
    except DeadlineExceeded as exc:
        # Report against the whole run's budget, not the slice handed to the engine
        raise DeadlineExceeded(deadline.timeout, "navigation") from exc

    session.advance(SessionState.NAVIGATED, response.final_url)
    _log.debug(f"* Navigated to {response.final_url} (status {response.status})")

    # Non-2xx renders like any other page unless --fail was given
    if request.fail_on_http_error and response.status is not None and response.status >= 400:
        raise HttpStatusError(response.status, request.url)
    return response
