from jurl.core import HEADLESS, VIEWPORT
from jurl.session.base import BrowserSession
from jurl.session.playwright_session import PlaywrightSession
from jurl.session.static_session import StaticSession


def session_for(request) -> BrowserSession:
    """Builds a fresh, unlaunched session for one request. Never reused."""
    if not request.render_js:
        return StaticSession(user_agent=request.user_agent)
    return PlaywrightSession(
        browser=request.browser,
        headless=HEADLESS,
        viewport=VIEWPORT,
        user_agent=request.user_agent,
    )
