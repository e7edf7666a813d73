"""
Shared fakes for pipeline tests: a manual clock and a scripted session.
No browser is launched anywhere in the suite.
"""

from typing import Optional

from jurl.errors import PipelineError
from jurl.models import NavigationResponse
from jurl.session.base import BrowserSession


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds

    def sleep(self, seconds):
        self.now += seconds


class ScriptedSession(BrowserSession):
    """
    Session double driven by a FakeClock.
    selector_at: seconds after navigation at which the selector appears (None = never).
    """

    def __init__(
        self,
        clock: FakeClock,
        html: str = "<html><body>hi</body></html>",
        text: str = "hi",
        status: int = 200,
        selector_at: Optional[float] = None,
        navigation_cost: float = 0.1,
        launch_error: Optional[PipelineError] = None,
        navigate_error: Optional[PipelineError] = None,
        read_error: Optional[Exception] = None,
        close_error: Optional[Exception] = None,
        image: bytes = b"\x89PNG\r\n\x1a\nfake",
    ):
        super().__init__()
        self.clock = clock
        self.html = html
        self.text = text
        self.status = status
        self.selector_at = selector_at
        self.navigation_cost = navigation_cost
        self.launch_error = launch_error
        self.navigate_error = navigate_error
        self.read_error = read_error
        self.close_error = close_error
        self.image = image
        self.calls = []
        self.probes = []
        self.close_count = 0
        self._navigated_at = None

    def launch(self, timeout):
        self.calls.append("launch")
        if self.launch_error:
            raise self.launch_error

    def navigate(self, url, method, headers, body, follow_redirects, wait_until, timeout):
        self.calls.append("navigate")
        self.clock.advance(self.navigation_cost)
        self._navigated_at = self.clock.now
        if self.navigate_error:
            raise self.navigate_error
        return NavigationResponse(
            url=url,
            final_url=url,
            status=self.status,
            headers=(("Content-Type", "text/html; charset=utf-8"),),
        )

    def wait_for_selector(self, selector, timeout):
        self.calls.append("wait_for_selector")
        self.probes.append((self.clock.now, timeout))
        if self.selector_at is not None:
            appears = self._navigated_at + self.selector_at
            if self.clock.now + timeout >= appears:
                self.clock.now = max(self.clock.now, appears)
                return True
        self.clock.advance(timeout)
        return False

    def evaluate_html(self):
        self.calls.append("evaluate_html")
        if self.read_error:
            raise self.read_error
        return self.html

    def evaluate_text(self):
        self.calls.append("evaluate_text")
        if self.read_error:
            raise self.read_error
        return self.text

    def capture_screenshot(self, fmt="png", full_page=False, timeout=None):
        self.calls.append("capture_screenshot")
        if self.read_error:
            raise self.read_error
        return self.image

    def close(self):
        self.close_count += 1
        self.calls.append("close")
        if self.close_error:
            raise self.close_error
