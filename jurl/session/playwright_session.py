"""
Playwright binding of the browser session capability.
One instance owns one engine process for one request, and is never shared.
"""

from typing import Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from jurl.core import CHROMIUM_ARGS, MAX_REDIRECTS, logger
from jurl.errors import DeadlineExceeded, EngineLaunchError, ExtractionError, NavigationError
from jurl.models import Headers, NavigationResponse, merge_headers
from jurl.session.base import BrowserSession

_log = logger.getChild("engine")

_VISIBLE_TEXT_JS = "() => document.body ? document.body.innerText : ''"


def _ms(timeout: float) -> int:
    # Playwright treats 0 as "wait forever"
    return max(1, int(timeout * 1000))


def _first_line(exc: Exception) -> str:
    text = str(exc).strip()
    return text.splitlines()[0] if text else exc.__class__.__name__


class PlaywrightSession(BrowserSession):
    """
    FLOW: Starts Playwright -> Launches one browser -> Opens one context/page ->
    Navigates once (intercepting the document request when the method, body or
    redirect policy differs from a plain GET) -> Serves reads -> Tears everything down.
    """

    def __init__(
        self,
        browser: str = "chromium",
        headless: bool = True,
        viewport=(1920, 1080),
        user_agent: Optional[str] = None,
        max_redirects: int = MAX_REDIRECTS,
    ):
        super().__init__()
        self._browser_name = browser
        self._headless = headless
        self._viewport = viewport
        self._user_agent = user_agent
        self._max_redirects = max_redirects
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    # === LIFECYCLE ===

    def launch(self, timeout: float):
        try:
            self._playwright = sync_playwright().start()
            browser_type = getattr(self._playwright, self._browser_name)
            launch_args = {"headless": self._headless, "timeout": _ms(timeout)}
            if self._browser_name == "chromium":
                launch_args["args"] = CHROMIUM_ARGS
            self._browser = browser_type.launch(**launch_args)

            context_args = {"viewport": {"width": self._viewport[0], "height": self._viewport[1]}}
            if self._user_agent:
                context_args["user_agent"] = self._user_agent
            self._context = self._browser.new_context(**context_args)
            self._page = self._context.new_page()
        except PlaywrightTimeoutError as exc:
            raise DeadlineExceeded(timeout, "engine launch") from exc
        except PlaywrightError as exc:
            raise EngineLaunchError(f"could not start {self._browser_name}: {_first_line(exc)}") from exc
        _log.debug(f"[ENGINE] {self._browser_name} launched (headless={self._headless})")

    def close(self):
        for name, target in (("context", self._context), ("browser", self._browser)):
            if target is None:
                continue
            try:
                target.close()
            except PlaywrightError as exc:
                _log.warning(f"[ENGINE] closing {name} failed: {_first_line(exc)}")
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except PlaywrightError as exc:
                _log.warning(f"[ENGINE] stopping playwright failed: {_first_line(exc)}")
        self._page = self._context = self._browser = self._playwright = None

    # === NAVIGATION ===

    def navigate(
        self,
        url: str,
        method: str,
        headers: Headers,
        body: Optional[bytes],
        follow_redirects: bool,
        wait_until: str,
        timeout: float,
    ) -> NavigationResponse:
        page = self._page
        extra_headers = merge_headers(headers)
        outcome = {"handled": False, "redirect": None, "error": None}

        def handle_document(route, request):
            if outcome["handled"] or not request.is_navigation_request() or request.frame != page.main_frame:
                route.continue_()
                return
            outcome["handled"] = True
            try:
                fetched = route.fetch(
                    method=method,
                    post_data=body,
                    max_redirects=self._max_redirects if follow_redirects else 0,
                    timeout=_ms(timeout),
                )
            except PlaywrightError as exc:
                outcome["error"] = exc
                route.abort()
                return
            if not follow_redirects and 300 <= fetched.status < 400:
                outcome["redirect"] = (fetched.status, fetched.headers.get("location", ""))
                route.abort("blockedbyclient")
                return
            route.fulfill(response=fetched)

        # Plain GET with redirects allowed needs no interception
        intercept = method != "GET" or body is not None or not follow_redirects
        routed = False

        try:
            if extra_headers:
                page.set_extra_http_headers(extra_headers)
            if intercept:
                page.route("**/*", handle_document)
                routed = True
            response = page.goto(url, wait_until=wait_until, timeout=_ms(timeout))
        except PlaywrightTimeoutError as exc:
            raise DeadlineExceeded(timeout, "navigation") from exc
        except PlaywrightError as exc:
            if outcome["redirect"]:
                status, location = outcome["redirect"]
                raise NavigationError(
                    f"redirect ({status}) to {location or '<no location>'} not followed; use -L to follow",
                    url,
                ) from exc
            cause = outcome["error"] or exc
            if isinstance(cause, PlaywrightTimeoutError):
                raise DeadlineExceeded(timeout, "navigation") from exc
            raise NavigationError(_first_line(cause), url) from exc
        finally:
            if routed:
                try:
                    page.unroute("**/*", handle_document)
                except PlaywrightError as exc:
                    _log.debug(f"[ENGINE] unroute failed: {_first_line(exc)}")

        if response is None:
            return NavigationResponse(url=url, final_url=page.url)
        try:
            header_pairs = tuple((h["name"], h["value"]) for h in response.headers_array())
        except PlaywrightError:
            header_pairs = tuple(response.headers.items())
        return NavigationResponse(
            url=url,
            final_url=page.url,
            status=response.status,
            headers=header_pairs,
        )

    # === READS ===

    def wait_for_selector(self, selector: str, timeout: float) -> bool:
        try:
            self._page.wait_for_selector(selector, state="attached", timeout=_ms(timeout))
            return True
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as exc:
            raise ExtractionError(f"probing {selector!r} failed: {_first_line(exc)}") from exc

    def evaluate_html(self) -> str:
        try:
            return self._page.content()
        except PlaywrightError as exc:
            raise ExtractionError(f"reading rendered HTML failed: {_first_line(exc)}") from exc

    def evaluate_text(self) -> str:
        try:
            return self._page.evaluate(_VISIBLE_TEXT_JS) or ""
        except PlaywrightError as exc:
            raise ExtractionError(f"reading rendered text failed: {_first_line(exc)}") from exc

    def capture_screenshot(self, fmt: str = "png", full_page: bool = False, timeout: Optional[float] = None) -> bytes:
        kwargs = {"type": fmt, "full_page": full_page}
        if timeout is not None:
            kwargs["timeout"] = _ms(timeout)
        try:
            return self._page.screenshot(**kwargs)
        except PlaywrightTimeoutError as exc:
            raise DeadlineExceeded(timeout or 0, "screenshot") from exc
        except PlaywrightError as exc:
            raise ExtractionError(f"screenshot failed: {_first_line(exc)}") from exc
