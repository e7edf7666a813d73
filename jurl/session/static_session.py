"""
HTTP-only binding of the browser session capability (--no-js).
Fetches the document with requests and serves reads from a BeautifulSoup tree.
No scripts run; the DOM is exactly what the server sent.
"""

import copy
from typing import Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from jurl import __version__
from jurl.core import MAX_REDIRECTS, logger
from jurl.errors import DeadlineExceeded, ExtractionError, NavigationError
from jurl.models import Headers, NavigationResponse, merge_headers
from jurl.session.base import BrowserSession

_log = logger.getChild("http")

NON_VISIBLE_TAGS = ("script", "style", "noscript", "template", "head")

# Elements that start a new line in rendered text; everything else flows inline
BLOCK_TAGS = (
    "address", "article", "aside", "blockquote", "dd", "details", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section", "summary", "table",
    "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
)


def visible_text(soup: BeautifulSoup) -> str:
    """
    Text of the document with script/style/non-visible nodes dropped.
    Inline elements join their neighbours; block elements and <br> break lines.
    """
    tree = copy.copy(soup)
    for tag in tree.find_all(NON_VISIBLE_TAGS):
        tag.decompose()
    for br in tree.find_all("br"):
        br.replace_with("\n")
    for tag in tree.find_all(BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")
    root = tree.body or tree
    lines = (" ".join(line.split()) for line in root.get_text().split("\n"))
    return "\n".join(line for line in lines if line)


class StaticSession(BrowserSession):
    """
    FLOW: Opens a requests.Session -> Issues exactly one request for the target ->
    Parses the body once -> Answers selector probes and reads from the parsed tree.
    """

    def __init__(self, user_agent: Optional[str] = None, max_redirects: int = MAX_REDIRECTS):
        super().__init__()
        self._user_agent = user_agent or f"jurl/{__version__}"
        self._max_redirects = max_redirects
        self._http = None
        self._html = ""
        self._soup = None

    def launch(self, timeout: float):
        self._http = requests.Session()
        self._http.max_redirects = self._max_redirects
        self._http.headers["User-Agent"] = self._user_agent

    def close(self):
        if self._http is not None:
            self._http.close()
        self._http = None
        self._soup = None

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
        if urlparse(url).scheme == "file":
            raise NavigationError("file URLs need the render engine (drop --no-js)", url)
        try:
            r = self._http.request(
                method,
                url,
                headers=merge_headers(headers),
                data=body,
                allow_redirects=follow_redirects,
                timeout=timeout,
            )
        except requests.exceptions.Timeout as exc:
            raise DeadlineExceeded(timeout, "navigation") from exc
        except requests.exceptions.TooManyRedirects as exc:
            raise NavigationError(f"more than {self._max_redirects} redirects", url) from exc
        except requests.exceptions.RequestException as exc:
            raise NavigationError(f"{exc.__class__.__name__}: {exc}", url) from exc

        # FAILURE SEMANTIC: redirects are opt-in
        if not follow_redirects and r.is_redirect:
            location = r.headers.get("Location", "<no location>")
            raise NavigationError(f"redirect ({r.status_code}) to {location} not followed; use -L to follow", url)

        self._html = r.text
        self._soup = BeautifulSoup(self._html, "html.parser")
        _log.debug(f"[HTTP] {method} {url} -> {r.status_code} ({len(r.content)} bytes)")
        return NavigationResponse(
            url=url,
            final_url=r.url,
            status=r.status_code,
            headers=tuple(r.headers.items()),
        )

    def wait_for_selector(self, selector: str, timeout: float) -> bool:
        # Static tree: a probe never blocks, the caller paces the polling
        try:
            return self._soup.select_one(selector) is not None
        except SelectorSyntaxError as exc:
            raise ExtractionError(f"probing {selector!r} failed: {exc}") from exc

    def evaluate_html(self) -> str:
        return self._html

    def evaluate_text(self) -> str:
        return visible_text(self._soup)

    def capture_screenshot(self, fmt: str = "png", full_page: bool = False, timeout: Optional[float] = None) -> bytes:
        raise ExtractionError("screenshots need the render engine (drop --no-js)")
