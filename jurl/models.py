import math
from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import urlparse

from jurl.core import BROWSER_TYPES, WAIT_UNTIL_EVENTS
from jurl.errors import RequestValidationError

ALLOWED_SCHEMES = ("http", "https", "file")

Headers = Tuple[Tuple[str, str], ...]


class OutputMode(Enum):
    HTML = "html"
    TEXT = "text"
    JSON = "json"
    SCREENSHOT = "screenshot"

    @property
    def is_textual(self) -> bool:
        return self is not OutputMode.SCREENSHOT


class SessionState(Enum):
    UNINITIALIZED = "UNINITIALIZED"
    LAUNCHED = "LAUNCHED"
    NAVIGATED = "NAVIGATED"
    READY = "READY"
    CLOSED = "CLOSED"


def screenshot_format_for(path: str) -> str:
    """Infers the raster format from the destination extension."""
    return "jpeg" if path.lower().endswith((".jpg", ".jpeg")) else "png"


def merge_headers(headers: Headers) -> Dict[str, str]:
    """
    Collapses an ordered header list into one value per name.
    Names compare case-insensitively; the first spelling wins and duplicate
    values are joined with ", " in their original order.
    """
    merged: Dict[str, str] = {}
    spelling: Dict[str, str] = {}
    for name, value in headers:
        key = name.lower()
        if key in spelling:
            merged[spelling[key]] = f"{merged[spelling[key]]}, {value}"
        else:
            spelling[key] = name
            merged[name] = value
    return merged


@dataclass(frozen=True)
class RenderRequest:
    """
    Input schema for one render invocation.
    Invariant: exactly one of {textual mode, screenshot} is active, and the
    request is validated in full before any engine is launched.
    """
    url: str
    method: str = "GET"
    headers: Headers = ()
    body: Optional[bytes] = None
    user_agent: Optional[str] = None
    follow_redirects: bool = False
    wait_selector: Optional[str] = None
    timeout: float = 30.0
    output_mode: OutputMode = OutputMode.HTML
    screenshot_path: Optional[str] = None
    full_page: bool = False
    render_js: bool = True
    wait_until: str = "load"
    fail_on_http_error: bool = False
    browser: str = "chromium"

    def __post_init__(self):
        object.__setattr__(self, "method", (self.method or "").strip().upper())
        object.__setattr__(self, "headers", tuple((str(n), str(v)) for n, v in self.headers))
        self._validate()

    def _validate(self):
        parsed = urlparse(self.url or "")
        if parsed.scheme.lower() not in ALLOWED_SCHEMES:
            raise RequestValidationError(
                f"URL must include a protocol (http:// or https://): {self.url!r}"
            )
        if parsed.scheme.lower() != "file" and not parsed.netloc:
            raise RequestValidationError(f"URL has no host: {self.url!r}")

        if not self.method.isalpha():
            raise RequestValidationError(f"invalid request method: {self.method!r}")

        for name, _ in self.headers:
            if not name or any(ch in name for ch in " \t:\r\n"):
                raise RequestValidationError(f"invalid header name: {name!r}")

        if isinstance(self.timeout, bool) or not self.timeout > 0 or not math.isfinite(self.timeout):
            raise RequestValidationError(f"timeout must be a finite number > 0, got {self.timeout!r}")

        if self.wait_selector is not None and not self.wait_selector.strip():
            raise RequestValidationError("wait selector must not be empty")

        # INVARIANT: Output-mode exclusivity
        if self.output_mode is OutputMode.SCREENSHOT and not self.screenshot_path:
            raise RequestValidationError("screenshot mode requires a destination path")
        if self.output_mode.is_textual and self.screenshot_path:
            raise RequestValidationError(
                f"--screenshot cannot be combined with --format {self.output_mode.value}"
            )
        if self.output_mode is OutputMode.SCREENSHOT and not self.render_js:
            raise RequestValidationError("screenshots require JavaScript rendering (drop --no-js)")
        if self.full_page and self.output_mode is not OutputMode.SCREENSHOT:
            raise RequestValidationError("--full-page only applies to --screenshot")

        if self.wait_until not in WAIT_UNTIL_EVENTS:
            raise RequestValidationError(f"unknown --wait-until event: {self.wait_until!r}")
        if self.browser not in BROWSER_TYPES:
            raise RequestValidationError(f"unknown browser: {self.browser!r}")

    @property
    def screenshot_format(self) -> Optional[str]:
        if self.screenshot_path is None:
            return None
        return screenshot_format_for(self.screenshot_path)


@dataclass(frozen=True)
class NavigationResponse:
    """Response metadata captured by the navigation stage."""
    url: str
    final_url: str
    status: Optional[int] = None
    headers: Headers = ()

    @property
    def reason(self) -> str:
        if self.status is None:
            return ""
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    def header_dict(self) -> Dict[str, str]:
        return merge_headers(self.headers)


@dataclass(frozen=True)
class RenderedDocument:
    html: str
    text: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ScreenshotBytes:
    image: bytes
    format: str = "png"


@dataclass(frozen=True)
class RenderResult:
    """
    Immutable output of one successful run.
    The payload is either a RenderedDocument or ScreenshotBytes.
    """
    payload: Union[RenderedDocument, ScreenshotBytes]
    response: NavigationResponse
    mode: OutputMode = OutputMode.HTML
    stages: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_screenshot(self) -> bool:
        return isinstance(self.payload, ScreenshotBytes)
