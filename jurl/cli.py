"""
jurl - JavaScript-enabled curl replacement.

Fetches a URL in a headless browser, runs its scripts, and prints the
rendered HTML, its visible text, a JSON summary, or saves a screenshot.
"""

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from jurl import __version__
from jurl.core import (
    BROWSER_TYPE,
    BROWSER_TYPES,
    DEFAULT_TIMEOUT,
    USER_AGENT,
    WAIT_UNTIL,
    WAIT_UNTIL_EVENTS,
    logger,
    setup_logger,
)
from jurl.errors import PipelineError, RequestValidationError
from jurl.models import OutputMode, RenderRequest
from jurl.output import OutputWriter
from jurl.pipeline import RenderPipeline

EPILOG = """examples:
  jurl https://example.com
  jurl -o output.html https://example.com
  jurl --format text https://example.com
  jurl --screenshot page.png https://example.com
  jurl --wait-for-selector "div.content" https://example.com
  jurl -v -A "MyBot 1.0" https://example.com
  jurl -i https://example.com
  jurl -X POST -d "key=value" https://example.com/api

exit codes:
  0 ok, 2 invalid request, 3 engine launch failed, 4 navigation failed,
  5 wait selector timed out, 6 timeout elapsed, 7 extraction failed,
  8 output write failed, 22 HTTP error with --fail
"""


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if not math.isfinite(number) or number <= 0:
        raise argparse.ArgumentTypeError(f"must be a finite number > 0: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jurl",
        description=__doc__.strip().splitlines()[0],
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("url", help="The URL to fetch. Must include protocol (http:// or https://).")
    parser.add_argument("-X", "--request", dest="method", default=None,
                        help="Request method to use (GET, POST, etc.). Default is GET, or POST with -d.")
    parser.add_argument("-H", "--header", dest="headers", action="append", default=[],
                        help="Pass custom header(s) to server. Format: 'Header: value'. Repeatable.")
    parser.add_argument("-d", "--data", default=None,
                        help="Request body. '@file' reads the body from a file.")
    parser.add_argument("-A", "--user-agent", default=USER_AGENT, help="User-Agent to send.")
    parser.add_argument("-L", "--location", dest="follow_redirects", action="store_true",
                        help="Follow redirects. Without it a redirect response is an error.")
    parser.add_argument("-f", "--fail", action="store_true",
                        help="Fail with exit code 22 on HTTP status >= 400.")
    parser.add_argument("-i", "--include", dest="include_headers", action="store_true",
                        help="Include the response status line and headers in the output.")
    parser.add_argument("-o", "--output", default=None,
                        help="Write output to file instead of stdout.")
    parser.add_argument("-s", "--silent", action="store_true", help="Silent mode: only content and errors.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show progress on stderr.")
    parser.add_argument("--log-file", default=None, help="Also write log lines to this file.")
    parser.add_argument("--wait-for-selector", dest="wait_selector", default=None,
                        help="Wait for a CSS selector to appear before capturing content.")
    parser.add_argument("--timeout", type=_positive_float, default=DEFAULT_TIMEOUT,
                        help=f"Seconds allowed for the whole run. Default is {DEFAULT_TIMEOUT:g}.")
    parser.add_argument("--wait-until", choices=WAIT_UNTIL_EVENTS, default=WAIT_UNTIL,
                        help="Page event that ends navigation.")
    parser.add_argument("--format", choices=[m.value for m in OutputMode if m.is_textual], default=None,
                        help="Output format: html (rendered HTML, default), text, or json.")
    parser.add_argument("--screenshot", default=None,
                        help="Save a screenshot (PNG, or JPEG for .jpg/.jpeg) instead of content.")
    parser.add_argument("--full-page", action="store_true", help="Screenshot the full scrollable page.")
    parser.add_argument("--browser", choices=BROWSER_TYPES, default=BROWSER_TYPE, help="Render engine to use.")
    parser.add_argument("--no-js", dest="render_js", action="store_false",
                        help="Plain HTTP fetch without a browser (no scripts run).")
    parser.add_argument("--version", action="version", version=f"jurl {__version__}")
    return parser


def parse_headers(raw: List[str]) -> Tuple[Tuple[str, str], ...]:
    headers = []
    for item in raw:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise RequestValidationError(f"header must look like 'Name: value', got {item!r}")
        headers.append((name.strip(), value.strip()))
    return tuple(headers)


def read_body(data: Optional[str]) -> Optional[bytes]:
    if data is None:
        return None
    if data.startswith("@"):
        path = data[1:]
        try:
            return Path(path).read_bytes()
        except OSError as exc:
            raise RequestValidationError(f"cannot read data file {path}: {exc.strerror or exc}") from exc
    return data.encode("utf-8")


def build_request(args: argparse.Namespace) -> RenderRequest:
    # Output-mode exclusivity is enforced by RenderRequest before any launch
    if args.screenshot:
        mode = OutputMode(args.format) if args.format else OutputMode.SCREENSHOT
    else:
        mode = OutputMode(args.format or "html")

    body = read_body(args.data)
    method = args.method or ("POST" if body is not None else "GET")
    return RenderRequest(
        url=args.url,
        method=method,
        headers=parse_headers(args.headers),
        body=body,
        user_agent=args.user_agent,
        follow_redirects=args.follow_redirects,
        wait_selector=args.wait_selector,
        timeout=args.timeout,
        output_mode=mode,
        screenshot_path=args.screenshot,
        full_page=args.full_page,
        render_js=args.render_js,
        wait_until=args.wait_until,
        fail_on_http_error=args.fail,
        browser=args.browser,
    )


def progress_summary(stages) -> str:
    done = {
        "launch": "engine launched",
        "navigate": "navigated successfully",
        "wait": "selector found",
        "extract": "content extracted",
        "screenshot": "screenshot captured",
    }
    return ", ".join(done[s] for s in stages if s in done)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.silent:
        level = logging.ERROR
    else:
        level = logging.WARNING
    setup_logger(level=level, log_file=args.log_file)

    try:
        request = build_request(args)
        result = RenderPipeline().run(request)
        OutputWriter(
            output_path=args.output,
            silent=args.silent,
            include_headers=args.include_headers and not args.silent,
        ).write(result, request.screenshot_path)
    except PipelineError as exc:
        print(f"jurl: {exc.describe()}", file=sys.stderr)
        if not args.silent and exc.completed_stages:
            print(f"jurl: before failing: {progress_summary(exc.completed_stages)}", file=sys.stderr)
        return exc.exit_code
    except KeyboardInterrupt:
        print("jurl: interrupted", file=sys.stderr)
        return 130
    except Exception as exc:
        logger.debug("unexpected error", exc_info=True)
        print(f"jurl: unexpected error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
