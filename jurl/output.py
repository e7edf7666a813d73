"""
Output writer: turns a RenderResult into bytes on stdout or on disk.
"""

import json
import sys
from pathlib import Path
from typing import Optional

from jurl.core import logger
from jurl.errors import OutputError
from jurl.models import NavigationResponse, OutputMode, RenderResult

_log = logger.getChild("output")


def header_block(response: NavigationResponse) -> str:
    """curl -i style status line plus response headers, blank-line terminated."""
    if response.status is None:
        return ""
    lines = [f"HTTP/1.1 {response.status} {response.reason}".rstrip()]
    lines.extend(f"{name}: {value}" for name, value in response.headers)
    return "\n".join(lines) + "\n\n"


def render_content(result: RenderResult, include_headers: bool = False) -> str:
    doc = result.payload
    if result.mode is OutputMode.HTML:
        body = doc.html
    elif result.mode is OutputMode.TEXT:
        body = doc.text or ""
    else:
        body = json.dumps(doc.data, indent=2, ensure_ascii=False)

    if include_headers:
        body = header_block(result.response) + body
    return body


class OutputWriter:
    """
    FLOW: Screenshot -> raw bytes to the screenshot path.
    Textual -> rendered content to the output file, or to stdout with a trailing newline.
    Any OSError surfaces as OutputError.
    """

    def __init__(self, output_path: Optional[str] = None, silent: bool = False,
                 include_headers: bool = False, stdout=None):
        self.output_path = output_path
        self.silent = silent
        self.include_headers = include_headers
        self._stdout = stdout or sys.stdout

    def write(self, result: RenderResult, screenshot_path: Optional[str] = None):
        if result.is_screenshot:
            self._write_file(screenshot_path, result.payload.image)
            self._notice(f"Screenshot saved to: {screenshot_path}")
            return

        content = render_content(result, self.include_headers)
        if self.output_path:
            _log.debug(f"* Writing output to: {self.output_path}")
            self._write_file(self.output_path, content.encode("utf-8"))
            self._notice(f"Output saved to: {self.output_path}")
            return

        if not content.endswith("\n"):
            content += "\n"
        try:
            self._stdout.write(content)
            self._stdout.flush()
        except OSError as exc:
            raise OutputError("<stdout>", exc.strerror or str(exc)) from exc

    def _write_file(self, path: str, data: bytes):
        if not path:
            raise OutputError("<none>", "no destination path")
        try:
            Path(path).write_bytes(data)
        except OSError as exc:
            raise OutputError(path, exc.strerror or str(exc)) from exc

    def _notice(self, message: str):
        if not self.silent:
            print(message, file=self._stdout)
