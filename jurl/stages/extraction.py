"""
Extraction stage: a pure read of already-rendered engine state.
Html, Text and Json are views over the same render; Json never refetches.
"""

import json
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup

from jurl.deadline import Deadline
from jurl.models import NavigationResponse, OutputMode, RenderedDocument, SessionState
from jurl.session.base import BrowserSession


def page_title(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    if soup.title is None or soup.title.string is None:
        return None
    return soup.title.string.strip()


def parse_json_body(text: str) -> Any:
    """The page text as JSON when it is valid JSON, else None."""
    stripped = text.strip()
    if not stripped or stripped[0] not in "[{":
        return None
    try:
        return json.loads(stripped)
    except ValueError:
        return None


def summarize(html: str, text: str, response: NavigationResponse) -> Dict[str, Any]:
    return {
        "url": response.url,
        "final_url": response.final_url,
        "status": response.status,
        "title": page_title(html),
        "headers": response.header_dict(),
        "text": text,
        "content": parse_json_body(text),
    }


def extract(
    session: BrowserSession,
    mode: OutputMode,
    response: NavigationResponse,
    deadline: Deadline,
) -> RenderedDocument:
    if session.state is not SessionState.READY:
        raise RuntimeError(f"extraction requires a ready session, got {session.state.value}")
    if not mode.is_textual:
        raise ValueError(f"{mode.value} is not a textual output mode")

    deadline.checkpoint("extraction")
    html = session.evaluate_html()
    if mode is OutputMode.HTML:
        return RenderedDocument(html=html)

    text = session.evaluate_text()
    if mode is OutputMode.TEXT:
        return RenderedDocument(html=html, text=text)

    return RenderedDocument(html=html, text=text, data=summarize(html, text, response))
