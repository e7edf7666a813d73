from abc import ABC, abstractmethod
from typing import Optional

from jurl.models import Headers, NavigationResponse, SessionState

# Legal lifecycle moves; CLOSED is reachable from every state
_TRANSITIONS = {
    SessionState.UNINITIALIZED: {SessionState.LAUNCHED},
    SessionState.LAUNCHED: {SessionState.NAVIGATED},
    SessionState.NAVIGATED: {SessionState.READY},
    SessionState.READY: set(),
    SessionState.CLOSED: set(),
}


class BrowserSession(ABC):
    """
    Abstraction for one running render-engine instance.
    Contractual Requirements for Implementers:
    - MUST translate engine exceptions into the jurl.errors taxonomy.
    - MUST NOT retry; callers own retry policy.
    - MUST make close() safe on a partially launched engine.
    - MUST honour every timeout it is handed (seconds).
    """

    def __init__(self):
        self.state = SessionState.UNINITIALIZED
        self.navigated_url: Optional[str] = None

    def advance(self, state: SessionState, url: Optional[str] = None):
        if state is not SessionState.CLOSED and state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"illegal session transition {self.state.value} -> {state.value}")
        self.state = state
        if url is not None:
            self.navigated_url = url

    @abstractmethod
    def launch(self, timeout: float):
        """Start the engine. Raises EngineLaunchError or DeadlineExceeded."""

    @abstractmethod
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
        """Load the target once. Raises NavigationError or DeadlineExceeded."""

    @abstractmethod
    def wait_for_selector(self, selector: str, timeout: float) -> bool:
        """Probe for the selector for at most `timeout` seconds."""

    @abstractmethod
    def evaluate_html(self) -> str:
        """Serialized rendered DOM."""

    @abstractmethod
    def evaluate_text(self) -> str:
        """Visible text of the rendered DOM."""

    @abstractmethod
    def capture_screenshot(self, fmt: str = "png", full_page: bool = False, timeout: Optional[float] = None) -> bytes:
        """Raster image of the current viewport."""

    @abstractmethod
    def close(self):
        """Terminate the engine. Must be safe to call in any state."""
