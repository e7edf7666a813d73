import time
from typing import Callable, List

from jurl.core import POLL_INTERVAL, logger
from jurl.deadline import Deadline
from jurl.errors import DeadlineExceeded, PipelineError
from jurl.models import OutputMode, RenderRequest, RenderResult, SessionState
from jurl.session import session_for
from jurl.session.base import BrowserSession
from jurl.stages import capture, extract, navigate, wait_for_condition

_log = logger.getChild("pipeline")


class RenderPipeline:
    """
    Pipeline Coordinator: Init -> Launch -> Navigate -> [Wait] -> Extract|Screenshot -> Teardown.
    Invariants:
    - Single attempt: exactly one RenderResult or one PipelineError per run, no retries.
    - Teardown: the session is closed exactly once on every exit path.
    - Propagation: stage errors leave unchanged, only annotated with the stages that completed.
    - Isolation: every run builds its own session from the factory; nothing is reused.
    """

    def __init__(
        self,
        session_factory: Callable[[RenderRequest], BrowserSession] = session_for,
        poll_interval: float = POLL_INTERVAL,
        clock=time.monotonic,
        sleep=time.sleep,
    ):
        self._session_factory = session_factory
        self._poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    def run(self, request: RenderRequest) -> RenderResult:
        deadline = Deadline(request.timeout, clock=self._clock)
        session = self._session_factory(request)
        completed: List[str] = []

        try:
            self._launch(session, deadline)
            completed.append("launch")

            response = navigate(session, request, deadline)
            completed.append("navigate")

            if wait_for_condition(session, request.wait_selector, deadline, self._poll_interval, sleep=self._sleep):
                completed.append("wait")
            session.advance(SessionState.READY)

            if request.output_mode is OutputMode.SCREENSHOT:
                payload = capture(session, request, deadline)
                completed.append("screenshot")
            else:
                payload = extract(session, request.output_mode, response, deadline)
                completed.append("extract")
        except PipelineError as exc:
            exc.completed_stages = tuple(completed)
            _log.debug(f"* Run failed after [{', '.join(completed) or 'nothing'}]: {exc.describe()}")
            raise
        finally:
            self._teardown(session)

        return RenderResult(
            payload=payload,
            response=response,
            mode=request.output_mode,
            stages=tuple(completed),
        )

    def _launch(self, session: BrowserSession, deadline: Deadline):
        remaining = deadline.checkpoint("engine launch")
        try:
            session.launch(remaining)
        except DeadlineExceeded as exc:
            raise DeadlineExceeded(deadline.timeout, "engine launch") from exc
        session.advance(SessionState.LAUNCHED)

    def _teardown(self, session: BrowserSession):
        try:
            session.close()
        except Exception as exc:
            # Teardown must not replace the run's outcome
            _log.warning(f"[TEARDOWN] closing session failed: {exc}")
        finally:
            session.advance(SessionState.CLOSED)
        _log.debug("* Connection closed")
