"""Lifecycle management for a single analysis request.

The orchestrator turns a ``(mode, inputs)`` pair into one request through
:func:`build_request` and :class:`AnalysisClient`, and keeps the
loading / error / result state the page renders from.

Each trigger takes the next generation number. A completion whose
generation is no longer the latest is discarded, so when two requests
overlap the last one issued wins regardless of which answers first.
"""

from typing import Optional, Protocol, Union

from code_mentor.api.client import build_request
from code_mentor.errors import CodeMentorError, InputValidationError
from code_mentor.logging import get_logger
from code_mentor.models import (
    AnalysisInputs, AnalysisResult, Mode, RequestDescriptor, RequestState,
)
from code_mentor.ui.accordion import AccordionController

logger = get_logger(__name__)


class AnalysisTransport(Protocol):
    async def send(self, descriptor: RequestDescriptor) -> AnalysisResult: ...


class RequestOrchestrator:
    """Owns RequestState and mutates it only from :meth:`trigger`.

    Attributes:
        client: Transport used to issue the request.
        accordion: Reset to the default section on every accepted trigger.
        state: Current RequestState. Replaced, never merged.
    """

    def __init__(self, client: AnalysisTransport, accordion: Optional[AccordionController] = None):
        self.client = client
        self.accordion = accordion or AccordionController()
        self.state = RequestState()
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of requests issued so far."""
        return self._generation

    async def trigger(self, mode: Union[Mode, str], inputs: AnalysisInputs) -> RequestState:
        """Validate input, issue one request, and record its outcome.

        Validation failures set ``error`` without touching the network.
        Otherwise the previous result and error are cleared, ``loading``
        is set for the duration of the call, and the outcome is stored
        unless a newer trigger has started in the meantime.

        Args:
            mode: The active input mode.
            inputs: Captured input field values.

        Returns:
            The RequestState after this call finished.
        """
        mode = Mode(mode)
        try:
            descriptor = build_request(mode, inputs)
        except InputValidationError as e:
            logger.info("analysis_rejected", mode=mode.value, reason=e.message)
            self.state = RequestState(loading=self.state.loading, error=e.message)
            return self.state

        self._generation += 1
        generation = self._generation
        self.state = RequestState(loading=True)
        self.accordion.reset()
        logger.info("analysis_started", mode=mode.value, endpoint=descriptor.endpoint,
                    generation=generation)

        result: Optional[AnalysisResult] = None
        error: Optional[str] = None
        try:
            result = await self.client.send(descriptor)
        except CodeMentorError as e:
            error = e.message
        except BaseException:
            # Unexpected failure or cancellation: clear loading, then propagate
            if generation == self._generation:
                self.state = RequestState(loading=False)
            raise

        if generation != self._generation:
            logger.info("stale_response_discarded", generation=generation,
                        latest=self._generation)
            return self.state

        if error is not None:
            logger.warning("analysis_failed", mode=mode.value, error=error)
        else:
            logger.info("analysis_succeeded", mode=mode.value,
                        libraries=len(result.libraries), functions=len(result.functions))
        self.state = RequestState(loading=False, error=error, result=result)
        return self.state
