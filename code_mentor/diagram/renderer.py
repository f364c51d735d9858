"""Asynchronous Mermaid diagram rendering with stale-result suppression.

:class:`DiagramRenderer` owns a DiagramRenderState and the latest
RenderResult. Every call to :meth:`DiagramRenderer.update` takes the next
generation number; a render that completes after a newer update was issued
is discarded, so the surface always reflects the most recent description.
"""

import html
import uuid
from typing import Optional

from code_mentor.diagram.backend import DiagramBackend
from code_mentor.errors import CodeMentorError
from code_mentor.logging import get_logger
from code_mentor.models import (
    DiagramFailure, DiagramRenderState, RenderedDiagram, RenderResult,
)

logger = get_logger(__name__)


RENDERING_MESSAGE = "Rendering diagram..."

ERROR_FRAGMENT = (
    '<div style="color: #f87171; background-color: #450a0a; '
    'border: 1px solid #ef4444; padding: 1rem; border-radius: 8px;">'
    "<strong>Failed to render diagram:</strong><br/>{message}</div>"
)


def new_render_id(generation: int) -> str:
    """Build an identifier that is unique per render attempt."""
    return f"mermaid-chart-{generation}-{uuid.uuid4().hex[:8]}"


def render_markup(result: Optional[RenderResult]) -> str:
    """Turn a render result into display markup.

    Successful renders yield their SVG; failures yield a styled inline
    fragment with the escaped error message; no result yields "".
    """
    if result is None:
        return ""
    if isinstance(result, DiagramFailure):
        return ERROR_FRAGMENT.format(message=html.escape(result.message))
    return result.markup


class DiagramRenderer:
    """Converts diagram descriptions into markup via an external backend.

    Attributes:
        backend: The rendering capability, or None when diagrams are disabled
            and only blank descriptions are passed in.
        state: Loading and error flags for the current description.
        result: Outcome of the latest applied render, or None.
    """

    def __init__(self, backend: Optional[DiagramBackend]):
        self.backend = backend
        self.state = DiagramRenderState()
        self.result: Optional[RenderResult] = None
        self.source: Optional[str] = None
        self._generation = 0

    @property
    def surface(self) -> str:
        """Markup currently shown in the diagram display area."""
        return render_markup(self.result)

    async def update(self, source: Optional[str]) -> Optional[RenderResult]:
        """Render a new diagram description.

        An absent or blank description clears the surface without calling
        the backend. Otherwise the backend is awaited, and its markup or
        failure becomes the new result unless a later update superseded it.

        Args:
            source: Mermaid text, or None.

        Returns:
            The RenderResult produced by this call, whether or not it was
            applied. None when the description was empty.
        """
        self._generation += 1
        generation = self._generation
        self.source = source

        if not source or not source.strip():
            self.state = DiagramRenderState()
            self.result = None
            logger.debug("diagram_cleared", generation=generation)
            return None

        self.state = DiagramRenderState(loading=True)
        render_id = new_render_id(generation)
        logger.info("diagram_render_started", render_id=render_id, chars=len(source))

        outcome: RenderResult
        try:
            markup = await self.backend.render(render_id, source)
            outcome = RenderedDiagram(render_id=render_id, markup=markup)
        except CodeMentorError as e:
            outcome = DiagramFailure(render_id=render_id, message=e.message)
        except Exception as e:
            outcome = DiagramFailure(render_id=render_id, message=str(e) or type(e).__name__)

        if generation != self._generation:
            logger.info("stale_render_discarded", render_id=render_id, latest=self._generation)
            return outcome

        if isinstance(outcome, DiagramFailure):
            logger.warning("diagram_render_failed", render_id=render_id, error=outcome.message)
            self.state = DiagramRenderState(loading=False, error=outcome.message)
        else:
            logger.info("diagram_rendered", render_id=render_id)
            self.state = DiagramRenderState(loading=False)
        self.result = outcome
        return outcome
