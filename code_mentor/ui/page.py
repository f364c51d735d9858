"""Page composition: wires the orchestrator, accordion and diagram renderer.

:class:`AnalysisPage` is the Python counterpart of the analysis screen. It
owns one instance of each component, feeds the analysis result's diagram
to the renderer, and exposes a :class:`PageView` snapshot that the CLI and
the HTML report render from.
"""

import html
from typing import List, Literal, Optional, Union

from pydantic import BaseModel

from code_mentor.api.client import AnalysisClient
from code_mentor.diagram.backend import DiagramBackend
from code_mentor.diagram.renderer import RENDERING_MESSAGE, DiagramRenderer
from code_mentor.models import (
    AnalysisInputs, AnalysisResult, Mode, RequestState, SectionKey,
)
from code_mentor.ui.accordion import AccordionController
from code_mentor.ui.orchestrator import AnalysisTransport, RequestOrchestrator

PLACEHOLDER_MESSAGE = "Your full, interactive code explanation will appear here."
ANALYZING_MESSAGE = "Analyzing repository, this may take a moment..."

SECTION_TITLES = {
    SectionKey.SUMMARY: "Project Summary",
    SectionKey.DIAGRAM: "Architecture Diagram",
    SectionKey.LIBRARIES: "Key Libraries",
    SectionKey.FUNCTIONS: "Functions Analysis",
    SectionKey.STEPS: "Execution Steps",
}


class SectionView(BaseModel):
    key: SectionKey
    title: str
    is_open: bool
    body: str


class PageView(BaseModel):
    """Snapshot of everything the page displays."""

    status: Literal["idle", "loading", "error", "ready"]
    message: Optional[str] = None
    sections: List[SectionView] = []
    diagram_loading: bool = False
    diagram_error: Optional[str] = None
    diagram_markup: str = ""


def _libraries_text(result: AnalysisResult) -> str:
    return "\n".join(f"{lib.name}\n  {lib.explanation}" for lib in result.libraries)


def _functions_text(result: AnalysisResult) -> str:
    blocks = [
        f"{func.name}\n"
        f"  Purpose: {func.purpose}\n"
        f"  Inputs: {func.inputs}\n"
        f"  Outputs: {func.outputs}"
        for func in result.functions
    ]
    return "\n\n".join(blocks)


def build_sections(result: AnalysisResult, accordion: AccordionController) -> List[SectionView]:
    """List the visible sections of a result in display order.

    The diagram section is left out when the result carries no usable diagram.
    """
    bodies = {
        SectionKey.SUMMARY: result.project_summary,
        SectionKey.DIAGRAM: result.architecture_diagram or "",
        SectionKey.LIBRARIES: _libraries_text(result),
        SectionKey.FUNCTIONS: _functions_text(result),
        SectionKey.STEPS: result.execution_steps,
    }
    sections = []
    for key, title in SECTION_TITLES.items():
        if key is SectionKey.DIAGRAM and not result.has_diagram:
            continue
        sections.append(SectionView(
            key=key, title=title, is_open=accordion.is_open(key), body=bodies[key],
        ))
    return sections


class AnalysisPage:
    """The analysis screen: one request lifecycle plus its diagram.

    Attributes:
        accordion: Section disclosure state.
        orchestrator: Request lifecycle, sharing ``accordion``.
        diagram: Renderer for the result's architecture diagram.
    """

    def __init__(self, client: Union[AnalysisClient, AnalysisTransport],
                 backend: Optional[DiagramBackend] = None):
        self.accordion = AccordionController()
        self.orchestrator = RequestOrchestrator(client, self.accordion)
        self.diagram = DiagramRenderer(backend)

    async def analyze(
        self,
        mode: Union[Mode, str],
        inputs: AnalysisInputs,
        render_diagram: bool = True,
    ) -> RequestState:
        """Run one analysis and then render its diagram, if any.

        Only the call owning the orchestrator's latest request touches the
        diagram. A call rejected by validation leaves a pending request's
        diagram alone, and a call superseded by a newer request leaves the
        diagram to that request. Without a backend nothing is rendered.
        """
        before = self.orchestrator.generation
        state = await self.orchestrator.trigger(mode, inputs)
        latest = self.orchestrator.generation

        if latest == before:
            # rejected before any request was issued
            if not state.loading:
                await self.diagram.update(None)
            return state
        if latest != before + 1:
            return state

        result = state.result
        if (render_diagram and self.diagram.backend is not None
                and result is not None and result.has_diagram):
            await self.diagram.update(result.architecture_diagram)
        else:
            await self.diagram.update(None)
        return self.orchestrator.state

    def toggle(self, key: Union[SectionKey, str]) -> Optional[SectionKey]:
        return self.accordion.toggle(key)

    def view(self) -> PageView:
        state = self.orchestrator.state
        if state.loading:
            return PageView(status="loading", message=ANALYZING_MESSAGE)
        if state.error is not None:
            return PageView(status="error", message=state.error)
        if state.result is None:
            return PageView(status="idle", message=PLACEHOLDER_MESSAGE)

        diagram_state = self.diagram.state
        return PageView(
            status="ready",
            sections=build_sections(state.result, self.accordion),
            diagram_loading=diagram_state.loading,
            diagram_error=diagram_state.error,
            diagram_markup=RENDERING_MESSAGE if diagram_state.loading else self.diagram.surface,
        )


_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ background: #111827; color: #e5e7eb; font-family: sans-serif; max-width: 56rem; margin: 2rem auto; }}
h1, h2 {{ color: #22d3ee; }}
section {{ border: 1px solid #374151; border-radius: 8px; padding: 1rem; margin-bottom: 1rem; }}
pre {{ white-space: pre-wrap; font-family: monospace; }}
.diagram {{ background: #fff; padding: 1rem; border-radius: 8px; overflow: auto; text-align: center; }}
</style>
</head>
<body>
<h1>{title}</h1>
{body}
</body>
</html>
"""


def render_html(view: PageView, title: str = "AI Code Mentor") -> str:
    """Build a standalone HTML report with every section expanded.

    Text is escaped; only the diagram markup is embedded verbatim.
    """
    if view.status != "ready":
        body = f"<p>{html.escape(view.message or '')}</p>"
        return _HTML_TEMPLATE.format(title=html.escape(title), body=body)

    parts = []
    for section in view.sections:
        if section.key is SectionKey.DIAGRAM:
            content = f'<div class="diagram">{view.diagram_markup}</div>'
        else:
            content = f"<pre>{html.escape(section.body)}</pre>"
        parts.append(f"<section><h2>{html.escape(section.title)}</h2>\n{content}\n</section>")
    return _HTML_TEMPLATE.format(title=html.escape(title), body="\n".join(parts))
