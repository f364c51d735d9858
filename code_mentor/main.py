"""Command line entry point for code-mentor."""

import asyncio
import sys
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Optional

import typer

from code_mentor.api.client import AnalysisClient
from code_mentor.diagram.backend import KrokiBackend
from code_mentor.logging import configure_logging, get_logger
from code_mentor.models import AnalysisInputs, ArchiveUpload, Mode, SectionKey
from code_mentor.ui.page import AnalysisPage, PageView, render_html

app = typer.Typer(help="Get a beginner-friendly explanation of a codebase.")
logger = get_logger(__name__)

ALL_SECTIONS = "all"


def _print_view(view: PageView, show_all: bool) -> None:
    for section in view.sections:
        expanded = show_all or section.is_open
        typer.echo(f"{'▼' if expanded else '▶'} {section.title}")
        if not expanded:
            continue
        if section.key is SectionKey.DIAGRAM and view.diagram_error:
            typer.echo(f"  Failed to render diagram: {view.diagram_error}")
        typer.echo(section.body)
        typer.echo("")


def _write_diagram(view: PageView, path: Path) -> None:
    if not any(s.key is SectionKey.DIAGRAM for s in view.sections):
        typer.echo("No architecture diagram in this analysis.", err=True)
        return
    if not view.diagram_markup:
        typer.echo("No diagram was rendered; nothing written.", err=True)
        return
    path.write_text(view.diagram_markup, encoding="utf-8")
    typer.echo(f"Diagram written to {path}", err=True)


async def _analyze(
    mode: Mode,
    inputs: AnalysisInputs,
    section: str,
    api_url: Optional[str],
    render_diagram: bool,
) -> PageView:
    async with AsyncExitStack() as stack:
        client = await stack.enter_async_context(AnalysisClient(base_url=api_url))
        backend = None
        if render_diagram:
            backend = await stack.enter_async_context(KrokiBackend())
        page = AnalysisPage(client, backend)
        await page.analyze(mode, inputs, render_diagram=render_diagram)
        if section not in (ALL_SECTIONS, SectionKey.SUMMARY.value):
            page.toggle(section)
        return page.view()


def _run(
    mode: Mode,
    inputs: AnalysisInputs,
    section: str,
    diagram_out: Optional[Path],
    html_out: Optional[Path],
    no_diagram: bool,
    api_url: Optional[str],
) -> None:
    if section != ALL_SECTIONS:
        try:
            SectionKey(section)
        except ValueError:
            raise typer.BadParameter(
                f"must be one of: {', '.join(k.value for k in SectionKey)}, {ALL_SECTIONS}",
                param_hint="--section",
            ) from None

    view = asyncio.run(_analyze(mode, inputs, section, api_url, not no_diagram))

    if view.status == "error":
        typer.echo(f"Error: {view.message}", err=True)
        raise typer.Exit(code=1)

    _print_view(view, show_all=section == ALL_SECTIONS)
    if diagram_out is not None:
        _write_diagram(view, diagram_out)
    if html_out is not None:
        html_out.write_text(render_html(view), encoding="utf-8")
        typer.echo(f"Report written to {html_out}", err=True)


SECTION_OPTION = typer.Option(
    SectionKey.SUMMARY.value, "--section", "-s",
    help="Section to expand: summary, diagram, libraries, functions, steps, or all",
)
DIAGRAM_OUT_OPTION = typer.Option(None, "--diagram-out", help="Write the rendered diagram (SVG) here")
HTML_OPTION = typer.Option(None, "--html", help="Write a standalone HTML report here")
NO_DIAGRAM_OPTION = typer.Option(False, "--no-diagram", help="Skip diagram rendering")
API_URL_OPTION = typer.Option(None, "--api-url", help="Override CODE_MENTOR_API_URL")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
) -> None:
    """Analyze a repository, a snippet, or a zip archive."""
    configure_logging(level=log_level)


@app.command()
def repo(
    github_url: str = typer.Argument("", help="Public GitHub repository URL"),
    section: str = SECTION_OPTION,
    diagram_out: Optional[Path] = DIAGRAM_OUT_OPTION,
    html_out: Optional[Path] = HTML_OPTION,
    no_diagram: bool = NO_DIAGRAM_OPTION,
    api_url: Optional[str] = API_URL_OPTION,
) -> None:
    """Analyze a public GitHub repository."""
    _run(Mode.REPO, AnalysisInputs(github_url=github_url),
         section, diagram_out, html_out, no_diagram, api_url)


@app.command()
def snippet(
    source: str = typer.Argument("-", help="File containing the code, or '-' for stdin"),
    section: str = SECTION_OPTION,
    diagram_out: Optional[Path] = DIAGRAM_OUT_OPTION,
    html_out: Optional[Path] = HTML_OPTION,
    no_diagram: bool = NO_DIAGRAM_OPTION,
    api_url: Optional[str] = API_URL_OPTION,
) -> None:
    """Analyze a pasted code snippet."""
    if source == "-":
        code = sys.stdin.read()
    else:
        try:
            code = Path(source).read_text(encoding="utf-8")
        except OSError as e:
            raise typer.BadParameter(
                f"cannot read {source}: {e.strerror or e}", param_hint="SOURCE",
            ) from None
    _run(Mode.SNIPPET, AnalysisInputs(code=code),
         section, diagram_out, html_out, no_diagram, api_url)


@app.command(name="zip")
def zip_archive(
    path: Optional[Path] = typer.Argument(None, help="Zip archive to upload"),
    section: str = SECTION_OPTION,
    diagram_out: Optional[Path] = DIAGRAM_OUT_OPTION,
    html_out: Optional[Path] = HTML_OPTION,
    no_diagram: bool = NO_DIAGRAM_OPTION,
    api_url: Optional[str] = API_URL_OPTION,
) -> None:
    """Analyze an uploaded .zip archive."""
    archive = None
    if path is not None:
        try:
            archive = ArchiveUpload.from_path(path)
        except FileNotFoundError:
            logger.warning("archive_not_found", path=str(path))
    _run(Mode.ZIP, AnalysisInputs(archive=archive),
         section, diagram_out, html_out, no_diagram, api_url)


if __name__ == "__main__":
    app()
