"""Data models shared by the request, rendering, and presentation layers."""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Trimmed diagram text at or below this length is treated as "no diagram"
MIN_DIAGRAM_LENGTH = 10


class Mode(str, Enum):
    """Mutually exclusive ways of supplying code for analysis."""
    REPO = "repo"
    SNIPPET = "snippet"
    ZIP = "zip"


class SectionKey(str, Enum):
    """Result panels that the accordion can expand."""
    SUMMARY = "summary"
    DIAGRAM = "diagram"
    LIBRARIES = "libraries"
    FUNCTIONS = "functions"
    STEPS = "steps"


class LibraryInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    explanation: str


class FunctionInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    purpose: str
    inputs: str
    outputs: str


class AnalysisResult(BaseModel):
    """Structured explanation returned by the analysis service.

    Immutable once received; a new request replaces it wholesale.
    """

    model_config = ConfigDict(frozen=True)

    project_summary: str
    libraries: List[LibraryInfo] = Field(default_factory=list)
    functions: List[FunctionInfo] = Field(default_factory=list)
    execution_steps: str
    architecture_diagram: Optional[str] = None

    @property
    def has_diagram(self) -> bool:
        """Whether the diagram is substantial enough to display."""
        if self.architecture_diagram is None:
            return False
        return len(self.architecture_diagram.strip()) > MIN_DIAGRAM_LENGTH


class ArchiveUpload(BaseModel):
    """An archive selected for upload, held in memory."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes
    content_type: str = "application/zip"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ArchiveUpload":
        """Read an archive from disk.

        Raises:
            FileNotFoundError: If the path does not point at a file.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(path)
        return cls(filename=path.name, content=path.read_bytes())


class AnalysisInputs(BaseModel):
    """Captured values of the three input fields.

    Only the field belonging to the active mode is read.
    """

    github_url: str = ""
    code: str = ""
    archive: Optional[ArchiveUpload] = None


class RequestDescriptor(BaseModel):
    """Everything the transport needs to issue one analysis POST."""

    model_config = ConfigDict(frozen=True)

    mode: Mode
    endpoint: str
    encoding: Literal["json", "multipart"]
    json_body: Optional[Dict[str, str]] = None
    upload: Optional[ArchiveUpload] = None
    headers: Dict[str, str] = Field(default_factory=dict)


class RequestState(BaseModel):
    """Three-state view of the current analysis request."""

    loading: bool = False
    error: Optional[str] = None
    result: Optional[AnalysisResult] = None


class DiagramRenderState(BaseModel):
    loading: bool = False
    error: Optional[str] = None


class RenderedDiagram(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["rendered"] = "rendered"
    render_id: str
    markup: str


class DiagramFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failed"] = "failed"
    render_id: str
    message: str


RenderResult = Union[RenderedDiagram, DiagramFailure]
