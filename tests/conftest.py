"""Shared test fixtures for the code-mentor test suite."""

from typing import Dict

import pytest
from code_mentor.models import AnalysisResult, ArchiveUpload

from fakes import FakeBackend


@pytest.fixture
def sample_payload() -> Dict:
    """A well-formed analysis response body."""
    return {
        "project_summary": "A small CLI that greets users.",
        "libraries": [
            {"name": "click", "explanation": "Builds the command line interface."},
            {"name": "rich", "explanation": "Prints colored output."},
        ],
        "functions": [
            {
                "name": "greet",
                "purpose": "Print a greeting.",
                "inputs": "name: str",
                "outputs": "None",
            },
        ],
        "execution_steps": "1. Parse arguments\n2. Call greet()\n3. Exit",
        "architecture_diagram": "graph TD; A[CLI]-->B[greet];",
    }


@pytest.fixture
def sample_result(sample_payload: Dict) -> AnalysisResult:
    """Create a sample AnalysisResult for testing."""
    return AnalysisResult.model_validate(sample_payload)


@pytest.fixture
def sample_result_without_diagram(sample_payload: Dict) -> AnalysisResult:
    """Create a sample AnalysisResult with no diagram."""
    payload = dict(sample_payload, architecture_diagram=None)
    return AnalysisResult.model_validate(payload)


@pytest.fixture
def sample_archive() -> ArchiveUpload:
    """Create an in-memory zip upload (content need not be a real archive)."""
    return ArchiveUpload(filename="project.zip", content=b"PK\x03\x04fake-zip-bytes")


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()
