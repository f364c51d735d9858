"""Tests for the analysis request lifecycle."""

import asyncio

import pytest
import respx
from httpx import Response
from code_mentor.api.client import AnalysisClient
from code_mentor.errors import ParseError, ServerError, TransportError
from code_mentor.models import AnalysisInputs, Mode, SectionKey
from code_mentor.ui.accordion import AccordionController
from code_mentor.ui.orchestrator import RequestOrchestrator

from fakes import GatedClient, RecordingClient, settle

API_URL = "http://analysis.test"


class TestValidation:
    """Empty inputs never reach the network."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode,expected", [
        (Mode.REPO, "Please enter a GitHub repository URL."),
        (Mode.SNIPPET, "Please paste some code to analyze."),
        (Mode.ZIP, "Please select a .zip file to analyze."),
    ])
    async def test_empty_input_sets_error_without_call(self, mode, expected):
        client = RecordingClient()
        orchestrator = RequestOrchestrator(client)

        state = await orchestrator.trigger(mode, AnalysisInputs())

        assert client.calls == []
        assert state.error == expected
        assert state.result is None
        assert state.loading is False
        assert orchestrator.generation == 0

    @pytest.mark.asyncio
    async def test_validation_error_replaces_previous_result(self, sample_result):
        client = RecordingClient(outcome=sample_result)
        orchestrator = RequestOrchestrator(client)
        await orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/a/b"))

        state = await orchestrator.trigger(Mode.SNIPPET, AnalysisInputs(code=""))

        assert state.result is None
        assert state.error == "Please paste some code to analyze."


class TestOutcomes:

    @pytest.mark.asyncio
    async def test_success_stores_result(self, sample_result):
        client = RecordingClient(outcome=sample_result)
        orchestrator = RequestOrchestrator(client)

        state = await orchestrator.trigger(Mode.SNIPPET, AnalysisInputs(code="print('hi')"))

        assert state.result == sample_result
        assert state.error is None
        assert state.loading is False
        assert client.calls[0].endpoint == "/analyze-code"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failure", [
        ServerError("invalid syntax", status_code=422),
        TransportError("Connection refused"),
        ParseError("The analysis service returned an unexpected response."),
    ])
    async def test_failures_store_error_and_clear_loading(self, failure):
        orchestrator = RequestOrchestrator(RecordingClient(outcome=failure))

        state = await orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/a/b"))

        assert state.error == failure.message
        assert state.result is None
        assert state.loading is False

    @pytest.mark.asyncio
    async def test_unexpected_exception_clears_loading_and_propagates(self):
        orchestrator = RequestOrchestrator(RecordingClient(outcome=RuntimeError("bug")))

        with pytest.raises(RuntimeError):
            await orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/a/b"))

        assert orchestrator.state.loading is False

    @pytest.mark.asyncio
    async def test_new_result_replaces_previous(self, sample_result, sample_result_without_diagram):
        client = RecordingClient(outcome=sample_result)
        orchestrator = RequestOrchestrator(client)
        await orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/a/b"))

        client.outcome = sample_result_without_diagram
        state = await orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/c/d"))

        assert state.result == sample_result_without_diagram
        assert state.result.architecture_diagram is None


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_start_clears_state_and_resets_accordion(self, sample_result):
        """Before the response arrives, result and error are cleared and summary is open."""
        client = GatedClient()
        accordion = AccordionController()
        orchestrator = RequestOrchestrator(client, accordion)

        client.queue(ServerError("first failed"))
        first = asyncio.create_task(
            orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/a/b"))
        )
        await settle()
        client.gates[0].set()
        await first
        assert orchestrator.state.error == "first failed"

        accordion.toggle(SectionKey.STEPS)
        client.queue(sample_result)
        second = asyncio.create_task(
            orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/a/b"))
        )
        await settle()

        assert orchestrator.state.loading is True
        assert orchestrator.state.error is None
        assert orchestrator.state.result is None
        assert accordion.open_section is SectionKey.SUMMARY

        client.gates[1].set()
        state = await second
        assert state.loading is False
        assert state.result == sample_result

    @pytest.mark.asyncio
    async def test_last_issued_request_wins(self, sample_result, sample_result_without_diagram):
        """A response that arrives after a newer request was issued is discarded."""
        client = GatedClient()
        orchestrator = RequestOrchestrator(client)
        client.queue(sample_result)
        client.queue(sample_result_without_diagram)

        older = asyncio.create_task(
            orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/old/repo"))
        )
        await settle()
        newer = asyncio.create_task(
            orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/new/repo"))
        )
        await settle()

        # The newer request answers first
        client.gates[1].set()
        await newer
        assert orchestrator.state.result == sample_result_without_diagram

        client.gates[0].set()
        await older

        assert orchestrator.state.result == sample_result_without_diagram
        assert orchestrator.state.error is None
        assert orchestrator.state.loading is False

    @pytest.mark.asyncio
    async def test_stale_response_does_not_clear_loading(self, sample_result):
        client = GatedClient()
        orchestrator = RequestOrchestrator(client)
        client.queue(ServerError("stale"))
        client.queue(sample_result)

        older = asyncio.create_task(
            orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/a/b"))
        )
        await settle()
        newer = asyncio.create_task(
            orchestrator.trigger(Mode.REPO, AnalysisInputs(github_url="https://github.com/a/b"))
        )
        await settle()

        client.gates[0].set()
        await older

        assert orchestrator.state.loading is True
        assert orchestrator.state.error is None

        client.gates[1].set()
        await newer
        assert orchestrator.state.result == sample_result


# --- End-to-end through the HTTP client ---

@respx.mock
@pytest.mark.asyncio
async def test_repo_end_to_end_success(sample_payload):
    respx.post(f"{API_URL}/analyze-repo").mock(return_value=Response(200, json=sample_payload))

    async with AnalysisClient(base_url=API_URL) as client:
        orchestrator = RequestOrchestrator(client)
        state = await orchestrator.trigger(
            Mode.REPO, AnalysisInputs(github_url="https://github.com/user/repo")
        )

    assert state.result.model_dump() == sample_payload
    assert state.error is None
    assert state.loading is False


@respx.mock
@pytest.mark.asyncio
async def test_snippet_end_to_end_server_error():
    respx.post(f"{API_URL}/analyze-code").mock(
        return_value=Response(422, json={"detail": "invalid syntax"})
    )

    async with AnalysisClient(base_url=API_URL) as client:
        orchestrator = RequestOrchestrator(client)
        state = await orchestrator.trigger(Mode.SNIPPET, AnalysisInputs(code="def ("))

    assert state.error == "invalid syntax"
    assert state.result is None
    assert state.loading is False


@respx.mock
@pytest.mark.asyncio
async def test_zip_end_to_end_without_file_makes_no_call():
    route = respx.post(f"{API_URL}/analyze-zip").mock(return_value=Response(200, json={}))

    async with AnalysisClient(base_url=API_URL) as client:
        orchestrator = RequestOrchestrator(client)
        state = await orchestrator.trigger(Mode.ZIP, AnalysisInputs())

    assert state.error == "Please select a .zip file to analyze."
    assert route.call_count == 0
    assert len(respx.calls) == 0
