"""HTTP client for the code-analysis service.

This module maps an input mode to a request descriptor and issues the
corresponding POST with an asynchronous httpx client, translating every
failure into the error taxonomy in ``code_mentor.errors``.
"""

from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from code_mentor.config import settings
from code_mentor.errors import (
    InputValidationError, ParseError, ServerError, TransportError,
)
from code_mentor.logging import get_logger
from code_mentor.models import (
    AnalysisInputs, AnalysisResult, Mode, RequestDescriptor,
)

logger = get_logger(__name__)


GENERIC_ERROR_MESSAGE = "An unknown error occurred."
INVALID_RESPONSE_MESSAGE = "The analysis service returned an unexpected response."

ENDPOINTS: Dict[Mode, str] = {
    Mode.REPO: "/analyze-repo",
    Mode.SNIPPET: "/analyze-code",
    Mode.ZIP: "/analyze-zip",
}

VALIDATION_MESSAGES: Dict[Mode, str] = {
    Mode.REPO: "Please enter a GitHub repository URL.",
    Mode.SNIPPET: "Please paste some code to analyze.",
    Mode.ZIP: "Please select a .zip file to analyze.",
}

JSON_HEADERS = {"Content-Type": "application/json"}


def build_request(mode: Mode, inputs: AnalysisInputs) -> RequestDescriptor:
    """Map a mode and its input value to a request descriptor.

    Pure function: no I/O happens here, so validation failures are
    guaranteed to precede any network call.

    Args:
        mode: The active input mode.
        inputs: Captured input field values.

    Returns:
        RequestDescriptor with endpoint, encoding, body and headers.

    Raises:
        InputValidationError: If the active mode's input is empty.
    """
    mode = Mode(mode)
    endpoint = ENDPOINTS[mode]

    if mode is Mode.REPO:
        if not inputs.github_url.strip():
            raise InputValidationError(VALIDATION_MESSAGES[mode])
        return RequestDescriptor(
            mode=mode,
            endpoint=endpoint,
            encoding="json",
            json_body={"github_url": inputs.github_url.strip()},
            headers=dict(JSON_HEADERS),
        )

    if mode is Mode.SNIPPET:
        if not inputs.code.strip():
            raise InputValidationError(VALIDATION_MESSAGES[mode])
        return RequestDescriptor(
            mode=mode,
            endpoint=endpoint,
            encoding="json",
            json_body={"code": inputs.code},
            headers=dict(JSON_HEADERS),
        )

    if inputs.archive is None:
        raise InputValidationError(VALIDATION_MESSAGES[mode])
    # No Content-Type here: httpx must generate the multipart boundary itself
    return RequestDescriptor(
        mode=mode,
        endpoint=endpoint,
        encoding="multipart",
        upload=inputs.archive,
    )


def _extract_detail(response: httpx.Response) -> str:
    """Pull a user-facing message out of an error response body.

    Handles both ``{"detail": "..."}`` and FastAPI validation bodies where
    ``detail`` is a list of ``{"msg": "..."}`` objects.
    """
    try:
        body = response.json()
    except ValueError:
        logger.warning("server_error_body_unparsable", status=response.status_code)
        return GENERIC_ERROR_MESSAGE

    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list):
        messages = [
            item["msg"] for item in detail
            if isinstance(item, dict) and isinstance(item.get("msg"), str)
        ]
        if messages:
            return "; ".join(messages)
    return GENERIC_ERROR_MESSAGE


class AnalysisClient:
    """Asynchronous client for the analysis service.

    Wraps an ``httpx.AsyncClient`` bound to the configured base URL. One
    call to :meth:`send` issues exactly one POST.

    Attributes:
        base_url: Analysis service URL without trailing slash.
        client: httpx.AsyncClient instance for making requests.

    Example:
        >>> client = AnalysisClient()
        >>> descriptor = build_request(Mode.REPO, AnalysisInputs(github_url=url))
        >>> result = await client.send(descriptor)
        >>> print(result.project_summary)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the analysis client.

        Args:
            base_url: Service URL. If not provided, uses CODE_MENTOR_API_URL from settings.
            timeout: Per-request timeout in seconds. Defaults to CODE_MENTOR_REQUEST_TIMEOUT.
            transport: Optional httpx transport, mainly for tests.
        """
        self.base_url = (base_url or settings.get_api_base_url()).rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=timeout or settings.CODE_MENTOR_REQUEST_TIMEOUT,
            follow_redirects=True,
            transport=transport,
        )

    async def _post(self, descriptor: RequestDescriptor) -> httpx.Response:
        logger.debug("posting_analysis_request", mode=descriptor.mode.value,
                     url=f"{self.base_url}{descriptor.endpoint}")
        if descriptor.encoding == "json":
            return await self.client.post(
                descriptor.endpoint,
                json=descriptor.json_body,
                headers=descriptor.headers,
            )

        upload = descriptor.upload
        return await self.client.post(
            descriptor.endpoint,
            files={"file": (upload.filename, upload.content, upload.content_type)},
        )

    async def send(self, descriptor: RequestDescriptor) -> AnalysisResult:
        """Issue the request described by ``descriptor`` and parse the result.

        Args:
            descriptor: Output of :func:`build_request`.

        Returns:
            The parsed AnalysisResult.

        Raises:
            TransportError: If no response was received.
            ServerError: If the service answered with a non-success status.
            ParseError: If a success body is not a valid AnalysisResult.
        """
        try:
            response = await self._post(descriptor)
        except httpx.RequestError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        if not response.is_success:
            raise ServerError(_extract_detail(response), status_code=response.status_code)

        try:
            payload: Any = response.json()
            return AnalysisResult.model_validate(payload)
        except (ValueError, ValidationError) as e:
            raise ParseError(INVALID_RESPONSE_MESSAGE) from e

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "AnalysisClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
