"""External diagram rendering capability.

The renderer only depends on the :class:`DiagramBackend` call contract:
given a render identifier and Mermaid text, return SVG markup or raise.
:class:`KrokiBackend` fulfils it with a Kroki-compatible HTTP service.
"""

from typing import Any, Optional, Protocol

import httpx

from code_mentor.config import settings
from code_mentor.errors import RenderError


class DiagramBackend(Protocol):
    async def render(self, render_id: str, source: str) -> str:
        """Return SVG markup for ``source``.

        Raises:
            Exception: Any failure; its message is shown to the user.
        """
        ...


class KrokiBackend:
    """Renders Mermaid text to SVG through a Kroki server.

    Attributes:
        base_url: Kroki server URL without trailing slash.
        diagram_type: Kroki diagram type path segment.
        client: httpx.AsyncClient instance for making requests.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        diagram_type: str = "mermaid",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.get_render_base_url()).rstrip("/")
        self.diagram_type = diagram_type
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.CODE_MENTOR_RENDER_TIMEOUT,
            transport=transport,
        )

    async def render(self, render_id: str, source: str) -> str:
        """POST the diagram text and return the SVG body.

        Args:
            render_id: Identifier of this render attempt, sent for correlation.
            source: Mermaid diagram description.

        Returns:
            SVG markup.

        Raises:
            RenderError: If the server rejects the diagram or cannot be reached.
        """
        try:
            resp = await self.client.post(
                f"/{self.diagram_type}/svg",
                content=source.encode("utf-8"),
                headers={"Content-Type": "text/plain", "X-Render-Id": render_id},
            )
        except httpx.RequestError as e:
            raise RenderError(str(e) or type(e).__name__) from e

        if not resp.is_success:
            message = resp.text.strip() or f"Diagram rendering failed with status {resp.status_code}"
            raise RenderError(message)

        if not resp.text.strip():
            raise RenderError("Diagram renderer returned no markup")
        return resp.text

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "KrokiBackend":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
