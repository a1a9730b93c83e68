"""HTTP client for the Meal Vision API."""

import logging

import httpx

from meal_vision.capture import CapturedImage
from meal_vision.models.nutrition import MealAnalysis

logger = logging.getLogger(__name__)


class AnalyzeRequestError(Exception):
    """Failure envelope returned by the analyze endpoint."""

    def __init__(self, code: str, message: str, status_code: int):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.status_code = status_code


class MealVisionClient:
    """
    Client for the analyze and auth endpoints.

    Session state lives in this instance's cookie jar; two clients never
    share a session.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 45.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Base URL of the API (e.g., "http://localhost:8000")
            timeout: Request timeout in seconds; above the server's model timeout
            transport: Optional transport (e.g. ASGITransport for tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MealVisionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def login(self, code: str) -> bool:
        """
        Exchange the access code for a session.

        Returns:
            True if the code was accepted
        """
        client = await self._get_client()
        response = await client.post("/auth", json={"code": code})
        if response.status_code == 200 and response.json().get("success"):
            return True
        logger.info(f"Login rejected: {response.status_code}")
        return False

    async def is_authenticated(self) -> bool:
        """Check whether the current session is valid."""
        client = await self._get_client()
        response = await client.get("/auth")
        response.raise_for_status()
        return response.json().get("authenticated") is True

    async def logout(self) -> None:
        """Revoke the session."""
        client = await self._get_client()
        response = await client.delete("/auth")
        response.raise_for_status()
        client.cookies.clear()

    async def analyze(
        self, capture: CapturedImage, context: str | None = None
    ) -> MealAnalysis:
        """
        Analyze a captured image.

        Args:
            capture: Compressed image with optional context
            context: Overrides the capture's context when given

        Returns:
            Validated MealAnalysis

        Raises:
            AnalyzeRequestError: If the API returns a failure envelope
        """
        client = await self._get_client()

        logger.debug(
            f"Sending analyze request (image size: {capture.image.compressed_size} bytes)"
        )
        response = await client.post("/analyze", json=capture.to_request(context))
        data = response.json()

        if not data.get("success"):
            raise AnalyzeRequestError(
                code=data.get("code", "INTERNAL_ERROR"),
                message=data.get("error", "Request failed"),
                status_code=response.status_code,
            )

        return MealAnalysis.model_validate(data["data"])

    async def refine(self, capture: CapturedImage, context: str) -> MealAnalysis:
        """
        Re-run the analysis on the same image with new context.

        Yields a fresh MealAnalysis; the previous one is not modified.
        """
        return await self.analyze(capture.with_context(context))
