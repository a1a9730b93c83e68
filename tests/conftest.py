"""Pytest configuration and fixtures."""

import asyncio
import base64
import io
import json
import os
from typing import AsyncGenerator

# Settings are cached at import; configure before the app is imported
os.environ["ACCESS_CODE"] = "letmein"
os.environ["SESSION_SECRET"] = "test-secret"
os.environ["LLM_PROVIDER"] = "openai"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

from meal_vision.api.dependencies import get_gateway, get_session_gate
from meal_vision.main import app
from meal_vision.services.model_gateway import MealAnalysisGateway


class StubGateway(MealAnalysisGateway):
    """Gateway double returning canned output, raising, or hanging."""

    def __init__(
        self,
        response: str | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        timeout: float = 30.0,
    ):
        super().__init__(timeout=timeout)
        self.response = response
        self.error = error
        self.delay = delay
        self.calls: list[dict] = []

    @property
    def provider_name(self) -> str:
        return "stub/test"

    async def _complete(self, image_base64, mime_type, context=None):
        self.calls.append(
            {"image_base64": image_base64, "mime_type": mime_type, "context": context}
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response

    async def health_check(self) -> bool:
        return True


@pytest.fixture
def sample_analysis() -> dict:
    """Schema-conforming MealAnalysis payload (wire format)."""
    return {
        "totalCalories": 650,
        "macros": {
            "protein": 35,
            "carbohydrates": 70,
            "fat": 22,
            "fiber": 8,
            "sugar": None,
        },
        "foodItems": [
            {"name": "Grilled chicken breast", "estimatedPortion": "150 g", "calories": 250},
            {"name": "White rice", "estimatedPortion": "1 cup", "calories": 205},
            {"name": "Steamed broccoli", "estimatedPortion": "1 cup", "calories": 55},
            {"name": "Teriyaki sauce", "estimatedPortion": "2 tbsp", "calories": 140},
        ],
        "confidence": "medium",
        "notes": "Sauce quantity is hard to judge from the photo.",
    }


@pytest.fixture
def sample_analysis_json(sample_analysis) -> str:
    return json.dumps(sample_analysis)


def make_png(width: int = 10, height: int = 10, color=(200, 40, 40)) -> bytes:
    """Encode a solid-color PNG."""
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_base64() -> str:
    """A valid 10x10 PNG, base64 encoded."""
    return base64.b64encode(make_png()).decode("utf-8")


@pytest.fixture
def stub_gateway(sample_analysis_json) -> StubGateway:
    return StubGateway(response=sample_analysis_json)


@pytest.fixture
def use_gateway():
    """
    Install a gateway for the app.

    Usage:
        def test_x(use_gateway):
            use_gateway(StubGateway(response="..."))
    """
    def _install(gateway: MealAnalysisGateway) -> MealAnalysisGateway:
        app.dependency_overrides[get_gateway] = lambda: (lambda: gateway)
        return gateway

    yield _install
    app.dependency_overrides.pop(get_gateway, None)


@pytest.fixture
def auth_headers() -> dict:
    """Bearer header for a freshly issued session."""
    token = get_session_gate().issue("letmein")
    assert token is not None
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """
    Create async test client.

    Usage:
        async def test_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
