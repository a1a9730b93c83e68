"""Tests for MealVisionClient against the in-process app."""

import pytest
from httpx import ASGITransport

from meal_vision.capture import capture_image
from meal_vision.client import AnalyzeRequestError, MealVisionClient
from meal_vision.main import app
from meal_vision.models.nutrition import MealAnalysis

from conftest import StubGateway, make_png


@pytest.fixture
async def api_client():
    client = MealVisionClient("http://test", transport=ASGITransport(app=app))
    yield client
    await client.close()


@pytest.mark.asyncio
async def test_login_and_analyze(api_client, use_gateway, stub_gateway):
    use_gateway(stub_gateway)

    assert await api_client.login("letmein") is True
    assert await api_client.is_authenticated() is True

    analysis = await api_client.analyze(capture_image(make_png()))

    assert isinstance(analysis, MealAnalysis)
    assert analysis.total_calories == 650


@pytest.mark.asyncio
async def test_refine_sends_same_image_with_new_context(api_client, use_gateway, stub_gateway):
    use_gateway(stub_gateway)
    await api_client.login("letmein")
    capture = capture_image(make_png(), context="dinner")

    first = await api_client.analyze(capture)
    second = await api_client.refine(capture, "the rice was brown rice")

    assert first == second
    assert first is not second
    assert [c["context"] for c in stub_gateway.calls] == ["dinner", "the rice was brown rice"]
    assert stub_gateway.calls[0]["image_base64"] == stub_gateway.calls[1]["image_base64"]


@pytest.mark.asyncio
async def test_failure_envelope_raises(api_client, use_gateway):
    use_gateway(StubGateway(response="not json at all"))
    await api_client.login("letmein")

    with pytest.raises(AnalyzeRequestError) as exc_info:
        await api_client.analyze(capture_image(make_png()))

    assert exc_info.value.code == "PARSE_ERROR"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_sessions_are_per_client(use_gateway, stub_gateway):
    use_gateway(stub_gateway)
    transport = ASGITransport(app=app)

    async with MealVisionClient("http://test", transport=transport) as alice, \
            MealVisionClient("http://test", transport=transport) as bob:
        assert await alice.login("letmein") is True

        with pytest.raises(AnalyzeRequestError) as exc_info:
            await bob.analyze(capture_image(make_png()))

        assert exc_info.value.code == "UNAUTHORIZED"
        assert await bob.login("wrong") is False


@pytest.mark.asyncio
async def test_logout(api_client):
    await api_client.login("letmein")

    await api_client.logout()

    assert await api_client.is_authenticated() is False
