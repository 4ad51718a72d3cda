"""Tests for the generative-AI proxy routes."""

import httpx
import pytest
from httpx import AsyncClient

from src.config import Settings, get_settings
from src.services.ai import AIService, GeminiProvider, OpenAIProvider, get_provider
from src.services.errors import ServiceNotConfiguredError, UpstreamServiceError

QURAN_API = "https://api.alquran.cloud/v1"


@pytest.mark.asyncio
async def test_ai_routes_require_session(client: AsyncClient, ai_provider):
    for path, body in (
        ("/api/ask", {"question": "What is zakat?"}),
        ("/api/explain", {"term": "Tawhid"}),
        ("/api/scholar", {"name": "Imam Nawawi"}),
        ("/api/quran/explain", {"surah": 1, "ayah": 1}),
    ):
        response = await client.post(path, json=body)
        assert response.status_code == 401
    assert ai_provider.calls == []


@pytest.mark.asyncio
async def test_ask_stores_answered_question(auth_client: AsyncClient, ai_provider):
    ai_provider.reply = "Zakat is obligatory charity."
    response = await auth_client.post("/api/ask", json={"question": "What is zakat?"})
    assert response.status_code == 200
    data = response.json()
    assert data["answer"] == "Zakat is obligatory charity."
    assert data["status"] == "answered"

    stored = (await auth_client.get(f"/api/questions/{data['questionId']}")).json()
    assert stored["status"] == "answered"
    assert stored["answer"] == "Zakat is obligatory charity."
    assert stored["answeredAt"] is not None

    system, user = ai_provider.calls[0]
    assert system.role == "system"
    assert user.content == "What is zakat?"


@pytest.mark.asyncio
async def test_ask_failure_leaves_question_pending(auth_client: AsyncClient, ai_provider):
    request = httpx.Request("POST", "https://example.invalid")
    ai_provider.error = httpx.HTTPStatusError(
        "boom", request=request, response=httpx.Response(503, request=request)
    )

    response = await auth_client.post("/api/ask", json={"question": "What is zakat?"})
    assert response.status_code == 500
    assert "503" in response.json()["error"]

    pending = (await auth_client.get("/api/questions/pending")).json()
    assert [q["question"] for q in pending] == ["What is zakat?"]


@pytest.mark.asyncio
async def test_explain_term_and_scholar(auth_client: AsyncClient, ai_provider):
    ai_provider.reply = "An explanation."
    term = await auth_client.post("/api/explain", json={"term": "Tawhid"})
    assert term.json() == {"term": "Tawhid", "explanation": "An explanation."}

    scholar = await auth_client.post("/api/scholar", json={"name": "Imam Nawawi"})
    assert scholar.json() == {"scholarName": "Imam Nawawi", "biography": "An explanation."}
    assert "Imam Nawawi" in ai_provider.calls[1][1].content


@pytest.mark.asyncio
async def test_explain_verse_fetches_text(auth_client: AsyncClient, ai_provider, upstream):
    upstream.add(f"{QURAN_API}/ayah/1:1/quran-uthmani", {"data": {"number": 1, "text": "بِسْمِ اللَّهِ"}})
    upstream.add(f"{QURAN_API}/ayah/1:1/en.sahih", {"data": {"number": 1, "text": "In the name of Allah"}})
    ai_provider.reply = "Tafsir text."

    response = await auth_client.post("/api/quran/explain", json={"surah": 1, "ayah": 1, "language": "en"})
    assert response.status_code == 200
    data = response.json()
    assert data["verse"]["arabic"] == "بِسْمِ اللَّهِ"
    assert data["verse"]["translation"] == "In the name of Allah"
    assert data["explanation"] == "Tafsir text."
    assert "In the name of Allah" in ai_provider.calls[0][1].content


@pytest.mark.asyncio
async def test_explain_verse_upstream_failure(auth_client: AsyncClient, ai_provider):
    response = await auth_client.post("/api/quran/explain", json={"surah": 1, "ayah": 1})
    assert response.status_code == 500
    assert ai_provider.calls == []


@pytest.mark.asyncio
async def test_ai_rate_limit(auth_client: AsyncClient):
    limit = int(get_settings().ai_rate_limit.split("/")[0])
    for _ in range(limit):
        assert (await auth_client.post("/api/explain", json={"term": "Sabr"})).status_code == 200
    response = await auth_client.post("/api/explain", json={"term": "Sabr"})
    assert response.status_code == 429


def test_get_provider_requires_key():
    with pytest.raises(ServiceNotConfiguredError):
        get_provider(Settings(_env_file=None, ai_provider="gemini", gemini_api_key=""), httpx.AsyncClient())


def test_get_provider_selects_configured_provider():
    client = httpx.AsyncClient()
    gemini = get_provider(Settings(_env_file=None, ai_provider="gemini", gemini_api_key="g-key"), client)
    openai = get_provider(Settings(_env_file=None, ai_provider="openai", openai_api_key="o-key"), client)
    assert isinstance(gemini, GeminiProvider)
    assert isinstance(openai, OpenAIProvider)


@pytest.mark.asyncio
async def test_openai_provider_parses_response():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer o-key"
        return httpx.Response(
            200,
            json={
                "model": "gpt-4o-mini",
                "choices": [{"message": {"role": "assistant", "content": "Salam"}}],
                "usage": {"prompt_tokens": 3, "completion_tokens": 1},
            },
        )

    settings = Settings(_env_file=None, ai_provider="openai", openai_api_key="o-key")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = AIService(settings, client=client)
        assert await service.explain_term("Salam") == "Salam"


@pytest.mark.asyncio
async def test_provider_bad_payload_is_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"unexpected": True})

    settings = Settings(_env_file=None, ai_provider="gemini", gemini_api_key="g-key")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = AIService(settings, client=client)
        with pytest.raises(UpstreamServiceError):
            await service.ask("Anything")


@pytest.mark.asyncio
async def test_provider_error_message_is_passed_through():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "You exceeded your current quota"}})

    settings = Settings(_env_file=None, ai_provider="openai", openai_api_key="o-key")
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        service = AIService(settings, client=client)
        with pytest.raises(UpstreamServiceError) as exc_info:
            await service.ask("Anything")
    assert exc_info.value.message == "AI provider error: HTTP 429: You exceeded your current quota"
