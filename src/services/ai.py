"""Generative-AI proxy.

Provider abstraction (Gemini or OpenAI, both over httpx) plus the fixed
prompts used by the Q&A, verse explanation, term explanation and scholar
biography endpoints.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from src.config import Settings
from src.services.errors import ServiceNotConfiguredError, UpstreamServiceError

logger = logging.getLogger(__name__)


@dataclass
class ChatMessage:
    """A single message in a conversation."""

    role: str  # 'system', 'user', 'assistant'
    content: str


@dataclass
class ChatResponse:
    """Response from an AI provider."""

    content: str
    prompt_tokens: int
    completion_tokens: int
    model: str

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class AIProvider(ABC):
    """Abstract base class for AI providers."""

    @abstractmethod
    async def chat(
        self,
        messages: list[ChatMessage],
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> ChatResponse:
        """Send a chat completion request."""


class OpenAIProvider(AIProvider):
    """OpenAI chat completions API."""

    base_url = "https://api.openai.com/v1"

    def __init__(self, api_key: str, model: str, client: httpx.AsyncClient):
        self.api_key = api_key
        self.model = model
        self.client = client

    async def chat(
        self,
        messages: list[ChatMessage],
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> ChatResponse:
        response = await self.client.post(
            f"{self.base_url}/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "model": self.model,
                "messages": [{"role": m.role, "content": m.content} for m in messages],
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )
        response.raise_for_status()
        data = response.json()

        usage = data.get("usage", {})
        return ChatResponse(
            content=data["choices"][0]["message"]["content"],
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            model=self.model,
        )


class GeminiProvider(AIProvider):
    """Google Gemini generateContent API."""

    base_url = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, api_key: str, model: str, client: httpx.AsyncClient):
        self.api_key = api_key
        self.model = model
        self.client = client

    async def chat(
        self,
        messages: list[ChatMessage],
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> ChatResponse:
        # Gemini uses 'user' and 'model' roles, system goes in systemInstruction
        system_instruction = None
        contents = []
        for msg in messages:
            if msg.role == "system":
                system_instruction = msg.content
            else:
                role = "model" if msg.role == "assistant" else "user"
                contents.append({"role": role, "parts": [{"text": msg.content}]})

        body: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        response = await self.client.post(
            f"{self.base_url}/models/{self.model}:generateContent",
            params={"key": self.api_key},
            json=body,
        )
        response.raise_for_status()
        data = response.json()

        usage = data.get("usageMetadata", {})
        return ChatResponse(
            content=data["candidates"][0]["content"]["parts"][0]["text"],
            prompt_tokens=usage.get("promptTokenCount", 0),
            completion_tokens=usage.get("candidatesTokenCount", 0),
            model=self.model,
        )


def provider_error_message(response: httpx.Response) -> Optional[str]:
    """The `error.message` field that OpenAI and Gemini send with failures."""
    try:
        error = response.json().get("error")
    except (ValueError, AttributeError):
        return None
    if isinstance(error, dict):
        return error.get("message") or None
    return error if isinstance(error, str) else None


def get_provider(settings: Settings, client: httpx.AsyncClient) -> AIProvider:
    """Build the configured provider. Raises if its API key is missing."""
    if not settings.ai_api_key:
        raise ServiceNotConfiguredError(
            f"AI provider '{settings.ai_provider}' is not configured: missing API key"
        )
    if settings.ai_provider == "openai":
        return OpenAIProvider(settings.openai_api_key, settings.openai_model, client)
    if settings.ai_provider == "gemini":
        return GeminiProvider(settings.gemini_api_key, settings.gemini_model, client)
    raise ValueError(f"Unknown provider: {settings.ai_provider}")


ASK_PROMPT = (
    "You are a knowledgeable assistant specializing in Islamic teachings. "
    "Provide accurate, respectful, and scholarly answers to questions about Islam, "
    "citing authentic sources where appropriate such as the Quran and Hadith. "
    "Be precise, concise, and mindful of different schools of thought in Islam."
)

TAFSIR_PROMPT = (
    "You are a knowledgeable assistant specializing in Quranic exegesis (tafsir). "
    "Provide scholarly explanations of Quranic verses, citing respected tafsir sources. "
    "Include the historical context, linguistic analysis, and relevance to contemporary life. "
    "Be respectful and accurate in your explanations."
)

TERM_PROMPT = (
    "You are a knowledgeable assistant specializing in Islamic theology, jurisprudence, "
    "and history. Provide scholarly explanations of Islamic concepts, practices, and "
    "terminology. Include definitions, historical context, and different perspectives "
    "from various schools of thought if applicable. Be respectful and accurate."
)

SCHOLAR_PROMPT = (
    "You are a knowledgeable assistant specializing in Islamic scholarship and history. "
    "Provide accurate biographical information about Islamic scholars, including their "
    "life, works, contributions to Islamic knowledge, and their place in Islamic "
    "intellectual history. Be respectful and accurate in your descriptions."
)


class AIService:
    """Builds prompts and forwards them to a provider. No retries, no caching."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
        provider: Optional[AIProvider] = None,
    ):
        self.settings = settings
        self.client = client
        self._provider = provider

    @property
    def provider(self) -> AIProvider:
        # Resolved per call so a missing key only fails the AI endpoints
        if self._provider is None:
            if self.client is None:
                raise ServiceNotConfiguredError("AI service has no HTTP client")
            return get_provider(self.settings, self.client)
        return self._provider

    async def _complete(self, system: str, user: str, temperature: float, max_tokens: int) -> str:
        provider = self.provider
        messages = [ChatMessage(role="system", content=system), ChatMessage(role="user", content=user)]
        try:
            response = await provider.chat(messages, temperature=temperature, max_tokens=max_tokens)
        except httpx.HTTPStatusError as e:
            logger.error(f"AI provider returned {e.response.status_code}: {e.response.text[:200]}")
            message = f"AI provider error: HTTP {e.response.status_code}"
            upstream_message = provider_error_message(e.response)
            if upstream_message:
                message = f"{message}: {upstream_message}"
            raise UpstreamServiceError(message) from e
        except httpx.HTTPError as e:
            logger.error(f"AI provider request failed: {e}")
            raise UpstreamServiceError(f"AI provider request failed: {e}") from e
        except (KeyError, IndexError, ValueError) as e:
            logger.error(f"Unexpected AI provider response: {e}")
            raise UpstreamServiceError("AI provider returned an unexpected response") from e

        logger.info(f"AI completion via {response.model}: {response.total_tokens} tokens")
        return response.content

    async def ask(self, question: str) -> str:
        return await self._complete(ASK_PROMPT, question, temperature=0.2, max_tokens=2000)

    async def explain_verse(self, surah: int, ayah: int, arabic: str, translation: str) -> str:
        content = (
            "Please provide a detailed explanation of the following Quranic verse:\n\n"
            f"Arabic: {arabic}\n\nTranslation: {translation}\n\nSurah {surah}, Ayah {ayah}"
        )
        return await self._complete(TAFSIR_PROMPT, content, temperature=0.3, max_tokens=2000)

    async def explain_term(self, term: str) -> str:
        content = f"Please explain the Islamic concept or term: {term}"
        return await self._complete(TERM_PROMPT, content, temperature=0.3, max_tokens=1500)

    async def scholar_biography(self, name: str) -> str:
        content = f"Please provide biographical information about the Islamic scholar: {name}"
        return await self._complete(SCHOLAR_PROMPT, content, temperature=0.3, max_tokens=1500)
