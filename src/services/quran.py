"""Quran content client for the alquran.cloud API."""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from src.config import Settings
from src.schemas.schemas import (
    AyahText,
    AyahWithTranslations,
    QuranSearchMatch,
    Reciter,
    SurahInfo,
)
from src.services.errors import UpstreamServiceError

logger = logging.getLogger(__name__)

ARABIC_EDITION = "quran-uthmani"
DEFAULT_RECITER = "ar.alafasy"

# Response keys for ayah translations
TRANSLATION_LABELS = {"en": "english", "ur": "urdu", "hi": "hindi"}


def _error_data(response: httpx.Response) -> Optional[str]:
    # Failures carry a human-readable string in "data"
    try:
        data = response.json().get("data")
    except (ValueError, AttributeError):
        return None
    return data if isinstance(data, str) and data else None


class QuranClient:
    """Thin async wrapper over the Quran REST API."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.base_url = settings.quran_api_url.rstrip("/")
        self.audio_cdn_url = settings.quran_audio_cdn_url.rstrip("/")
        self.editions = settings.translation_editions

    async def _get(self, path: str) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            return response.json()["data"]
        except httpx.HTTPStatusError as e:
            logger.error(f"Quran API returned {e.response.status_code} for {url}")
            message = f"Quran API error: HTTP {e.response.status_code}"
            upstream_message = _error_data(e.response)
            if upstream_message:
                message = f"{message}: {upstream_message}"
            raise UpstreamServiceError(message) from e
        except httpx.HTTPError as e:
            logger.error(f"Quran API request failed for {url}: {e}")
            raise UpstreamServiceError(f"Quran API request failed: {e}") from e
        except (KeyError, ValueError) as e:
            logger.error(f"Unexpected Quran API response for {url}: {e}")
            raise UpstreamServiceError("Quran API returned an unexpected response") from e

    def edition_for(self, language: str) -> str:
        """Translation edition for a UI language; unknown languages get English."""
        return self.editions.get(language, self.editions["en"])

    @staticmethod
    def _ayahs(data: dict) -> list[AyahText]:
        return [
            AyahText(
                number=a["number"],
                number_in_surah=a["numberInSurah"],
                text=a["text"],
                juz=a.get("juz"),
                page=a.get("page"),
                audio=a.get("audio"),
            )
            for a in data.get("ayahs", [])
        ]

    async def list_surahs(self) -> list[SurahInfo]:
        data = await self._get("/surah")
        return [SurahInfo.model_validate(s) for s in data]

    async def get_surah(self, surah: int, edition: str = ARABIC_EDITION) -> list[AyahText]:
        return self._ayahs(await self._get(f"/surah/{surah}/{edition}"))

    async def get_surah_translation(self, surah: int, language: str = "en") -> list[AyahText]:
        return await self.get_surah(surah, self.edition_for(language))

    async def get_surah_recitation(self, surah: int, reciter: str = DEFAULT_RECITER) -> list[str]:
        """Audio URLs for every ayah of a surah, in order."""
        ayahs = await self.get_surah(surah, reciter)
        return [a.audio for a in ayahs if a.audio]

    async def list_reciters(self) -> list[Reciter]:
        data = await self._get("/edition/format/audio")
        return [Reciter(name=e["englishName"], identifier=e["identifier"]) for e in data]

    async def search(self, query: str, language: str = "en") -> list[QuranSearchMatch]:
        edition = self.edition_for(language)
        data = await self._get(f"/search/{quote(query, safe='')}/all/{edition}")
        return [
            QuranSearchMatch(
                surah=m["surah"]["number"],
                ayah=m["numberInSurah"],
                surah_name=m["surah"].get("englishName", ""),
                text=m["text"],
            )
            for m in (data or {}).get("matches", [])
        ]

    async def get_ayah(self, surah: int, ayah: int, edition: str = ARABIC_EDITION) -> dict:
        return await self._get(f"/ayah/{surah}:{ayah}/{edition}")

    async def get_ayah_text(self, surah: int, ayah: int, language: str = "ar") -> str:
        """Arabic text for "ar", otherwise the translation for the language."""
        edition = ARABIC_EDITION if language == "ar" else self.edition_for(language)
        data = await self.get_ayah(surah, ayah, edition)
        return data.get("text", "")

    async def get_ayah_with_translations(self, surah: int, ayah: int) -> AyahWithTranslations:
        arabic = await self.get_ayah(surah, ayah)
        translations = {}
        for language, label in TRANSLATION_LABELS.items():
            data = await self.get_ayah(surah, ayah, self.edition_for(language))
            translations[label] = data.get("text", "")
        return AyahWithTranslations(
            surah=surah, ayah=ayah, arabic=arabic.get("text", ""), translations=translations
        )

    async def get_ayah_audio_url(self, surah: int, ayah: int, reciter: str = DEFAULT_RECITER) -> str:
        """Audio URL from the reciter edition, or the CDN URL for the absolute ayah number."""
        data = await self.get_ayah(surah, ayah, reciter)
        if data.get("audio"):
            return data["audio"]
        return f"{self.audio_cdn_url}/{reciter}/{data['number']}.mp3"
