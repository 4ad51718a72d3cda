"""Hadith collections, books, chapters and texts.

Serves from hadithapi.com when an API key is configured, otherwise from the
bundled corpus below.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from src.config import Settings
from src.schemas.schemas import (
    Hadith,
    HadithBook,
    HadithChapter,
    HadithCollection,
    HadithGrade,
    HadithPage,
)
from src.services.errors import UpstreamServiceError

logger = logging.getLogger(__name__)

COLLECTIONS = [
    HadithCollection(name="Sahih al-Bukhari", collection="bukhari", has_chapters=True, number_of_hadith=7563),
    HadithCollection(name="Sahih Muslim", collection="muslim", has_chapters=True, number_of_hadith=5362),
    HadithCollection(name="Sunan an-Nasa'i", collection="nasai", has_chapters=True, number_of_hadith=5761),
    HadithCollection(name="Sunan Abi Dawud", collection="abudawud", has_chapters=True, number_of_hadith=5274),
    HadithCollection(name="Jami' at-Tirmidhi", collection="tirmidhi", has_chapters=True, number_of_hadith=3956),
    HadithCollection(name="Sunan Ibn Majah", collection="ibnmajah", has_chapters=True, number_of_hadith=4341),
]

# hadithapi.com book slugs
REMOTE_SLUGS = {
    "bukhari": "sahih-bukhari",
    "muslim": "sahih-muslim",
    "nasai": "sunan-nasai",
    "abudawud": "abu-dawood",
    "tirmidhi": "al-tirmidhi",
    "ibnmajah": "ibn-e-majah",
}

REMOTE_SLUGS_REVERSED = {v: k for k, v in REMOTE_SLUGS.items()}

BOOKS = [
    ("Book of Revelation", 7),
    ("Book of Belief", 64),
    ("Book of Knowledge", 78),
    ("Book of Ablution", 103),
    ("Book of Bath", 32),
]

CHAPTERS_PER_BOOK = 5
HADITHS_PER_CHAPTER = 10

COLLECTORS = {"bukhari": "Imam Bukhari", "muslim": "Imam Muslim"}


@dataclass(frozen=True)
class CorpusEntry:
    collection: str
    number: int
    book: str
    arabic: str
    english: str
    urdu: str
    topics: tuple[str, ...] = field(default_factory=tuple)


CORPUS = [
    CorpusEntry(
        "bukhari", 1, "1",
        "إِنَّمَا الْأَعْمَالُ بِالنِّيَّاتِ وَإِنَّمَا لِكُلِّ امْرِئٍ مَا نَوَى فَمَنْ كَانَتْ هِجْرَتُهُ إِلَى دُنْيَا يُصِيبُهَا أَوْ إِلَى امْرَأَةٍ يَنْكِحُهَا فَهِجْرَتُهُ إِلَى مَا هَاجَرَ إِلَيْهِ",
        "Actions are (judged) by motives (niyyah), so each man will have what he intended. "
        "Thus, he whose migration (hijrah) was to Allah and His Messenger, his migration is to "
        "Allah and His Messenger; but he whose migration was for some worldly thing he might "
        "gain, or for a wife he might marry, his migration is to that for which he migrated.",
        "اعمال کا دارومدار نیتوں پر ہے اور ہر شخص کو وہی ملے گا جس کی اس نے نیت کی ہو۔",
        ("intention", "niyyah", "action", "deed", "hijrah"),
    ),
    CorpusEntry(
        "bukhari", 2, "1",
        "أَحْيَانًا يَأْتِينِي مِثْلَ صَلْصَلَةِ الجَرَسِ، وَهُوَ أَشَدُّهُ عَلَيَّ، فَيُفْصَمُ عَنِّي وَقَدْ وَعَيْتُ عَنْهُ مَا قَالَ، وَأَحْيَانًا يَتَمَثَّلُ لِي المَلَكُ رَجُلًا فَيُكَلِّمُنِي فَأَعِي مَا يَقُولُ",
        "Sometimes it is (revealed) like the ringing of a bell, this form of Inspiration is the "
        "hardest of all and then this state passes off after I have grasped what is inspired. "
        "Sometimes the Angel comes in the form of a man and talks to me and I grasp whatever he says.",
        "کبھی مجھے گھنٹی کی سی آواز سنائی دیتی ہے جو میرے لیے سخت ہوتی ہے، پھر وہ رک جاتی ہے اور میں سمجھ لیتا ہوں جو کہا گیا ہے۔",
        ("revelation", "wahy", "wahyi", "inspiration", "angel"),
    ),
    CorpusEntry(
        "bukhari", 10, "2",
        "الْمُسْلِمُ مَنْ سَلِمَ الْمُسْلِمُونَ مِنْ لِسَانِهِ وَيَدِهِ",
        "A Muslim is the one from whose tongue and hands the Muslims are safe.",
        "مسلمان وہ ہے جس کی زبان اور ہاتھ سے دوسرے مسلمان محفوظ رہیں۔",
        ("muslim", "tongue", "harm", "character"),
    ),
    CorpusEntry(
        "bukhari", 13, "2",
        "لَا يُؤْمِنُ أَحَدُكُمْ حَتَّى يُحِبَّ لِأَخِيهِ مَا يُحِبُّ لِنَفْسِهِ",
        "None of you truly believes until he loves for his brother what he loves for himself.",
        "تم میں سے کوئی اس وقت تک مومن نہیں ہو سکتا جب تک کہ وہ اپنے بھائی کے لیے وہی پسند نہ کرے جو اپنے لیے پسند کرتا ہے۔",
        ("brotherhood", "love", "faith", "iman"),
    ),
    CorpusEntry(
        "bukhari", 50, "2",
        "الإِيمَانُ أَنْ تُؤْمِنَ بِاللَّهِ وَمَلاَئِكَتِهِ وَبِلِقَائِهِ وَرُسُلِهِ وَتُؤْمِنَ بِالْبَعْثِ",
        "Faith is to believe in Allah, His angels, (the) meeting with Him, His Messengers, "
        "and to believe in Resurrection.",
        "ایمان یہ ہے کہ تم اللہ پر، اس کے فرشتوں پر، اس سے ملاقات پر، اس کے رسولوں پر ایمان لاؤ اور قیامت پر ایمان لاؤ۔",
        ("faith", "belief", "iman", "resurrection"),
    ),
    CorpusEntry(
        "bukhari", 6018, "78",
        "مَنْ كَانَ يُؤْمِنُ بِاللَّهِ وَالْيَوْمِ الْآخِرِ فَلْيَقُلْ خَيْرًا أَوْ لِيَصْمُتْ",
        "He who believes in Allah and the Last Day, let him speak good or remain silent.",
        "جو اللہ اور آخرت کے دن پر ایمان رکھتا ہے، وہ اچھی بات کہے یا خاموش رہے۔",
        ("speech", "silence", "manners", "character"),
    ),
    CorpusEntry(
        "muslim", 91, "1",
        "إِنَّ اللَّهَ جَمِيلٌ يُحِبُّ الْجَمَالَ",
        "Allah is beautiful and He loves beauty.",
        "اللہ خوبصورت ہے اور خوبصورتی کو پسند کرتا ہے۔",
        ("beauty", "pride", "arrogance"),
    ),
    CorpusEntry(
        "muslim", 223, "2",
        "الطُّهُورُ شَطْرُ الْإِيمَانِ، وَالْحَمْدُ لِلَّهِ تَمْلَأُ الْمِيزَانَ",
        "Purity is half of faith and alhamdulillah (praise be to Allah) fills the scale.",
        "پاکیزگی ایمان کا نصف حصہ ہے، اور الحمد للہ میزان کو بھر دیتا ہے۔",
        ("purity", "tahara", "ablution", "wudu", "praise"),
    ),
    CorpusEntry(
        "muslim", 2564, "45",
        "إِنَّ اللَّهَ لَا يَنْظُرُ إِلَى صُوَرِكُمْ وَأَمْوَالِكُمْ، وَلَكِنْ يَنْظُرُ إِلَى قُلُوبِكُمْ وَأَعْمَالِكُمْ",
        "Allah does not look at your appearance or wealth, but rather He looks at your hearts and actions.",
        "اللہ تمہاری شکلوں اور مالوں کو نہیں دیکھتا، بلکہ وہ تمہارے دلوں اور اعمال کو دیکھتا ہے۔",
        ("heart", "sincerity", "wealth", "deed"),
    ),
    CorpusEntry(
        "muslim", 2699, "48",
        "مَنْ سَلَكَ طَرِيقًا يَلْتَمِسُ فِيهِ عِلْمًا سَهَّلَ اللَّهُ لَهُ بِهِ طَرِيقًا إِلَى الْجَنَّةِ",
        "Whoever takes a path upon which to obtain knowledge, Allah makes the path to Paradise easy for him.",
        "جو شخص علم کی تلاش میں کوئی راہ اختیار کرتا ہے، اللہ اس کے لیے جنت کا راستہ آسان کر دیتا ہے۔",
        ("knowledge", "ilm", "learning", "paradise"),
    ),
]


def _to_hadith(entry: CorpusEntry) -> Hadith:
    return Hadith(
        collection=entry.collection,
        book_number=entry.book,
        chapter_number=1,
        hadith_number=entry.number,
        text=entry.arabic,
        grades=[HadithGrade(grade="Sahih", graded_by=COLLECTORS.get(entry.collection, "Unknown"))],
        translations={"english": entry.english, "urdu": entry.urdu},
    )


def _matches(entry: CorpusEntry, query: str) -> bool:
    q = query.strip().lower()
    if not q:
        return False
    return (
        any(topic in q for topic in entry.topics)
        or q in entry.english.lower()
        or query.strip() in entry.urdu
        or query.strip() in entry.arabic
    )


def _paginate(items: list[Hadith], page: int, limit: int) -> HadithPage:
    start = (page - 1) * limit
    return HadithPage(hadiths=items[start:start + limit], total=len(items), page=page, limit=limit)


class HadithService:
    """Hadith browsing and search."""

    def __init__(self, client: Optional[httpx.AsyncClient], settings: Settings):
        self.client = client
        self.base_url = settings.hadith_api_url.rstrip("/")
        self.api_key = settings.hadith_api_key

    @property
    def remote_enabled(self) -> bool:
        return bool(self.api_key) and self.client is not None

    def list_collections(self) -> list[HadithCollection]:
        return list(COLLECTIONS)

    def get_collection(self, collection: str) -> Optional[HadithCollection]:
        return next((c for c in COLLECTIONS if c.collection == collection), None)

    def list_books(self, collection: str) -> list[HadithBook]:
        if self.get_collection(collection) is None:
            return []
        return [
            HadithBook(name=name, collection=collection, book_number=str(i), number_of_hadith=count)
            for i, (name, count) in enumerate(BOOKS, start=1)
        ]

    def list_chapters(self, collection: str, book_number: str) -> list[HadithChapter]:
        if self.get_collection(collection) is None:
            return []
        return [
            HadithChapter(
                chapter_id=i,
                book_number=book_number,
                chapter_number=i,
                chapter_title=f"Section {i}",
                hadith_start_number=(i - 1) * HADITHS_PER_CHAPTER + 1,
                hadith_end_number=i * HADITHS_PER_CHAPTER,
            )
            for i in range(1, CHAPTERS_PER_BOOK + 1)
        ]

    async def list_hadiths(
        self,
        collection: str,
        book_number: Optional[str] = None,
        chapter: Optional[int] = None,
        page: int = 1,
        limit: int = 10,
    ) -> HadithPage:
        if self.remote_enabled:
            params = {"book": REMOTE_SLUGS.get(collection, collection), "paginate": limit, "page": page}
            if chapter is not None:
                params["chapter"] = chapter
            return await self._fetch_remote(params, page, limit)

        items = [
            _to_hadith(e)
            for e in CORPUS
            if e.collection == collection and (book_number is None or e.book == book_number)
        ]
        return _paginate(items, page, limit)

    async def get_hadith(self, collection: str, number: int) -> Optional[Hadith]:
        entry = next((e for e in CORPUS if e.collection == collection and e.number == number), None)
        if entry is not None:
            return _to_hadith(entry)
        if self.remote_enabled:
            result = await self._fetch_remote(
                {"book": REMOTE_SLUGS.get(collection, collection), "hadithNumber": number}, 1, 1
            )
            return result.hadiths[0] if result.hadiths else None
        return None

    async def search(self, query: str, page: int = 1, limit: int = 10) -> HadithPage:
        if self.remote_enabled:
            return await self._fetch_remote(
                {"hadithEnglish": query, "paginate": limit, "page": page}, page, limit
            )
        return _paginate([_to_hadith(e) for e in CORPUS if _matches(e, query)], page, limit)

    async def _fetch_remote(self, params: dict, page: int, limit: int) -> HadithPage:
        url = f"{self.base_url}/hadiths"
        try:
            response = await self.client.get(url, params={"apiKey": self.api_key, **params})
            if response.status_code == 404:
                # hadithapi.com answers 404 for an empty result set
                return HadithPage(hadiths=[], total=0, page=page, limit=limit)
            response.raise_for_status()
            body = response.json()["hadiths"]
            hadiths = [_from_remote(h) for h in body.get("data", [])]
        except httpx.HTTPError as e:
            logger.error(f"Hadith API request failed: {e}")
            raise UpstreamServiceError(f"Hadith API request failed: {e}") from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected Hadith API response: {e}")
            raise UpstreamServiceError("Hadith API returned an unexpected response") from e

        return HadithPage(hadiths=hadiths, total=body.get("total", len(hadiths)), page=page, limit=limit)


def _from_remote(item: dict) -> Hadith:
    slug = item.get("bookSlug", "")
    translations = {"english": item.get("hadithEnglish"), "urdu": item.get("hadithUrdu")}
    return Hadith(
        collection=REMOTE_SLUGS_REVERSED.get(slug, slug),
        book_number=str((item.get("chapter") or {}).get("chapterNumber", "1")),
        chapter_number=int(item.get("chapterId") or 1),
        hadith_number=int(item["hadithNumber"]),
        text=item.get("hadithArabic") or "",
        grades=[HadithGrade(grade=item["status"], graded_by="hadithapi.com")] if item.get("status") else [],
        translations={k: v for k, v in translations.items() if v},
    )
