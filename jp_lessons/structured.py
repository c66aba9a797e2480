from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union


@dataclass
class VocabRow:
    """One vocabulary card as authored in a lesson payload."""
    word: str
    reading: str
    meaning: str
    type: str = "noun"
    category: Optional[str] = None
    order: Optional[int] = None

    @classmethod
    def coerce(cls, entry: Union["VocabRow", Mapping[str, Any]]) -> "VocabRow":
        if isinstance(entry, cls):
            return entry
        meaning = entry.get("meaning", entry.get("definition"))
        return cls(
            word=entry["word"],
            reading=entry["reading"],
            meaning=meaning,  # type: ignore[arg-type]
            type=entry.get("type", "noun"),
            category=entry.get("category"),
            order=entry.get("order"),
        )


@dataclass
class KanjiRow:
    kanji: str
    meaning: str
    onyomi: List[str] = field(default_factory=list)
    kunyomi: List[str] = field(default_factory=list)

    @classmethod
    def coerce(cls, entry: Union["KanjiRow", Mapping[str, Any]]) -> "KanjiRow":
        if isinstance(entry, cls):
            return entry
        return cls(
            kanji=entry["kanji"],
            meaning=entry.get("meaning", entry.get("definition")),  # type: ignore[arg-type]
            onyomi=list(entry.get("onyomi") or []),
            kunyomi=list(entry.get("kunyomi") or []),
        )


@dataclass
class LessonPayload:
    title: str
    slug: str
    description: str = ""
    locked: bool = True
    number: Optional[int] = None
    vocab: List[VocabRow] = field(default_factory=list)
    kanji: List[KanjiRow] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LessonPayload":
        return cls(
            title=data["title"],
            slug=data["slug"],
            description=data.get("description", ""),
            locked=bool(data.get("locked", True)),
            number=data.get("number"),
            vocab=[VocabRow.coerce(v) for v in data.get("vocab", [])],
            kanji=[KanjiRow.coerce(k) for k in data.get("kanji", [])],
        )


@dataclass
class VocabView:
    """Vocabulary as the flashcard pages consume it."""
    id: str
    word: str
    reading: str
    meaning: str
    type: str
    category: str
    order: int


@dataclass
class KanjiView:
    id: str
    kanji: str
    meaning: str
    onyomi: List[str]
    kunyomi: List[str]


@dataclass
class LessonProgress:
    slug: str
    title: str
    number: int
    locked: bool
    completed: int
    total: int
    due_for_review: int
    progress: int  # percentage 0-100
