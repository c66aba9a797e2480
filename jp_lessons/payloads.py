"""Load lesson payloads from JSON.

The bundled catalogue lives in ``data/``: ``lessons.json`` lists the lessons,
and ``vocab/<slug>.json`` / ``kanji/<slug>.json`` hold their content when it
has been written.
"""
import json
from pathlib import Path
from typing import Any, List, Optional, Union

from .structured import KanjiRow, LessonPayload, VocabRow

DATA_DIR = Path(__file__).parent / "data"


def _read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_payload_file(path: Union[str, Path]) -> List[LessonPayload]:
    """Read one lesson object, or a list of them, from a JSON file."""
    data = _read_json(Path(path))
    if isinstance(data, dict):
        data = [data]
    return [LessonPayload.from_dict(item) for item in data]


def load_bundled_lessons(data_dir: Optional[Path] = None) -> List[LessonPayload]:
    data_dir = data_dir or DATA_DIR
    payloads = []
    for item in _read_json(data_dir / "lessons.json"):
        payload = LessonPayload.from_dict(item)
        vocab_file = data_dir / "vocab" / f"{payload.slug}.json"
        kanji_file = data_dir / "kanji" / f"{payload.slug}.json"
        if vocab_file.exists():
            payload.vocab = [VocabRow.coerce(v) for v in _read_json(vocab_file)]
        if kanji_file.exists():
            payload.kanji = [KanjiRow.coerce(k) for k in _read_json(kanji_file)]
        payloads.append(payload)
    return payloads


def find_bundled_lesson(slug: str, data_dir: Optional[Path] = None) -> Optional[LessonPayload]:
    for payload in load_bundled_lessons(data_dir):
        if payload.slug == slug:
            return payload
    return None
