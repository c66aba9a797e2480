#!/usr/bin/env python3
"""
Script to examine the lessons database: every lesson with its lock state,
vocabulary in study order and kanji.
"""

import sys
import os

# Add the current directory to the path so we can import our modules
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from jp_lessons import db, lessons, vocabulary, kanji
from jp_lessons.errors import LessonStoreError

def check_database_contents() -> None:
    """Print the lessons and what each of them holds."""
    print("🔍 Examining Japanese Lessons Database Contents")
    print("=" * 60)

    session = db.get_session()

    try:
        all_lessons = lessons.get_lessons(session)
        print(f"\n📚 LESSONS ({len(all_lessons)}):")
        total_vocab = 0
        total_kanji = 0
        for lesson in all_lessons:
            state = "🔒" if lesson.locked else "🔓"
            vocab_items = vocabulary.get_vocab_by_lesson_slug(session, lesson.slug)
            kanji_items = kanji.get_kanji_by_lesson_slug(session, lesson.slug)
            total_vocab += len(vocab_items)
            total_kanji += len(kanji_items)
            print(f"  {lesson.number:2d}. {state} {lesson.title} [{lesson.slug}] | {lesson.description}")
            for item in vocab_items[:10]:  # Show first 10
                print(f"      {item.order:3d}. {item.word} | Reading: {item.reading} | Meaning: {item.meaning} | {item.category}")
            if len(vocab_items) > 10:
                print(f"      ... and {len(vocab_items) - 10} more items")
            if kanji_items:
                print(f"      Kanji: {' '.join(k.kanji for k in kanji_items)}")

        print(f"\n📊 SUMMARY:")
        print(f"     Lessons: {len(all_lessons)}")
        print(f"     Vocabulary entries: {total_vocab}")
        print(f"     Kanji entries: {total_kanji}")

    except LessonStoreError as e:
        print(f"❌ Error examining database: {e}")
    finally:
        session.close()

if __name__ == "__main__":
    # Check if database exists
    if not os.environ.get("JP_LESSONS_DB_URL") and not os.path.exists(db.DB_PATH):
        print(f"❌ Database file '{db.DB_PATH}' not found!")
        print("   Make sure you're running this from the correct directory.")
        sys.exit(1)

    check_database_contents()
    db.close_db()
