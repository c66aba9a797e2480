#!/usr/bin/env python3
"""Add lessons with their vocabulary and kanji to the database.

Usage:
  python add_lesson.py lesson2                 # one lesson from the bundled data
  python add_lesson.py --all                   # every bundled lesson
  python add_lesson.py --payload my_lesson.json
  Add --replace to delete an existing lesson with the same slug first.
"""
import sys, os, argparse, logging
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from jp_lessons import db, admin, payloads
from jp_lessons.errors import LessonStoreError

def main() -> None:
    parser = argparse.ArgumentParser(description="Add lessons to the database")
    parser.add_argument("slug", nargs="?", help="Slug of a bundled lesson")
    parser.add_argument("--all", action="store_true", help="Add every bundled lesson")
    parser.add_argument("--payload", help="JSON file with a lesson or a list of lessons")
    parser.add_argument("--replace", action="store_true", help="Delete an existing lesson with the same slug first")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if db.DEBUG_MODE else logging.INFO,
                        format="%(asctime)s [%(levelname)s] %(message)s")

    if args.payload:
        if not os.path.exists(args.payload):
            print(f"❌ Payload not found: {args.payload}"); sys.exit(1)
        lesson_payloads = payloads.load_payload_file(args.payload)
    elif args.all:
        lesson_payloads = payloads.load_bundled_lessons()
    elif args.slug:
        found = payloads.find_bundled_lesson(args.slug)
        if found is None:
            print(f"❌ No bundled lesson with slug {args.slug}"); sys.exit(1)
        lesson_payloads = [found]
    else:
        parser.error("give a slug, --all or --payload")

    db.init_db()
    session = db.get_session()
    try:
        if len(lesson_payloads) == 1:
            lesson = admin.add_lesson(session, lesson_payloads[0], replace=args.replace)
            print(f"✅ Created lesson: {lesson.title} with ID: {lesson.id}")
        else:
            created = admin.add_all_lessons(session, lesson_payloads, replace=args.replace)
            print(f"✅ Added {len(created)} of {len(lesson_payloads)} lessons")
    except LessonStoreError as e:
        print(f"❌ Error adding lesson: {e}")
        sys.exit(1)
    finally:
        session.close()
        db.close_db()

if __name__ == "__main__":
    main()
