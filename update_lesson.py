#!/usr/bin/env python3
"""Replace an existing lesson's vocabulary (and kanji) with a new batch.

Usage:
  python update_lesson.py lesson2                       # from the bundled data
  python update_lesson.py lesson2 --payload lesson2.json
  python update_lesson.py lesson2 --unlock
"""
import sys, os, argparse, logging
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from jp_lessons import db, admin, payloads
from jp_lessons.errors import LessonStoreError

def main() -> None:
    parser = argparse.ArgumentParser(description="Update a lesson's vocabulary")
    parser.add_argument("slug")
    parser.add_argument("--payload", help="JSON file with the lesson content (defaults to the bundled data)")
    lock = parser.add_mutually_exclusive_group()
    lock.add_argument("--lock", dest="locked", action="store_const", const=True)
    lock.add_argument("--unlock", dest="locked", action="store_const", const=False)
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if db.DEBUG_MODE else logging.INFO,
                        format="%(asctime)s [%(levelname)s] %(message)s")

    if args.payload:
        matches = [p for p in payloads.load_payload_file(args.payload) if p.slug == args.slug]
        payload = matches[0] if matches else None
    else:
        payload = payloads.find_bundled_lesson(args.slug)
    if payload is None:
        print(f"❌ No content found for {args.slug}"); sys.exit(1)

    db.init_db()
    session = db.get_session()
    try:
        lesson = admin.update_lesson(
            session, args.slug, payload.vocab,
            kanji=payload.kanji or None, locked=args.locked,
        )
        print(f"✅ Lesson update completed: {lesson.title} ({len(payload.vocab)} vocabulary entries)")
    except LessonStoreError as e:
        print(f"❌ Error updating lesson: {e}")
        sys.exit(1)
    finally:
        session.close()
        db.close_db()

if __name__ == "__main__":
    main()
