#!/usr/bin/env python3
"""One-off maintenance on lessons.

Usage:
  python admin_operations.py delete lesson1
  python admin_operations.py renumber lesson2
  python admin_operations.py unlock lesson2
  python admin_operations.py lock lesson2
"""
import sys, os, argparse, logging
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from jp_lessons import db, admin, lessons
from jp_lessons.errors import LessonStoreError

def main() -> None:
    parser = argparse.ArgumentParser(description="Lesson maintenance")
    parser.add_argument("operation", choices=["delete", "renumber", "lock", "unlock"])
    parser.add_argument("slug")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if db.DEBUG_MODE else logging.INFO,
                        format="%(asctime)s [%(levelname)s] %(message)s")

    db.init_db()
    session = db.get_session()
    try:
        if args.operation == "delete":
            if lessons.delete_lesson(session, args.slug):
                print(f"✅ Deleted lesson {args.slug}")
            else:
                print(f"Lesson with slug \"{args.slug}\" not found")
        elif args.operation == "renumber":
            changed = admin.renumber_vocabulary(session, args.slug)
            print(f"✅ Vocabulary order updated for {args.slug}: {changed} entries renumbered")
        else:
            lessons.set_lesson_locked(session, args.slug, args.operation == "lock")
            print(f"✅ Lesson {args.slug} {args.operation}ed")
    except LessonStoreError as e:
        print(f"❌ {args.operation} failed: {e}")
        sys.exit(1)
    finally:
        session.close()
        db.close_db()

if __name__ == "__main__":
    main()
