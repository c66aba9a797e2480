"""
Japanese Lessons Store

Lessons, ordered vocabulary flashcards and kanji for a Japanese-learning
app, with the administrative procedures that author them.
"""

from . import db
from . import lessons
from . import vocabulary
from . import kanji
from . import scheduler
from . import progress
from . import admin
from . import structured
from . import payloads

__version__ = "0.1.0"
__all__ = ["db", "lessons", "vocabulary", "kanji", "scheduler", "progress", "admin", "structured", "payloads"]
