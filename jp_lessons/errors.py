"""Exceptions raised by the lesson store."""


class LessonStoreError(Exception):
    """Base class for every error the repositories raise."""


class NotFound(LessonStoreError):
    """A lesson, vocabulary entry or slug does not exist."""


class LessonNotFound(NotFound):
    def __init__(self, slug: str) -> None:
        super().__init__(f'Lesson with slug "{slug}" not found')
        self.slug = slug


class VocabEntryNotFound(NotFound):
    def __init__(self, entry_id: str) -> None:
        super().__init__(f'Vocabulary entry "{entry_id}" not found')
        self.entry_id = entry_id


class ConstraintViolation(LessonStoreError):
    """Duplicate slug, duplicate order within a lesson, or a dangling lesson reference."""


class StorageUnavailable(LessonStoreError):
    """The database could not be reached."""
