"""
Models package - imports all models so SQLModel registers them.
"""
# Import enums first
from lingodeck.models.enums import (
    PracticeLanguage,
    ContentType,
    MasteryLevel,
    WordStatus,
    PracticeSource,
    PromptType,
    AnswerType,
)

# Import all models
from lingodeck.models.lesson import Lesson
from lingodeck.models.vocabulary_item import VocabularyItem
from lingodeck.models.lesson_progress import LessonProgress
from lingodeck.models.saved_word import SavedWord, WordContext
from lingodeck.models.practice_state import PracticeState

__all__ = [
    'PracticeLanguage',
    'ContentType',
    'MasteryLevel',
    'WordStatus',
    'PracticeSource',
    'PromptType',
    'AnswerType',
    'Lesson',
    'VocabularyItem',
    'LessonProgress',
    'SavedWord',
    'WordContext',
    'PracticeState',
]
