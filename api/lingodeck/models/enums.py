"""
Model enums.
"""
from enum import Enum


class PracticeLanguage(str, Enum):
    """Languages a practice item can be in."""
    ARABIC = "arabic"
    SPANISH = "spanish"
    HEBREW = "hebrew"
    ENGLISH = "english"


class ContentType(str, Enum):
    """Shape of a learnable unit."""
    WORD = "word"
    SENTENCE = "sentence"
    PASSAGE = "passage"
    DIALOG = "dialog"


class MasteryLevel(str, Enum):
    """Mastery vocabulary used by lesson vocabulary rows."""
    NEW = "new"
    LEARNING = "learning"
    PRACTICED = "practiced"
    MASTERED = "mastered"


class WordStatus(str, Enum):
    """Review status vocabulary used by saved word rows."""
    ACTIVE = "active"
    LEARNED = "learned"
    RETIRED = "retired"


class PracticeSource(str, Enum):
    """Origin of a practice item."""
    LESSON_VOCAB_ITEM = "lesson_vocab_item"
    SAVED_WORD = "saved_word"
    LOOKUP_RESULT = "lookup_result"
    VOICE_TURN = "voice_turn"


class PromptType(str, Enum):
    """What the learner is shown."""
    SHOW_TARGET = "show_target"
    SHOW_TRANSLATION = "show_translation"
    PLAY_AUDIO = "play_audio"
    SHOW_CONTEXT = "show_context"


class AnswerType(str, Enum):
    """What the learner must produce."""
    TEXT_TRANSLATION = "text_translation"
    TEXT_TARGET = "text_target"
    SPEECH = "speech"
    TRANSLITERATION = "transliteration"
