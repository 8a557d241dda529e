"""
Adapters from source rows to PracticeItem.

Each adapter is a pure, total function over one source table: it never
performs I/O and never raises on malformed optional fields. Only id, word and
translation are assumed present. Optional fields that are null, empty or
malformed come out absent (None) so consumers have one absence check.

Known source quirks are preserved on purpose:
- saved_words is an Arabic-only, word-only source, so its items are always
  language 'arabic' and content type 'word'.
- saved_words.status 'learned' maps to raw mastery 'practiced'; every other
  status maps to 'learning'. This mapping belongs to saved words only.
- vocabulary_items.mastery_level is passed through as is; a missing level
  leaves mastery absent rather than defaulting it.

One deliberate difference from the legacy client: this schema keeps
saved_words.times_correct up to date, so saved-word items carry it while
vocabulary items leave times_correct absent.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from lingodeck.models.enums import (
    AnswerType,
    ContentType,
    PracticeLanguage,
    PracticeSource,
    PromptType,
    WordStatus,
)
from lingodeck.models.saved_word import SavedWord
from lingodeck.models.vocabulary_item import VocabularyItem
from lingodeck.schemas.practice import (
    ExampleSentence,
    HebrewCognate,
    LetterBreakdown,
    PracticeItem,
    PracticeLinkage,
    PracticeOrigin,
    RawMastery,
)

logger = logging.getLogger(__name__)

SourceRow = Union[VocabularyItem, SavedWord]

ModelT = TypeVar("ModelT", bound=BaseModel)

# saved_words.status -> raw mastery token
SAVED_WORD_MASTERY = {
    WordStatus.LEARNED.value: "practiced",
}
SAVED_WORD_DEFAULT_MASTERY = "learning"

_LANGUAGES = {language.value: language for language in PracticeLanguage}
_CONTENT_TYPES = {content_type.value: content_type for content_type in ContentType}


def _or_none(value: Optional[str]) -> Optional[str]:
    """Empty strings are absent."""
    return value if value else None


def _parse_model(model: Type[ModelT], value: Any) -> Optional[ModelT]:
    if not isinstance(value, dict):
        return None
    try:
        return model.model_validate(value)
    except ValidationError:
        return None


def _parse_model_list(model: Type[ModelT], value: Any) -> Optional[List[ModelT]]:
    if not isinstance(value, list):
        return None
    parsed = [_parse_model(model, entry) for entry in value]
    valid = [entry for entry in parsed if entry is not None]
    return valid or None


def _parse_cognate(value: Any) -> Optional[HebrewCognate]:
    cognate = _parse_model(HebrewCognate, value)
    if cognate is None or not cognate.root:
        return None
    return cognate


def _language(value: Optional[str]) -> PracticeLanguage:
    return _LANGUAGES.get(value or "", PracticeLanguage.ENGLISH)


def _content_type(value: Optional[str]) -> ContentType:
    return _CONTENT_TYPES.get(value or "", ContentType.WORD)


def saved_word_mastery(status: Optional[str]) -> str:
    """Raw mastery token for a saved_words.status value."""
    return SAVED_WORD_MASTERY.get(status or "", SAVED_WORD_DEFAULT_MASTERY)


def from_vocabulary_items(rows: Sequence[VocabularyItem]) -> List[PracticeItem]:
    """
    Map lesson vocabulary rows to practice items.

    Args:
        rows: vocabulary_items rows

    Returns:
        One PracticeItem per row, origin 'lesson_vocab_item'
    """
    items = []
    for row in rows:
        items.append(PracticeItem(
            id=row.id,
            language=_language(row.language),
            content_type=_content_type(row.content_type),
            target_text=row.word,
            translation=row.translation,
            transliteration=_or_none(row.transliteration),
            prompt_type=PromptType.SHOW_TARGET,
            answer_type=AnswerType.TEXT_TRANSLATION,
            mastery=RawMastery(
                origin_type=PracticeSource.LESSON_VOCAB_ITEM,
                raw_value=row.mastery_level,
            ) if row.mastery_level else None,
            times_practiced=row.times_practiced,
            times_correct=None,  # not tracked in vocabulary_items
            last_reviewed=row.last_reviewed,
            next_review=row.next_review,
            origin=PracticeOrigin(type=PracticeSource.LESSON_VOCAB_ITEM, id=row.id),
            linkage=PracticeLinkage(vocabulary_item_id=row.id, lesson_id=_or_none(row.lesson_id)),
            letter_breakdown=_parse_model_list(LetterBreakdown, row.letter_breakdown),
            hebrew_cognate=_parse_cognate(row.hebrew_cognate),
            example_sentences=None,  # not stored in vocabulary_items
            created_at=row.created_at,
        ))
    return items


def from_saved_words(rows: Sequence[SavedWord]) -> List[PracticeItem]:
    """
    Map saved word rows to practice items.

    Args:
        rows: saved_words rows

    Returns:
        One PracticeItem per row, origin 'saved_word'
    """
    items = []
    for row in rows:
        items.append(PracticeItem(
            id=row.id,
            language=PracticeLanguage.ARABIC,
            content_type=ContentType.WORD,
            target_text=row.word,
            translation=row.translation,
            transliteration=_or_none(row.pronunciation_standard),
            prompt_type=PromptType.SHOW_TARGET,
            answer_type=AnswerType.TEXT_TRANSLATION,
            mastery=RawMastery(
                origin_type=PracticeSource.SAVED_WORD,
                raw_value=saved_word_mastery(row.status),
            ),
            times_practiced=row.times_practiced,
            times_correct=row.times_correct,
            last_reviewed=row.last_practiced,
            next_review=row.next_review,
            origin=PracticeOrigin(type=PracticeSource.SAVED_WORD, id=row.id),
            linkage=PracticeLinkage(saved_word_id=row.id),
            letter_breakdown=_parse_model_list(LetterBreakdown, row.letter_breakdown),
            hebrew_cognate=_parse_cognate(row.hebrew_cognate),
            example_sentences=_parse_model_list(ExampleSentence, row.example_sentences),
            memory_note=_or_none(row.memory_note),
            memory_image_url=_or_none(row.memory_image_url),
            created_at=row.created_at,
        ))
    return items


def to_practice_items(rows: Sequence[SourceRow]) -> List[PracticeItem]:
    """
    Map a mixed list of source rows, dispatching on the row type.

    Order is preserved. Rows of an unknown type are skipped with a warning.
    When two rows produce the same item id, the first one wins so ids stay
    unique within the loaded set.
    """
    items: List[PracticeItem] = []
    seen: Dict[str, str] = {}
    for row in rows:
        if isinstance(row, VocabularyItem):
            mapped = from_vocabulary_items([row])
        elif isinstance(row, SavedWord):
            mapped = from_saved_words([row])
        else:
            logger.warning(f"Skipping unsupported source row type: {type(row).__name__}")
            continue

        for item in mapped:
            if item.id in seen:
                logger.warning(
                    f"Duplicate practice item id {item.id} from {item.origin.type.value}, "
                    f"keeping the one from {seen[item.id]}"
                )
                continue
            seen[item.id] = item.origin.type.value
            items.append(item)
    return items
