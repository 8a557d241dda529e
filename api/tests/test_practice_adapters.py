from datetime import datetime

from lingodeck.models.enums import ContentType, PracticeLanguage, PracticeSource
from lingodeck.models.lesson import Lesson
from lingodeck.models.saved_word import SavedWord
from lingodeck.models.vocabulary_item import VocabularyItem
from lingodeck.services.practice_adapters import (
    from_saved_words,
    from_vocabulary_items,
    saved_word_mastery,
    to_practice_items,
)


def _vocab_row(**overrides):
    data = {
        "id": "v1",
        "lesson_id": "lesson-1",
        "word": "كتاب",
        "translation": "book",
        "language": "arabic",
        "content_type": "word",
        "transliteration": "kitab",
        "hebrew_cognate": {"root": "כתב", "meaning": "write"},
        "letter_breakdown": [{"letter": "ك", "name": "kaf", "sound": "k"}],
        "mastery_level": "learning",
        "times_practiced": 3,
        "created_at": datetime(2025, 1, 1),
    }
    data.update(overrides)
    return VocabularyItem(**data)


def _saved_row(**overrides):
    data = {
        "id": "s1",
        "word": "سلام",
        "translation": "peace",
        "pronunciation_standard": "salaam",
        "status": "active",
        "times_practiced": 4,
        "times_correct": 2,
        "created_at": datetime(2025, 1, 2),
    }
    data.update(overrides)
    return SavedWord(**data)


def test_vocabulary_item_mapping():
    item = from_vocabulary_items([_vocab_row()])[0]

    assert item.id == "v1"
    assert item.language == PracticeLanguage.ARABIC
    assert item.target_text == "كتاب"
    assert item.transliteration == "kitab"
    assert item.origin.type == PracticeSource.LESSON_VOCAB_ITEM
    assert item.origin.id == "v1"
    assert item.linkage.lesson_id == "lesson-1"
    assert item.linkage.vocabulary_item_id == "v1"
    assert item.mastery.origin_type == PracticeSource.LESSON_VOCAB_ITEM
    assert item.mastery.raw_value == "learning"
    assert item.times_practiced == 3
    assert item.times_correct is None
    assert item.hebrew_cognate.root == "כתב"
    assert item.letter_breakdown[0].name == "kaf"
    assert item.example_sentences is None


def test_vocabulary_item_optional_fields_become_absent():
    row = _vocab_row(transliteration="", hebrew_cognate={"meaning": "no root"}, letter_breakdown="garbage")
    item = from_vocabulary_items([row])[0]

    assert item.transliteration is None
    assert item.hebrew_cognate is None
    assert item.letter_breakdown is None
    data = item.to_json_dict()
    assert "transliteration" not in data
    assert "hebrew_cognate" not in data
    assert "memory_note" not in data


def test_vocabulary_item_unknown_language_and_content_type():
    item = from_vocabulary_items([_vocab_row(language="klingon", content_type=None)])[0]
    assert item.language == PracticeLanguage.ENGLISH
    assert item.content_type == ContentType.WORD


def test_saved_word_mapping():
    item = from_saved_words([_saved_row(memory_note="sounds like salami", memory_image_url="")])[0]

    assert item.origin.type == PracticeSource.SAVED_WORD
    assert item.linkage.saved_word_id == "s1"
    assert item.linkage.lesson_id is None
    assert item.language == PracticeLanguage.ARABIC
    assert item.content_type == ContentType.WORD
    assert item.transliteration == "salaam"
    assert item.times_correct == 2
    assert item.memory_note == "sounds like salami"
    assert item.memory_image_url is None


def test_saved_word_always_arabic_word():
    item = from_saved_words([_saved_row(language="spanish")])[0]
    assert item.language == PracticeLanguage.ARABIC
    assert item.content_type == ContentType.WORD


def test_saved_word_status_mapping():
    assert saved_word_mastery("learned") == "practiced"
    assert saved_word_mastery("active") == "learning"
    assert saved_word_mastery("retired") == "learning"
    assert saved_word_mastery(None) == "learning"

    item = from_saved_words([_saved_row(status="learned")])[0]
    assert item.mastery.raw_value == "practiced"
    assert item.mastery.origin_type == PracticeSource.SAVED_WORD


def test_mastery_scales_are_not_comparable_across_origins():
    vocab = from_vocabulary_items([_vocab_row()])[0]
    saved = from_saved_words([_saved_row()])[0]
    assert vocab.mastery.raw_value == saved.mastery.raw_value == "learning"
    assert not vocab.mastery.same_scale(saved.mastery)


def test_saved_word_example_sentences_skip_malformed_entries():
    sentence = {
        "arabic_msa": "هذا كتاب",
        "transliteration_msa": "hadha kitab",
        "arabic_egyptian": "ده كتاب",
        "transliteration_egyptian": "da kitab",
        "english": "This is a book",
    }
    item = from_saved_words([_saved_row(example_sentences=[sentence, {"english": "partial"}, 7])])[0]
    assert len(item.example_sentences) == 1
    assert item.example_sentences[0].english == "This is a book"


def test_mixed_rows_dispatch_and_deduplicate():
    rows = [_vocab_row(), _saved_row(), _vocab_row(word="duplicate"), Lesson(title="x", description="y", language="arabic")]
    items = to_practice_items(rows)

    assert [item.id for item in items] == ["v1", "s1"]
    assert items[0].target_text == "كتاب"
    assert [item.origin.type for item in items] == [PracticeSource.LESSON_VOCAB_ITEM, PracticeSource.SAVED_WORD]


def test_missing_vocabulary_mastery_is_left_absent():
    item = from_vocabulary_items([_vocab_row(mastery_level="")])[0]
    assert item.mastery is None
    assert item.times_correct is None


def test_saved_word_carries_times_correct():
    item = from_saved_words([_saved_row()])[0]
    assert item.times_practiced == 4
    assert item.times_correct == 2
