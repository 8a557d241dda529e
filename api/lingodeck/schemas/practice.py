"""
PracticeItem schemas - canonical, source-agnostic representation of a learnable unit.

Every source table is mapped into a PracticeItem by an adapter in
lingodeck.services.practice_adapters. Learning state is carried raw: the
meaning of a mastery token depends on which source produced it, so it is
wrapped together with its origin in RawMastery.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from lingodeck.models.enums import (
    AnswerType,
    ContentType,
    PracticeLanguage,
    PracticeSource,
    PromptType,
)


class HebrewCognate(BaseModel):
    """Hebrew cognate of an Arabic word."""
    root: str
    meaning: Optional[str] = None
    notes: Optional[str] = None


class LetterBreakdown(BaseModel):
    """One letter of an Arabic/Hebrew word with its name and sound."""
    letter: str
    name: str
    sound: str


class ExampleSentence(BaseModel):
    """Example sentence with MSA and Egyptian versions."""
    arabic_msa: str
    transliteration_msa: str
    arabic_egyptian: str
    transliteration_egyptian: str
    english: str
    explanation: Optional[str] = None


class RawMastery(BaseModel):
    """
    Mastery token tagged with the origin that produced it.

    Lesson vocabulary uses new/learning/practiced/mastered while saved words
    only ever produce learning/practiced. The two scales are not unified, so
    values from different origins must not be compared.
    """
    origin_type: PracticeSource
    raw_value: str

    def same_scale(self, other: "RawMastery") -> bool:
        """True when both tokens come from the same origin and may be compared."""
        return self.origin_type == other.origin_type


class PracticeOrigin(BaseModel):
    """Which source record a practice item came from."""
    type: PracticeSource
    id: Optional[str] = None


class PracticeLinkage(BaseModel):
    """Back-references to source records, for navigation only."""
    lesson_id: Optional[str] = None
    vocabulary_item_id: Optional[str] = None
    saved_word_id: Optional[str] = None


class PracticeItem(BaseModel):
    """Single abstraction for all practice content."""
    # Identity
    id: str
    language: PracticeLanguage
    content_type: ContentType = ContentType.WORD

    # Core content
    target_text: str
    translation: str
    transliteration: Optional[str] = None

    # Exercise framing
    prompt_type: PromptType = PromptType.SHOW_TARGET
    answer_type: AnswerType = AnswerType.TEXT_TRANSLATION

    # Learning state, raw per origin
    mastery: Optional[RawMastery] = None
    times_practiced: Optional[int] = None
    times_correct: Optional[int] = None
    last_reviewed: Optional[datetime] = None
    next_review: Optional[datetime] = None

    # Provenance
    origin: PracticeOrigin
    linkage: Optional[PracticeLinkage] = None

    # Enrichments
    letter_breakdown: Optional[List[LetterBreakdown]] = None
    hebrew_cognate: Optional[HebrewCognate] = None
    example_sentences: Optional[List[ExampleSentence]] = None

    # Memory aids
    memory_note: Optional[str] = None
    memory_image_url: Optional[str] = None

    created_at: Optional[datetime] = None

    def to_json_dict(self) -> dict:
        """Serialize with absent fields left out."""
        return self.model_dump(mode="json", exclude_none=True)


class PracticeItemsResponse(BaseModel):
    """Practice items loaded from the store."""
    items: List[PracticeItem]
    total: int = Field(..., description="Number of items returned")
