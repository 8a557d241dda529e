"""
SavedWord and WordContext models.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON, UniqueConstraint
from typing import Optional, List, Dict, Any
from datetime import datetime
import uuid


class SavedWord(SQLModel, table=True):
    """SavedWord table - words the user saved from lookups and lessons (origin 'saved_word')."""
    __tablename__ = "saved_words"
    __table_args__ = (UniqueConstraint("word", "language", name="saved_words_word_language_key"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    word: str = Field(index=True)
    translation: str
    language: str = Field(default="arabic")

    # Dialect-specific pronunciations
    pronunciation_standard: Optional[str] = None  # MSA/Fusha transliteration
    pronunciation_egyptian: Optional[str] = None

    # Learning metadata
    letter_breakdown: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON))
    hebrew_cognate: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    example_sentences: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON))

    # Organization
    topic: Optional[str] = Field(default=None, index=True)
    tags: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))

    # Review status
    status: str = Field(default="active", index=True)  # active / learned / retired
    times_practiced: int = Field(default=0)
    times_correct: int = Field(default=0)
    last_practiced: Optional[datetime] = None
    next_review: Optional[datetime] = None

    # Memory aids
    memory_note: Optional[str] = None
    memory_image_url: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    contexts: List["WordContext"] = Relationship(back_populates="saved_word")


class WordContext(SQLModel, table=True):
    """WordContext table - where a saved word was encountered."""
    __tablename__ = "word_contexts"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    saved_word_id: str = Field(foreign_key="saved_words.id", index=True)
    content_type: str  # word / sentence / dialog / passage / lookup
    full_text: str
    full_transliteration: Optional[str] = None
    full_translation: str
    speaker: Optional[str] = None
    dialog_context: Optional[str] = None
    lesson_id: Optional[str] = Field(default=None, foreign_key="lessons.id")
    vocabulary_item_id: Optional[str] = Field(default=None, foreign_key="vocabulary_items.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    saved_word: Optional[SavedWord] = Relationship(back_populates="contexts")
