"""
VocabularyItem model.
"""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import Optional, List, Dict, Any, TYPE_CHECKING
from datetime import datetime
import uuid

if TYPE_CHECKING:
    from lingodeck.models.lesson import Lesson


class VocabularyItem(SQLModel, table=True):
    """VocabularyItem table - lesson-driven vocabulary (origin 'lesson_vocab_item')."""
    __tablename__ = "vocabulary_items"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    lesson_id: str = Field(foreign_key="lessons.id", index=True)
    word: str
    translation: str
    language: str
    content_type: Optional[str] = Field(default="word")
    transliteration: Optional[str] = None
    hebrew_cognate: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    letter_breakdown: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON))
    # Dialog-specific fields
    speaker: Optional[str] = None
    context: Optional[str] = None
    mastery_level: str = Field(default="new")  # new / learning / practiced / mastered
    times_practiced: int = Field(default=0)
    last_reviewed: Optional[datetime] = None
    next_review: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    lesson: Optional["Lesson"] = Relationship(back_populates="vocabulary_items")
