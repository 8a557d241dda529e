"""
Lesson model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import List, TYPE_CHECKING
from datetime import datetime
import uuid

if TYPE_CHECKING:
    from lingodeck.models.vocabulary_item import VocabularyItem
    from lingodeck.models.lesson_progress import LessonProgress


class Lesson(SQLModel, table=True):
    """Lesson table - AI-generated lessons shown in the card stack."""
    __tablename__ = "lessons"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    title: str
    description: str
    language: str  # 'arabic' or 'spanish'
    difficulty: str = Field(default="new")  # Mastery level the lesson targets
    content_type: str = Field(default="word")
    estimated_minutes: int = Field(default=5)
    vocab_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    vocabulary_items: List["VocabularyItem"] = Relationship(back_populates="lesson")
    progress: List["LessonProgress"] = Relationship(back_populates="lesson")
