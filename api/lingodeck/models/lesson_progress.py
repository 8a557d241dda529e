"""
LessonProgress model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime
import uuid

if TYPE_CHECKING:
    from lingodeck.models.lesson import Lesson


class LessonProgress(SQLModel, table=True):
    """LessonProgress table - one row per completed exercise session."""
    __tablename__ = "lesson_progress"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    lesson_id: str = Field(foreign_key="lessons.id", index=True)
    language: str
    completed_date: datetime = Field(default_factory=datetime.utcnow)
    score: Optional[int] = None  # Percent correct
    items_practiced: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    lesson: Optional["Lesson"] = Relationship(back_populates="progress")
