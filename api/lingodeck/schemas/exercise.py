"""
Exercise session schemas.
"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from lingodeck.schemas.practice import PracticeItem


class ExercisePhase(str, Enum):
    """Exercise session state."""
    PROMPTING = "prompting"
    FEEDBACK = "feedback"
    COMPLETE = "complete"


class QueueEntry(BaseModel):
    """Whether and how one item of the session was answered."""
    item_id: str
    answered: bool = False
    correct: Optional[bool] = None


class AnswerResult(BaseModel):
    """Outcome of one submitted answer."""
    item_id: str
    correct: bool
    user_answer: str
    correct_answer: str
    feedback: Optional[str] = None


class ExerciseSnapshot(BaseModel):
    """Current (version 2) persisted session format."""
    version: Literal[2] = 2
    queue: List[QueueEntry]
    answers: List[AnswerResult] = []
    phase: ExercisePhase = ExercisePhase.PROMPTING
    saved_at: int = Field(..., description="Save time in epoch milliseconds")


class SubmitAnswerRequest(BaseModel):
    """Answer for the current item."""
    answer: str = Field(..., description="The learner's answer")

    class Config:
        json_schema_extra = {
            "example": {
                "answer": "book"
            }
        }


class GoToItemRequest(BaseModel):
    """Jump to an unanswered item."""
    index: int = Field(..., ge=0, description="Position among the unanswered items")


class ExerciseStateResponse(BaseModel):
    """Read-only projection of an exercise session."""
    lesson_id: str
    phase: ExercisePhase
    current_item: Optional[PracticeItem] = None
    current_index: int
    total_items: int
    correct_count: int
    answers: List[AnswerResult]
    last_answer: Optional[AnswerResult] = None
    queue: List[QueueEntry]
    has_saved_progress: bool
    is_hydrated: bool
