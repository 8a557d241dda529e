"""
Card stack schemas.
"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional

from lingodeck.schemas.practice import PracticeItem


class CardStatus(str, Enum):
    """Browsing-flow status of a card."""
    ACTIVE = "active"
    LATER = "later"
    SAVED = "saved"
    DISMISSED = "dismissed"


class CardActionType(str, Enum):
    """User action on a card."""
    DISMISS = "dismiss"
    SAVE = "save"
    LATER = "later"
    START = "start"


class CardAction(BaseModel):
    """Action dispatched against one card."""
    type: CardActionType
    item_id: str = Field(..., description="ID of the practice item the card wraps")

    class Config:
        json_schema_extra = {
            "example": {
                "type": "dismiss",
                "item_id": "1"
            }
        }


class CardState(BaseModel):
    """A practice item with its browsing status.

    Persisted as {"lesson": ..., "status": ...} records.
    """
    item: PracticeItem = Field(..., alias="lesson")
    status: CardStatus = CardStatus.ACTIVE

    class Config:
        populate_by_name = True


class UndoState(BaseModel):
    """Previous card list captured before a status-changing action."""
    action: CardAction
    previous_cards: List[CardState]
    captured_at: int = Field(..., description="Capture time in milliseconds")


class CardStackResetRequest(BaseModel):
    """Request to rebuild a card stack from the store."""
    lesson_id: Optional[str] = Field(None, description="Limit items to one lesson")
    include_saved: bool = Field(True, description="Include saved words")
    preserve_status: bool = Field(True, description="Keep existing statuses by item id")


class CardStackResponse(BaseModel):
    """Read-only projection of a card stack."""
    key: str
    active_lessons: List[PracticeItem]
    saved_lessons: List[PracticeItem]
    dismissed_count: int
    total_cards: int
    remaining_cards: int
    can_undo: bool
    last_action: Optional[CardAction] = None
