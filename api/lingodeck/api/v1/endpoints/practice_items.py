from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import Optional

from lingodeck.core.database import get_session
from lingodeck.schemas.practice import PracticeItemsResponse
from lingodeck.services.hebrew_cognate_service import cognate_for_item
from lingodeck.services.vocabulary_service import get_practice_items

router = APIRouter(prefix="/practice-items", tags=["practice-items"])


@router.get("", response_model=PracticeItemsResponse, response_model_exclude_none=True)
async def list_practice_items(
    lesson_id: Optional[str] = Query(None, description="Only this lesson's vocabulary"),
    include_saved: bool = Query(True, description="Include saved words"),
    with_cognates: bool = Query(False, description="Attach the Hebrew cognate to display, if any"),
    session: Session = Depends(get_session)
):
    """
    Practice items from lesson vocabulary and saved words.

    With with_cognates, each item carries the gated Hebrew cognate: its own
    cognate or a table match, and none for non-Arabic or multi-word items.
    """
    items = get_practice_items(session, lesson_id=lesson_id, include_saved=include_saved)
    if with_cognates:
        items = [item.model_copy(update={"hebrew_cognate": cognate_for_item(item)}) for item in items]
    return PracticeItemsResponse(items=items, total=len(items))
