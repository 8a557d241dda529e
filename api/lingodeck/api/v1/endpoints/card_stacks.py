from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from typing import Optional

from lingodeck.core.database import get_session
from lingodeck.schemas.card_stack import CardAction, CardStackResetRequest, CardStackResponse
from lingodeck.services.card_stack_service import CardStack
from lingodeck.services.engine_registry import EngineRegistry, get_registry
from lingodeck.services.vocabulary_service import get_practice_items

router = APIRouter(prefix="/card-stacks", tags=["card-stacks"])


def _open_stack(
    key: str,
    lesson_id: Optional[str],
    include_saved: bool,
    session: Session,
    registry: EngineRegistry,
) -> CardStack:
    return registry.get_card_stack(
        key,
        lambda: get_practice_items(session, lesson_id=lesson_id, include_saved=include_saved),
    )


def _to_response(key: str, stack: CardStack) -> CardStackResponse:
    return CardStackResponse(
        key=key,
        active_lessons=stack.active_lessons,
        saved_lessons=stack.saved_lessons,
        dismissed_count=stack.dismissed_count,
        total_cards=stack.total_cards,
        remaining_cards=stack.remaining_cards,
        can_undo=stack.can_undo,
        last_action=stack.last_action,
    )


@router.get("/{key}", response_model=CardStackResponse, response_model_exclude_none=True)
async def get_card_stack(
    key: str,
    lesson_id: Optional[str] = Query(None, description="Build the stack from this lesson only"),
    include_saved: bool = Query(True, description="Include saved words"),
    session: Session = Depends(get_session),
    registry: EngineRegistry = Depends(get_registry)
):
    """
    Get a card stack.

    The stack is built from the store on first use and restored from saved
    state when there is any.
    """
    stack = _open_stack(key, lesson_id, include_saved, session, registry)
    return _to_response(key, stack)


@router.post("/{key}/actions", response_model=CardStackResponse, response_model_exclude_none=True)
async def apply_card_action(
    key: str,
    action: CardAction,
    session: Session = Depends(get_session),
    registry: EngineRegistry = Depends(get_registry)
):
    """Apply dismiss, save, later or start to a card. Unknown item ids are ignored."""
    stack = _open_stack(key, None, True, session, registry)
    stack.handle_action(action)
    return _to_response(key, stack)


@router.post("/{key}/undo", response_model=CardStackResponse, response_model_exclude_none=True)
async def undo_card_action(
    key: str,
    session: Session = Depends(get_session),
    registry: EngineRegistry = Depends(get_registry)
):
    """Undo the last action if it is still inside the undo window."""
    stack = _open_stack(key, None, True, session, registry)
    stack.undo_last_action()
    return _to_response(key, stack)


@router.post("/{key}/reset", response_model=CardStackResponse, response_model_exclude_none=True)
async def reset_card_stack(
    key: str,
    request: CardStackResetRequest,
    session: Session = Depends(get_session),
    registry: EngineRegistry = Depends(get_registry)
):
    """
    Reset a card stack.

    With preserve_status the stack is rebuilt from the store and existing
    cards keep their status. Otherwise every original card goes back to active.
    """
    stack = _open_stack(key, request.lesson_id, request.include_saved, session, registry)
    if request.preserve_status:
        stack.reset_with_lessons(
            get_practice_items(session, lesson_id=request.lesson_id, include_saved=request.include_saved)
        )
    else:
        stack.reset_cards()
    return _to_response(key, stack)


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card_stack(
    key: str,
    registry: EngineRegistry = Depends(get_registry)
):
    """Forget a card stack. The next GET rebuilds it from the store."""
    registry.drop_card_stack(key)
