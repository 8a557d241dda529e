from fastapi import APIRouter, Depends
from sqlmodel import Session

from lingodeck.core.database import get_session
from lingodeck.schemas.exercise import ExercisePhase, ExerciseStateResponse, GoToItemRequest, SubmitAnswerRequest
from lingodeck.services.engine_registry import EngineRegistry, get_registry
from lingodeck.services.exercise_service import ExerciseSession
from lingodeck.services.practice_adapters import from_vocabulary_items
from lingodeck.services.vocabulary_service import get_lesson, get_lesson_vocabulary, record_session_results

router = APIRouter(prefix="/exercises", tags=["exercises"])


def _open_exercise(lesson_id: str, session: Session, registry: EngineRegistry) -> ExerciseSession:
    get_lesson(session, lesson_id)
    return registry.get_exercise(
        lesson_id,
        lambda: from_vocabulary_items(get_lesson_vocabulary(session, lesson_id)),
    )


def _to_response(lesson_id: str, exercise: ExerciseSession) -> ExerciseStateResponse:
    return ExerciseStateResponse(
        lesson_id=lesson_id,
        phase=exercise.phase,
        current_item=exercise.current_item,
        current_index=exercise.current_index,
        total_items=exercise.total_items,
        correct_count=exercise.correct_count,
        answers=exercise.answers,
        last_answer=exercise.last_answer,
        queue=exercise.queue,
        has_saved_progress=exercise.has_saved_progress,
        is_hydrated=exercise.is_hydrated,
    )


@router.get("/{lesson_id}", response_model=ExerciseStateResponse)
async def get_exercise(
    lesson_id: str,
    session: Session = Depends(get_session),
    registry: EngineRegistry = Depends(get_registry)
):
    """Get the exercise session for a lesson, resuming saved progress."""
    exercise = _open_exercise(lesson_id, session, registry)
    return _to_response(lesson_id, exercise)


@router.post("/{lesson_id}/answer", response_model=ExerciseStateResponse)
def submit_answer(
    lesson_id: str,
    request: SubmitAnswerRequest,
    session: Session = Depends(get_session),
    registry: EngineRegistry = Depends(get_registry)
):
    """
    Submit an answer for the current item.

    Ignored unless the session is prompting. Runs in the threadpool because
    answer evaluation may call the Gemini API.
    """
    exercise = _open_exercise(lesson_id, session, registry)
    exercise.submit_answer(request.answer)
    return _to_response(lesson_id, exercise)


@router.post("/{lesson_id}/skip", response_model=ExerciseStateResponse)
async def skip_item(
    lesson_id: str,
    session: Session = Depends(get_session),
    registry: EngineRegistry = Depends(get_registry)
):
    """Move the current item to the end of the queue."""
    exercise = _open_exercise(lesson_id, session, registry)
    exercise.skip()
    return _to_response(lesson_id, exercise)


@router.post("/{lesson_id}/continue", response_model=ExerciseStateResponse)
async def continue_to_next(
    lesson_id: str,
    session: Session = Depends(get_session),
    registry: EngineRegistry = Depends(get_registry)
):
    """
    Move on from feedback.

    When the last item has been answered the session completes: lesson
    progress and per-item practice results are stored before saved progress
    is cleared. If storing fails the session stays in feedback and the call
    can be retried.
    """
    exercise = _open_exercise(lesson_id, session, registry)
    lesson = get_lesson(session, lesson_id)

    def record(answers):
        record_session_results(session, lesson_id, lesson.language, exercise.items, answers)

    if exercise.continue_to_next(record) and exercise.phase == ExercisePhase.COMPLETE:
        response = _to_response(lesson_id, exercise)
        registry.drop_exercise(lesson_id)
        return response
    return _to_response(lesson_id, exercise)


@router.post("/{lesson_id}/go-to", response_model=ExerciseStateResponse)
async def go_to_item(
    lesson_id: str,
    request: GoToItemRequest,
    session: Session = Depends(get_session),
    registry: EngineRegistry = Depends(get_registry)
):
    """Jump to an unanswered item while prompting."""
    exercise = _open_exercise(lesson_id, session, registry)
    exercise.go_to_item(request.index)
    return _to_response(lesson_id, exercise)


@router.post("/{lesson_id}/start-fresh", response_model=ExerciseStateResponse)
async def start_fresh(
    lesson_id: str,
    session: Session = Depends(get_session),
    registry: EngineRegistry = Depends(get_registry)
):
    """Discard saved progress and restart the session."""
    exercise = _open_exercise(lesson_id, session, registry)
    exercise.start_fresh()
    return _to_response(lesson_id, exercise)
