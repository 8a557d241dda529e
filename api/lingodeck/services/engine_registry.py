"""
Process-local registry of practice engines.

The app is single-user, so one CardStack per stack key and one
ExerciseSession per lesson are kept in memory. Their state is written through
to durable storage, so a restarted process picks up where it left off.
"""
import logging
from typing import Callable, Dict, List, Optional

from sqlmodel import Session

from lingodeck.core.config import settings
from lingodeck.core.database import engine
from lingodeck.schemas.practice import PracticeItem
from lingodeck.services.answer_service import AnswerChecker, GeminiAnswerEvaluator
from lingodeck.services.card_stack_service import CardStack
from lingodeck.services.exercise_service import ExerciseSession
from lingodeck.services.scheduler import Scheduler, SystemScheduler
from lingodeck.services.storage_service import DatabaseStorage, KeyValueStorage

logger = logging.getLogger(__name__)

ItemLoader = Callable[[], List[PracticeItem]]


def default_answer_checker() -> AnswerChecker:
    """Exact matching, plus Gemini evaluation when an API key is configured."""
    if settings.google_gemini_api_key:
        return AnswerChecker(GeminiAnswerEvaluator())
    return AnswerChecker()


class EngineRegistry:
    """
    Holds the live engines.

    Args:
        storage: Storage shared by all engines
        scheduler: Scheduler shared by all engines
        checker_factory: Builds the answer checker for a new exercise session
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        scheduler: Optional[Scheduler] = None,
        checker_factory: Callable[[], AnswerChecker] = default_answer_checker,
    ):
        self.storage = storage
        self.scheduler = scheduler or SystemScheduler()
        self.checker_factory = checker_factory
        self._card_stacks: Dict[str, CardStack] = {}
        self._exercises: Dict[str, ExerciseSession] = {}

    def run_pending(self) -> None:
        """Run due deferred callbacks (undo expiry)."""
        if isinstance(self.scheduler, SystemScheduler):
            self.scheduler.run_pending()

    def get_card_stack(self, key: str, load_items: ItemLoader) -> CardStack:
        """Card stack for key, created from load_items on first use."""
        self.run_pending()
        stack = self._card_stacks.get(key)
        if stack is None:
            stack = CardStack(
                load_items(),
                persist_key=key,
                storage=self.storage,
                scheduler=self.scheduler,
            )
            self._card_stacks[key] = stack
            logger.info(f"Opened card stack '{key}' with {stack.total_cards} cards")
        return stack

    def get_exercise(self, lesson_id: str, load_items: ItemLoader) -> ExerciseSession:
        """Exercise session for a lesson, created and hydrated on first use."""
        self.run_pending()
        exercise = self._exercises.get(lesson_id)
        if exercise is None:
            exercise = ExerciseSession(
                load_items(),
                lesson_id=lesson_id,
                storage=self.storage,
                checker=self.checker_factory(),
                scheduler=self.scheduler,
            )
            self._exercises[lesson_id] = exercise
            logger.info(f"Opened exercise for lesson {lesson_id} with {exercise.total_items} items")
        return exercise

    def drop_card_stack(self, key: str) -> None:
        """Forget a card stack and its saved state."""
        self.storage.remove(key)
        self._card_stacks.pop(key, None)
        logger.info(f"Dropped card stack '{key}'")

    def drop_exercise(self, lesson_id: str) -> None:
        self._exercises.pop(lesson_id, None)


_registry: Optional[EngineRegistry] = None


def get_registry() -> EngineRegistry:
    """FastAPI dependency returning the process-wide registry."""
    global _registry
    if _registry is None:
        _registry = EngineRegistry(DatabaseStorage(lambda: Session(engine)))
    return _registry
