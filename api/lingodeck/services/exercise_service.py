"""
Exercise session engine.

The session is a queue of entries, one per item. The current item while
prompting is the first unanswered entry. Skipping rotates that entry to the
end of the queue without answering it, so a session can only complete once
every item has been answered. Answered entries stay in the queue.

Phases: prompting -> (submit) feedback -> (continue) prompting | complete.
Calls that do not fit the current phase are ignored.

Progress is saved as a versioned snapshot after every change and restored
on load, upgrading older snapshot versions first.
"""
import json
import logging
from typing import Callable, List, Optional, Sequence

from lingodeck.core.config import settings
from lingodeck.schemas.exercise import (
    AnswerResult,
    ExercisePhase,
    ExerciseSnapshot,
    QueueEntry,
)
from lingodeck.schemas.practice import PracticeItem
from lingodeck.services.answer_service import AnswerChecker
from lingodeck.services.scheduler import Scheduler, SystemScheduler
from lingodeck.services.snapshot_migrations import SnapshotError, load_snapshot
from lingodeck.services.storage_service import InMemoryStorage, KeyValueStorage

logger = logging.getLogger(__name__)


def progress_key(lesson_id: str, prefix: Optional[str] = None) -> str:
    """Storage key for a lesson's saved progress."""
    return f"{prefix if prefix is not None else settings.exercise_progress_key_prefix}{lesson_id}"


class ExerciseSession:
    """
    Exercise session over a fixed list of practice items.

    Args:
        items: Items of the lesson, in lesson order
        lesson_id: When set, progress is saved under the lesson's key
        storage: Key-value storage (in-memory when omitted)
        checker: Answer checker (exact match only when omitted)
        scheduler: Clock used for snapshot timestamps
        on_complete: Called with all answers when the session completes
        ttl_hours: Saved progress older than this is ignored
        key_prefix: Storage key prefix
        auto_hydrate: Restore saved progress immediately
    """

    def __init__(
        self,
        items: Sequence[PracticeItem],
        lesson_id: Optional[str] = None,
        storage: Optional[KeyValueStorage] = None,
        checker: Optional[AnswerChecker] = None,
        scheduler: Optional[Scheduler] = None,
        on_complete: Optional[Callable[[List[AnswerResult]], None]] = None,
        ttl_hours: Optional[int] = None,
        key_prefix: Optional[str] = None,
        auto_hydrate: bool = True,
    ):
        self.items = list(items)
        self.lesson_id = lesson_id
        self.storage = storage or InMemoryStorage()
        self.checker = checker or AnswerChecker()
        self.scheduler = scheduler or SystemScheduler()
        self.on_complete = on_complete
        self.ttl_hours = ttl_hours if ttl_hours is not None else settings.exercise_progress_ttl_hours
        self.key_prefix = key_prefix

        self._items_by_id = {item.id: item for item in self.items}
        self.queue: List[QueueEntry] = []
        self.answers: List[AnswerResult] = []
        self.phase = ExercisePhase.PROMPTING
        self.is_hydrated = False
        self.has_saved_progress = False

        self._start_queue()
        if auto_hydrate:
            self.hydrate()

    @property
    def storage_key(self) -> Optional[str]:
        if not self.lesson_id:
            return None
        return progress_key(self.lesson_id, self.key_prefix)

    def _start_queue(self) -> None:
        self.queue = [QueueEntry(item_id=item.id) for item in self.items]
        self.answers = []
        self.phase = ExercisePhase.COMPLETE if not self.queue else ExercisePhase.PROMPTING

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def hydrate(self) -> None:
        """
        Restore saved progress, if any is usable.

        Unparseable, unknown-version, expired or mismatched snapshots are
        discarded and the session stays on a fresh queue. A migrated snapshot
        is written back in the current format straight away.
        """
        self.has_saved_progress = False
        key = self.storage_key
        raw = self.storage.get(key) if key else None

        if raw:
            try:
                snapshot, migrated = load_snapshot(json.loads(raw), list(self._items_by_id))
                self._restore(snapshot, migrated)
            except (SnapshotError, ValueError) as e:
                logger.warning(f"Discarding saved progress '{key}': {str(e)}")

        self.is_hydrated = True

    def _restore(self, snapshot: ExerciseSnapshot, migrated: bool) -> None:
        age_ms = self.scheduler.now_ms() - snapshot.saved_at
        if age_ms >= self.ttl_hours * 60 * 60 * 1000:
            logger.info(f"Ignoring expired progress for lesson {self.lesson_id}")
            return

        self.queue = list(snapshot.queue)
        self.answers = list(snapshot.answers)
        self.phase = snapshot.phase
        self.has_saved_progress = any(entry.answered for entry in self.queue)
        logger.info(
            f"Restored progress for lesson {self.lesson_id}: "
            f"{len(self.answers)}/{len(self.queue)} answered, phase {self.phase.value}"
        )
        if migrated:
            self._persist()

    def _persist(self) -> None:
        self._write(self.queue, self.answers, self.phase)

    def _write(self, queue: List[QueueEntry], answers: List[AnswerResult], phase: ExercisePhase) -> None:
        key = self.storage_key
        if not key:
            return
        snapshot = ExerciseSnapshot(
            queue=queue,
            answers=answers,
            phase=phase,
            saved_at=self.scheduler.now_ms(),
        )
        self.storage.set(key, snapshot.model_dump_json())

    def _commit(self, queue: List[QueueEntry], answers: List[AnswerResult], phase: ExercisePhase) -> None:
        # Storage first: a failed write leaves the session as it was
        self._write(queue, answers, phase)
        self.queue = queue
        self.answers = answers
        self.phase = phase

    def _clear_saved(self) -> None:
        key = self.storage_key
        if key:
            self.storage.remove(key)

    # ------------------------------------------------------------------
    # Queue helpers
    # ------------------------------------------------------------------

    def _unanswered_positions(self) -> List[int]:
        return [index for index, entry in enumerate(self.queue) if not entry.answered]

    def _current_position(self) -> Optional[int]:
        if self.phase == ExercisePhase.FEEDBACK and self.answers:
            last_id = self.answers[-1].item_id
            for index, entry in enumerate(self.queue):
                if entry.item_id == last_id:
                    return index
            return None
        if self.phase == ExercisePhase.PROMPTING:
            positions = self._unanswered_positions()
            return positions[0] if positions else None
        return None

    @staticmethod
    def _rotated(queue: List[QueueEntry], times: int = 1) -> List[QueueEntry]:
        queue = list(queue)
        for _ in range(times):
            position = next(index for index, entry in enumerate(queue) if not entry.answered)
            queue.append(queue.pop(position))
        return queue

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def submit_answer(self, answer: str) -> Optional[AnswerResult]:
        """
        Check and record an answer for the current item.

        Ignored unless the session is prompting, so a repeated submission
        during feedback does nothing.

        Returns:
            The recorded result, or None if the call was ignored
        """
        if self.phase != ExercisePhase.PROMPTING:
            return None
        position = self._current_position()
        if position is None:
            return None

        entry = self.queue[position]
        result = self.checker.check(self._items_by_id[entry.item_id], answer)

        queue = list(self.queue)
        queue[position] = QueueEntry(item_id=entry.item_id, answered=True, correct=result.correct)
        self._commit(queue, self.answers + [result], ExercisePhase.FEEDBACK)
        return result

    def skip(self) -> bool:
        """
        Move the current item to the end of the queue without answering it.

        Returns:
            True if the queue changed
        """
        if self.phase != ExercisePhase.PROMPTING or self._current_position() is None:
            return False
        self._commit(self._rotated(self.queue), self.answers, self.phase)
        return True

    def go_to_item(self, index: int) -> bool:
        """
        Make the unanswered item at position index the current one.

        Equivalent to skipping index times. Only allowed while prompting.

        Returns:
            True if the queue changed
        """
        if self.phase != ExercisePhase.PROMPTING:
            return False
        if index < 0 or index >= len(self._unanswered_positions()):
            return False
        if index == 0:
            return True
        self._commit(self._rotated(self.queue, index), self.answers, self.phase)
        return True

    def continue_to_next(
        self,
        record: Optional[Callable[[List[AnswerResult]], None]] = None,
    ) -> bool:
        """
        Leave feedback for the next unanswered item, or complete the session.

        On completion, record and then on_complete are called with every
        answer before saved progress is cleared. If either raises, the
        session stays in feedback with its progress saved, so the call can
        be retried.

        Args:
            record: Called with the answers on completion, ahead of on_complete

        Returns:
            True if the phase changed
        """
        if self.phase != ExercisePhase.FEEDBACK:
            return False

        if self._unanswered_positions():
            self._commit(self.queue, self.answers, ExercisePhase.PROMPTING)
            return True

        if record:
            record(list(self.answers))
        if self.on_complete:
            self.on_complete(list(self.answers))
        self._clear_saved()
        self.phase = ExercisePhase.COMPLETE
        logger.info(f"Exercise complete for lesson {self.lesson_id}: {self.correct_count}/{self.total_items} correct")
        return True

    def reset(self) -> None:
        """Start over. Saved progress stays until the next write."""
        self._start_queue()

    def start_fresh(self) -> None:
        """Clear saved progress and start over."""
        self._clear_saved()
        self.has_saved_progress = False
        self._start_queue()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def current_item(self) -> Optional[PracticeItem]:
        position = self._current_position()
        if position is None:
            return None
        return self._items_by_id.get(self.queue[position].item_id)

    @property
    def current_index(self) -> int:
        """Number of items already moved past in this session."""
        if self.phase == ExercisePhase.FEEDBACK:
            return len(self.answers) - 1
        return len(self.answers)

    @property
    def total_items(self) -> int:
        return len(self.queue)

    @property
    def correct_count(self) -> int:
        return sum(1 for answer in self.answers if answer.correct)

    @property
    def last_answer(self) -> Optional[AnswerResult]:
        return self.answers[-1] if self.answers else None
