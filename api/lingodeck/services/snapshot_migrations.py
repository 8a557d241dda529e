"""
Versioned exercise snapshots and their migrations.

Snapshots are upgraded on read, before the session looks at them, by
applying registered migrations one version at a time until the current
version is reached. Version 1 is the legacy linear format:

    {"currentIndex": 1, "answers": [{"itemId": ..., "correct": ...,
     "userAnswer": ..., "correctAnswer": ..., "feedback": ...}],
     "savedAt": 1700000000000}

It has no version key, no phase and no queue. Version 2 is ExerciseSnapshot.
Version 1 must stay readable; there is no batch migration.
"""
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from lingodeck.schemas.exercise import AnswerResult, ExercisePhase, ExerciseSnapshot, QueueEntry

logger = logging.getLogger(__name__)

CURRENT_VERSION = 2

Migration = Callable[[Dict[str, Any], Sequence[str]], Dict[str, Any]]


class SnapshotError(ValueError):
    """Stored snapshot cannot be used."""
    pass


def detect_version(data: Any) -> int:
    """
    Version of a raw snapshot.

    Raises:
        SnapshotError: If the data is not a recognizable snapshot
    """
    if not isinstance(data, dict):
        raise SnapshotError("snapshot is not an object")
    if "version" in data:
        version = data["version"]
        if not isinstance(version, int) or isinstance(version, bool):
            raise SnapshotError(f"invalid version {version!r}")
        return version
    if "currentIndex" in data and "answers" in data:
        return 1
    raise SnapshotError("snapshot has no version and is not a version 1 snapshot")


def _v1_answer(entry: Any) -> Optional[AnswerResult]:
    if not isinstance(entry, dict):
        return None
    try:
        return AnswerResult(
            item_id=entry["itemId"],
            correct=entry["correct"],
            user_answer=entry.get("userAnswer") or "",
            correct_answer=entry.get("correctAnswer") or "",
            feedback=entry.get("feedback"),
        )
    except (KeyError, ValidationError):
        return None


def migrate_v1_to_v2(data: Dict[str, Any], item_ids: Sequence[str]) -> Dict[str, Any]:
    """
    Upgrade a linear-index snapshot to the queue format.

    Answered items become answered queue entries, in answer order, carrying
    their correctness. Every other item follows in its original order.

    Version 1 had no phase, so the result is prompting. The exception is a
    snapshot saved after the last item was answered but before the session
    moved on: it resumes in feedback on the last answer, so continuing
    completes the session.
    """
    raw_answers = data.get("answers")
    if not isinstance(raw_answers, list):
        raise SnapshotError("version 1 answers is not a list")
    saved_at = data.get("savedAt")
    if not isinstance(saved_at, (int, float)) or isinstance(saved_at, bool):
        raise SnapshotError("version 1 savedAt is missing")
    if not math.isfinite(saved_at):
        raise SnapshotError(f"version 1 savedAt is not finite: {saved_at!r}")

    known = set(item_ids)
    answers: List[AnswerResult] = []
    answered = set()
    for entry in raw_answers:
        answer = _v1_answer(entry)
        if answer is None:
            raise SnapshotError("version 1 answer is malformed")
        # Answers for items no longer in the lesson are dropped
        if answer.item_id not in known or answer.item_id in answered:
            continue
        answered.add(answer.item_id)
        answers.append(answer)

    queue = [QueueEntry(item_id=a.item_id, answered=True, correct=a.correct) for a in answers]
    queue += [QueueEntry(item_id=item_id) for item_id in item_ids if item_id not in answered]

    phase = ExercisePhase.PROMPTING
    if answers and all(entry.answered for entry in queue):
        phase = ExercisePhase.FEEDBACK

    return {
        "version": 2,
        "queue": [entry.model_dump() for entry in queue],
        "answers": [answer.model_dump() for answer in answers],
        "phase": phase.value,
        "saved_at": int(saved_at),
    }


MIGRATIONS: Dict[int, Migration] = {
    1: migrate_v1_to_v2,
}


def upgrade(data: Any, item_ids: Sequence[str]) -> Tuple[Dict[str, Any], bool]:
    """
    Apply migrations until the snapshot is at the current version.

    Args:
        data: Parsed snapshot JSON
        item_ids: Item ids of the session, in lesson order

    Returns:
        Tuple of (snapshot at the current version, whether any migration ran)

    Raises:
        SnapshotError: Unknown version or malformed data
    """
    version = detect_version(data)
    migrated = False
    while version < CURRENT_VERSION:
        migration = MIGRATIONS.get(version)
        if migration is None:
            raise SnapshotError(f"no migration from version {version}")
        data = migration(data, item_ids)
        logger.info(f"Migrated exercise snapshot from version {version} to {version + 1}")
        version = detect_version(data)
        migrated = True
    if version != CURRENT_VERSION:
        raise SnapshotError(f"unsupported snapshot version {version}")
    return data, migrated


def load_snapshot(data: Any, item_ids: Sequence[str]) -> Tuple[ExerciseSnapshot, bool]:
    """
    Upgrade and validate a snapshot against the session's items.

    The queue must hold exactly the given item ids, the answered entries must
    match the recorded answers, and the phase must agree with the queue.

    Returns:
        Tuple of (validated snapshot, whether it was migrated)

    Raises:
        SnapshotError: If the snapshot cannot be used
    """
    upgraded, migrated = upgrade(data, item_ids)
    try:
        snapshot = ExerciseSnapshot.model_validate(upgraded)
    except ValidationError as e:
        raise SnapshotError(f"invalid snapshot: {e.error_count()} error(s)") from e

    queue_ids = [entry.item_id for entry in snapshot.queue]
    if len(queue_ids) != len(item_ids) or set(queue_ids) != set(item_ids):
        raise SnapshotError("snapshot items do not match the session items")

    answered_ids = [entry.item_id for entry in snapshot.queue if entry.answered]
    answer_ids = [answer.item_id for answer in snapshot.answers]
    if sorted(answered_ids) != sorted(answer_ids):
        raise SnapshotError("answered entries do not match recorded answers")

    remaining = len(queue_ids) - len(answered_ids)
    if snapshot.phase == ExercisePhase.PROMPTING and remaining == 0:
        raise SnapshotError("prompting snapshot has nothing left to answer")
    if snapshot.phase == ExercisePhase.FEEDBACK and not snapshot.answers:
        raise SnapshotError("feedback snapshot has no answer")
    if snapshot.phase == ExercisePhase.COMPLETE and remaining > 0:
        raise SnapshotError("complete snapshot has unanswered items")

    return snapshot, migrated
