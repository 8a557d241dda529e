"""
Vocabulary service - loads source rows and records practice results.

Rows come from the vocabulary_items and saved_words tables and are turned
into PracticeItems by the adapters. Database failures are rolled back and
raised as UpstreamServiceError so the caller keeps its previous state.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from lingodeck.core.exceptions import NotFoundError, UpstreamServiceError
from lingodeck.models.enums import MasteryLevel, PracticeSource, WordStatus
from lingodeck.models.lesson import Lesson
from lingodeck.models.lesson_progress import LessonProgress
from lingodeck.models.saved_word import SavedWord
from lingodeck.models.vocabulary_item import VocabularyItem
from lingodeck.schemas.exercise import AnswerResult
from lingodeck.schemas.practice import PracticeItem
from lingodeck.services.practice_adapters import to_practice_items

logger = logging.getLogger(__name__)

# (level, practices needed to leave it, next level); progression only on correct answers
MASTERY_PROGRESSION = {
    MasteryLevel.NEW.value: (2, MasteryLevel.LEARNING.value),
    MasteryLevel.LEARNING.value: (5, MasteryLevel.PRACTICED.value),
    MasteryLevel.PRACTICED.value: (10, MasteryLevel.MASTERED.value),
}

# Hours until the next review, per mastery level
REVIEW_INTERVAL_HOURS = {
    MasteryLevel.NEW.value: 1,
    MasteryLevel.LEARNING.value: 24,
    MasteryLevel.PRACTICED.value: 72,
    MasteryLevel.MASTERED.value: 168,
}


def next_mastery_level(current: str, times_practiced: int, correct: bool) -> str:
    """
    Mastery level after one more practice.

    Args:
        current: Current mastery level
        times_practiced: Practice count including this practice
        correct: Whether the answer was correct

    Returns:
        The new mastery level
    """
    if not correct or current not in MASTERY_PROGRESSION:
        return current
    threshold, next_level = MASTERY_PROGRESSION[current]
    return next_level if times_practiced >= threshold else current


def get_lesson_vocabulary(session: Session, lesson_id: str) -> List[VocabularyItem]:
    """Vocabulary rows of a lesson, oldest first."""
    try:
        return list(session.exec(
            select(VocabularyItem)
            .where(VocabularyItem.lesson_id == lesson_id)
            .order_by(VocabularyItem.created_at)  # type: ignore
        ).all())
    except SQLAlchemyError as e:
        logger.error(f"Error fetching vocabulary for lesson {lesson_id}: {str(e)}")
        raise UpstreamServiceError("Failed to fetch vocabulary") from e


def get_saved_words(
    session: Session,
    status: Optional[str] = None,
    topic: Optional[str] = None,
    search: Optional[str] = None,
) -> List[SavedWord]:
    """
    Saved words, newest first.

    Args:
        session: Database session
        status: Only words with this status. Retired words are left out
            unless asked for explicitly.
        topic: Only words with this topic
        search: Substring match on word or translation

    Returns:
        Matching saved_words rows
    """
    query = select(SavedWord)
    if status:
        query = query.where(SavedWord.status == status)
    else:
        query = query.where(SavedWord.status != WordStatus.RETIRED.value)
    if topic:
        query = query.where(SavedWord.topic == topic)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            SavedWord.word.ilike(pattern),  # type: ignore
            SavedWord.translation.ilike(pattern),  # type: ignore
        ))

    try:
        return list(session.exec(query.order_by(SavedWord.created_at.desc())).all())  # type: ignore
    except SQLAlchemyError as e:
        logger.error(f"Error fetching saved words: {str(e)}")
        raise UpstreamServiceError("Failed to fetch saved words") from e


def get_practice_items(
    session: Session,
    lesson_id: Optional[str] = None,
    include_saved: bool = True,
) -> List[PracticeItem]:
    """
    Practice items from lesson vocabulary and saved words.

    Args:
        session: Database session
        lesson_id: When given, only this lesson's vocabulary is loaded
        include_saved: Append saved words after lesson vocabulary

    Returns:
        PracticeItems with unique ids, lesson vocabulary first
    """
    if lesson_id:
        vocabulary = get_lesson_vocabulary(session, lesson_id)
    else:
        try:
            vocabulary = list(session.exec(
                select(VocabularyItem).order_by(VocabularyItem.created_at)  # type: ignore
            ).all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching vocabulary: {str(e)}")
            raise UpstreamServiceError("Failed to fetch vocabulary") from e

    saved = get_saved_words(session) if include_saved else []
    return to_practice_items([*vocabulary, *saved])


def get_lesson(session: Session, lesson_id: str) -> Lesson:
    """
    Raises:
        NotFoundError: If the lesson does not exist
    """
    lesson = session.get(Lesson, lesson_id)
    if not lesson:
        raise NotFoundError(f"Lesson with id {lesson_id} not found")
    return lesson


def _apply_vocabulary_mastery(item: VocabularyItem, correct: bool, now: datetime) -> None:
    item.times_practiced = (item.times_practiced or 0) + 1
    item.mastery_level = next_mastery_level(item.mastery_level, item.times_practiced, correct)
    item.last_reviewed = now
    item.next_review = now + timedelta(hours=REVIEW_INTERVAL_HOURS.get(item.mastery_level, 1))


def _apply_saved_word_practice(word: SavedWord, correct: bool, now: datetime) -> None:
    word.times_practiced = (word.times_practiced or 0) + 1
    if correct:
        word.times_correct = (word.times_correct or 0) + 1
    word.last_practiced = now
    word.updated_at = now


def _build_lesson_progress(lesson_id: str, language: str, answers: Sequence[AnswerResult]) -> LessonProgress:
    correct_count = sum(1 for answer in answers if answer.correct)
    score = round(correct_count / len(answers) * 100) if answers else 0
    return LessonProgress(
        lesson_id=lesson_id,
        language=language,
        score=score,
        items_practiced=len(answers),
    )


def update_vocabulary_mastery(
    session: Session,
    item_id: str,
    correct: bool,
    now: Optional[datetime] = None,
) -> Optional[VocabularyItem]:
    """
    Count one practice of a lesson vocabulary item and move its mastery on.

    Returns:
        The updated row, or None if no such item exists
    """
    item = session.get(VocabularyItem, item_id)
    if not item:
        logger.warning(f"Vocabulary item {item_id} not found, mastery not updated")
        return None

    _apply_vocabulary_mastery(item, correct, now or datetime.utcnow())
    try:
        session.add(item)
        session.commit()
        session.refresh(item)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error updating mastery for vocabulary item {item_id}: {str(e)}")
        raise UpstreamServiceError("Failed to update vocabulary mastery") from e
    return item


def record_saved_word_practice(
    session: Session,
    word_id: str,
    correct: bool,
    now: Optional[datetime] = None,
) -> Optional[SavedWord]:
    """
    Count one practice of a saved word.

    Returns:
        The updated row, or None if no such word exists
    """
    word = session.get(SavedWord, word_id)
    if not word:
        logger.warning(f"Saved word {word_id} not found, practice not recorded")
        return None

    _apply_saved_word_practice(word, correct, now or datetime.utcnow())
    try:
        session.add(word)
        session.commit()
        session.refresh(word)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error recording practice for saved word {word_id}: {str(e)}")
        raise UpstreamServiceError("Failed to record practice") from e
    return word


def record_lesson_progress(
    session: Session,
    lesson_id: str,
    language: str,
    answers: Sequence[AnswerResult],
) -> LessonProgress:
    """
    Store the outcome of a completed exercise session.

    The score is the percentage of correct answers, rounded.
    """
    progress = _build_lesson_progress(lesson_id, language, answers)
    try:
        session.add(progress)
        session.commit()
        session.refresh(progress)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error saving progress for lesson {lesson_id}: {str(e)}")
        raise UpstreamServiceError("Failed to save lesson progress") from e

    logger.info(f"Recorded progress for lesson {lesson_id}: score {progress.score} over {len(answers)} items")
    return progress


def record_session_results(
    session: Session,
    lesson_id: str,
    language: str,
    items: Sequence[PracticeItem],
    answers: Sequence[AnswerResult],
    now: Optional[datetime] = None,
) -> LessonProgress:
    """
    Persist everything a completed session produced: lesson progress plus
    per-item practice counts, routed by each item's origin.

    All rows are written in a single commit. On failure nothing is stored.
    """
    now = now or datetime.utcnow()
    items_by_id = {item.id: item for item in items}
    progress = _build_lesson_progress(lesson_id, language, answers)

    try:
        session.add(progress)
        for answer in answers:
            item = items_by_id.get(answer.item_id)
            if item is None:
                continue
            if item.origin.type == PracticeSource.LESSON_VOCAB_ITEM:
                row = session.get(VocabularyItem, item.id)
                if row:
                    _apply_vocabulary_mastery(row, answer.correct, now)
                    session.add(row)
            elif item.origin.type == PracticeSource.SAVED_WORD:
                word = session.get(SavedWord, item.id)
                if word:
                    _apply_saved_word_practice(word, answer.correct, now)
                    session.add(word)
        session.commit()
        session.refresh(progress)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error saving session results for lesson {lesson_id}: {str(e)}")
        raise UpstreamServiceError("Failed to save session results") from e

    logger.info(f"Recorded session for lesson {lesson_id}: score {progress.score} over {len(answers)} items")
    return progress
