"""
Card stack engine for the browse flow (dismiss / save / later / start).

Cards are never deleted, only moved between statuses, so
len(active_lessons) + len(saved_lessons) + dismissed_count == total_cards
holds after every operation. A single undo level is kept for a fixed window
after each status-changing action.
"""
import json
import logging
from typing import Callable, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from lingodeck.core.config import settings
from lingodeck.schemas.card_stack import (
    CardAction,
    CardActionType,
    CardState,
    CardStatus,
    UndoState,
)
from lingodeck.schemas.practice import PracticeItem
from lingodeck.services.scheduler import ScheduledTask, Scheduler, SystemScheduler
from lingodeck.services.storage_service import InMemoryStorage, KeyValueStorage

logger = logging.getLogger(__name__)

_CARD_LIST = TypeAdapter(List[CardState])

_STATUS_FOR_ACTION = {
    CardActionType.DISMISS: CardStatus.DISMISSED,
    CardActionType.SAVE: CardStatus.SAVED,
    CardActionType.LATER: CardStatus.LATER,
}


class CardStack:
    """
    Ordered list of cards with single-level, time-boxed undo.

    Args:
        items: Initial practice items, all starting as active
        persist_key: Storage key; when set, the card list is restored from and
            written through to storage
        storage: Key-value storage (in-memory when omitted)
        scheduler: Clock and deferred callbacks for undo expiry
        undo_window_ms: How long an action can be undone
        on_action_complete: Called with every dispatched action
    """

    def __init__(
        self,
        items: Sequence[PracticeItem],
        persist_key: Optional[str] = None,
        storage: Optional[KeyValueStorage] = None,
        scheduler: Optional[Scheduler] = None,
        undo_window_ms: Optional[int] = None,
        on_action_complete: Optional[Callable[[CardAction], None]] = None,
    ):
        self.persist_key = persist_key
        self.storage = storage or InMemoryStorage()
        self.scheduler = scheduler or SystemScheduler()
        self.undo_window_ms = undo_window_ms if undo_window_ms is not None else settings.undo_window_ms
        self.on_action_complete = on_action_complete

        self._items: List[PracticeItem] = []
        self._cards: List[CardState] = []
        self._undo: Optional[UndoState] = None
        self._undo_task: Optional[ScheduledTask] = None

        self.initialize(items)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, items: Sequence[PracticeItem]) -> None:
        """
        Load cards from storage, or start every item as active.

        A stored card list replaces the default one. Anything in storage that
        does not parse as a card list is discarded.
        """
        self._items = list(items)
        self._clear_undo()

        restored = self._load_snapshot()
        if restored is not None:
            self._cards = restored
            logger.info(f"Restored card stack '{self.persist_key}' with {len(restored)} cards")
        else:
            self._cards = self._default_cards(self._items)

    def _default_cards(self, items: Sequence[PracticeItem]) -> List[CardState]:
        return [CardState(item=item, status=CardStatus.ACTIVE) for item in items]

    def _load_snapshot(self) -> Optional[List[CardState]]:
        if not self.persist_key:
            return None

        raw = self.storage.get(self.persist_key)
        if not raw:
            return None

        try:
            return _CARD_LIST.validate_python(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Discarding malformed card stack '{self.persist_key}': {str(e)[:200]}")
            return None

    def _write(self, cards: List[CardState]) -> None:
        if not self.persist_key:
            return
        self.storage.set(self.persist_key, json.dumps(self._serialize(cards)))

    def _commit(self, cards: List[CardState]) -> None:
        # Storage first: a failed write leaves the stack as it was
        self._write(cards)
        self._cards = cards

    @staticmethod
    def _serialize(cards: List[CardState]) -> List[dict]:
        return [
            {"lesson": card.item.to_json_dict(), "status": card.status.value}
            for card in cards
        ]

    def snapshot(self) -> List[dict]:
        """Serializable card list in storage format."""
        return self._serialize(self._cards)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def handle_action(self, action: CardAction) -> None:
        """
        Apply a card action.

        dismiss and save set the card's status; later moves the card to the
        end with status 'later'; start leaves the stack untouched. An action
        on an unknown item id is ignored.
        """
        status = _STATUS_FOR_ACTION.get(action.type)
        index = self._find(action.item_id)

        if status is not None and index is None:
            logger.warning(f"Ignoring {action.type.value} for unknown item id {action.item_id}")
        elif status is not None:
            cards = list(self._cards)
            card = CardState(item=cards[index].item, status=status)
            if action.type == CardActionType.LATER:
                del cards[index]
                cards.append(card)
            else:
                cards[index] = card
            previous = self._cards
            self._commit(cards)
            self._capture_undo(action, previous)

        if self.on_action_complete:
            self.on_action_complete(action)

    def _find(self, item_id: str) -> Optional[int]:
        for index, card in enumerate(self._cards):
            if card.item.id == item_id:
                return index
        return None

    def undo_last_action(self) -> bool:
        """
        Restore the card list captured before the last action.

        Returns:
            True if something was undone
        """
        if not self.can_undo:
            return False

        self._commit(list(self._undo.previous_cards))
        self._clear_undo()
        return True

    def reset_cards(self) -> None:
        """Every original item back to active. Saved and dismissed history is lost."""
        self._commit(self._default_cards(self._items))
        self._clear_undo()

    def reset_with_lessons(self, items: Sequence[PracticeItem]) -> None:
        """
        Rebuild the stack from a new item set.

        Items already on the stack keep their status; new items start active.
        """
        items = list(items)
        statuses = {card.item.id: card.status for card in self._cards}
        self._commit([
            CardState(item=item, status=statuses.get(item.id, CardStatus.ACTIVE))
            for item in items
        ])
        self._items = items
        self._clear_undo()

    # ------------------------------------------------------------------
    # Undo window
    # ------------------------------------------------------------------

    def _capture_undo(self, action: CardAction, previous: List[CardState]) -> None:
        self._clear_undo()
        undo = UndoState(
            action=action,
            previous_cards=[card.model_copy(deep=True) for card in previous],
            captured_at=self.scheduler.now_ms(),
        )
        self._undo = undo
        self._undo_task = self.scheduler.call_later(self.undo_window_ms, lambda: self._expire_undo(undo))

    def _expire_undo(self, undo: UndoState) -> None:
        # A late timer must not clear a newer capture
        if self._undo is undo:
            self._undo = None
            self._undo_task = None

    def _clear_undo(self) -> None:
        if self._undo_task:
            self._undo_task.cancel()
        self._undo = None
        self._undo_task = None

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def cards(self) -> List[CardState]:
        return list(self._cards)

    @property
    def active_lessons(self) -> List[PracticeItem]:
        return [
            card.item for card in self._cards
            if card.status in (CardStatus.ACTIVE, CardStatus.LATER)
        ]

    @property
    def saved_lessons(self) -> List[PracticeItem]:
        return [card.item for card in self._cards if card.status == CardStatus.SAVED]

    @property
    def dismissed_count(self) -> int:
        return sum(1 for card in self._cards if card.status == CardStatus.DISMISSED)

    @property
    def total_cards(self) -> int:
        return len(self._cards)

    @property
    def remaining_cards(self) -> int:
        return len(self.active_lessons)

    @property
    def can_undo(self) -> bool:
        if self._undo is None:
            return False
        return self.scheduler.now_ms() - self._undo.captured_at < self.undo_window_ms

    @property
    def last_action(self) -> Optional[CardAction]:
        return self._undo.action if self.can_undo else None
