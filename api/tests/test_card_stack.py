import json

import pytest

from lingodeck.core.exceptions import UpstreamServiceError
from lingodeck.schemas.card_stack import CardAction, CardActionType, CardStatus
from lingodeck.services.card_stack_service import CardStack

from conftest import make_item

KEY = "lesson-feed"


@pytest.fixture
def stack(items, storage, scheduler):
    return CardStack(items, persist_key=KEY, storage=storage, scheduler=scheduler)


def _ids(items):
    return [item.id for item in items]


def _act(stack, action_type, item_id):
    stack.handle_action(CardAction(type=action_type, item_id=item_id))


def _assert_conserved(stack):
    assert len(stack.active_lessons) + len(stack.saved_lessons) + stack.dismissed_count == stack.total_cards


def test_initializes_all_active(stack):
    assert _ids(stack.active_lessons) == ["1", "2", "3"]
    assert stack.saved_lessons == []
    assert stack.total_cards == 3
    assert stack.remaining_cards == 3
    assert not stack.can_undo


def test_dismiss_then_undo(stack):
    before = stack.cards

    _act(stack, CardActionType.DISMISS, "1")
    assert _ids(stack.active_lessons) == ["2", "3"]
    assert stack.remaining_cards == 2
    assert stack.dismissed_count == 1

    assert stack.undo_last_action()
    assert _ids(stack.active_lessons) == ["1", "2", "3"]
    assert stack.cards == before
    assert not stack.can_undo


def test_save_marks_card_saved(stack):
    _act(stack, CardActionType.SAVE, "2")
    assert _ids(stack.saved_lessons) == ["2"]
    assert _ids(stack.active_lessons) == ["1", "3"]


def test_later_moves_card_to_end_and_keeps_it_active(stack):
    _act(stack, CardActionType.LATER, "1")
    assert _ids(stack.active_lessons) == ["2", "3", "1"]
    assert stack.cards[-1].status == CardStatus.LATER
    assert stack.remaining_cards == 3


def test_start_changes_nothing_and_captures_no_undo(stack, storage):
    before = stack.cards
    _act(stack, CardActionType.START, "1")
    assert stack.cards == before
    assert not stack.can_undo
    assert storage.get(KEY) is None


def test_unknown_item_is_ignored(stack):
    before = stack.cards
    _act(stack, CardActionType.DISMISS, "missing")
    assert stack.cards == before
    assert not stack.can_undo


def test_undo_without_action_is_noop(stack):
    assert not stack.undo_last_action()
    assert _ids(stack.active_lessons) == ["1", "2", "3"]


def test_undo_available_before_window_ends(stack, scheduler):
    _act(stack, CardActionType.DISMISS, "1")
    scheduler.advance(4999)
    assert stack.can_undo
    assert stack.last_action.item_id == "1"


def test_undo_expires_after_window(stack, scheduler):
    _act(stack, CardActionType.DISMISS, "1")
    scheduler.advance(5000)
    assert not stack.can_undo
    assert stack.last_action is None
    assert not stack.undo_last_action()
    assert _ids(stack.active_lessons) == ["2", "3"]


def test_expiry_timer_clears_undo_state(stack, scheduler):
    _act(stack, CardActionType.DISMISS, "1")
    assert scheduler.pending_count() == 1
    scheduler.advance(5000)
    assert stack._undo is None
    assert scheduler.pending_count() == 0


def test_new_action_replaces_undo_target(stack, scheduler):
    _act(stack, CardActionType.DISMISS, "1")
    scheduler.advance(3000)
    _act(stack, CardActionType.SAVE, "2")

    # The first capture's timer would have fired here
    scheduler.advance(3000)
    assert stack.can_undo

    stack.undo_last_action()
    assert _ids(stack.active_lessons) == ["2", "3"]
    assert stack.dismissed_count == 1
    assert stack.saved_lessons == []


def test_cards_are_conserved(stack, scheduler):
    actions = [
        (CardActionType.DISMISS, "1"),
        (CardActionType.LATER, "2"),
        (CardActionType.SAVE, "3"),
        (CardActionType.LATER, "2"),
        (CardActionType.DISMISS, "2"),
        (CardActionType.START, "3"),
        (CardActionType.SAVE, "missing"),
    ]
    for action_type, item_id in actions:
        _act(stack, action_type, item_id)
        _assert_conserved(stack)
        scheduler.advance(1000)
    stack.undo_last_action()
    _assert_conserved(stack)
    stack.reset_cards()
    _assert_conserved(stack)


def test_persists_on_every_mutation(stack, storage):
    _act(stack, CardActionType.SAVE, "2")
    stored = json.loads(storage.get(KEY))
    assert [(entry["lesson"]["id"], entry["status"]) for entry in stored] == [
        ("1", "active"), ("2", "saved"), ("3", "active"),
    ]

    stack.undo_last_action()
    stored = json.loads(storage.get(KEY))
    assert [entry["status"] for entry in stored] == ["active", "active", "active"]


def test_does_not_persist_without_key(items, failing_storage, scheduler):
    stack = CardStack(items, storage=failing_storage, scheduler=scheduler)
    _act(stack, CardActionType.DISMISS, "1")
    assert failing_storage.writes == []


def test_restores_from_storage(items, stack, storage, scheduler):
    _act(stack, CardActionType.LATER, "1")
    _act(stack, CardActionType.SAVE, "3")

    restored = CardStack(items, persist_key=KEY, storage=storage, scheduler=scheduler)
    assert [(card.item.id, card.status) for card in restored.cards] == [
        (card.item.id, card.status) for card in stack.cards
    ]
    assert restored.cards[0].item == stack.cards[0].item
    assert not restored.can_undo


@pytest.mark.parametrize("raw", ["not json", "{\"lesson\": 1}", "[{\"status\": \"active\"}]", "[{\"lesson\": {\"id\": \"1\"}, \"status\": \"gone\"}]"])
def test_malformed_storage_falls_back_to_default(items, storage, scheduler, raw):
    storage.set(KEY, raw)
    stack = CardStack(items, persist_key=KEY, storage=storage, scheduler=scheduler)
    assert _ids(stack.active_lessons) == ["1", "2", "3"]


def test_reset_cards(stack):
    _act(stack, CardActionType.DISMISS, "1")
    _act(stack, CardActionType.SAVE, "2")
    stack.reset_cards()
    assert _ids(stack.active_lessons) == ["1", "2", "3"]
    assert not stack.can_undo


def test_reset_with_lessons_preserves_status_by_id(stack, items):
    _act(stack, CardActionType.DISMISS, "1")
    _act(stack, CardActionType.SAVE, "2")

    new_items = [items[1], make_item("4", "ماء", "water"), items[0]]
    stack.reset_with_lessons(new_items)

    assert [(card.item.id, card.status) for card in stack.cards] == [
        ("2", CardStatus.SAVED),
        ("4", CardStatus.ACTIVE),
        ("1", CardStatus.DISMISSED),
    ]


def test_action_callback(items, storage, scheduler):
    seen = []
    stack = CardStack(items, storage=storage, scheduler=scheduler, on_action_complete=seen.append)
    _act(stack, CardActionType.START, "1")
    _act(stack, CardActionType.DISMISS, "2")
    assert [(action.type, action.item_id) for action in seen] == [
        (CardActionType.START, "1"),
        (CardActionType.DISMISS, "2"),
    ]


@pytest.fixture
def fragile_stack(items, failing_storage, scheduler):
    return CardStack(items, persist_key=KEY, storage=failing_storage, scheduler=scheduler)


def test_failed_write_leaves_action_unapplied(fragile_stack, failing_storage):
    calls = []
    fragile_stack.on_action_complete = calls.append
    failing_storage.failing = True

    with pytest.raises(UpstreamServiceError):
        _act(fragile_stack, CardActionType.DISMISS, "1")

    assert _ids(fragile_stack.active_lessons) == ["1", "2", "3"]
    assert not fragile_stack.can_undo
    assert calls == []

    failing_storage.failing = False
    _act(fragile_stack, CardActionType.DISMISS, "1")
    assert _ids(fragile_stack.active_lessons) == ["2", "3"]
    assert fragile_stack.can_undo


def test_failed_write_keeps_undo_available(fragile_stack, failing_storage):
    _act(fragile_stack, CardActionType.SAVE, "2")
    failing_storage.failing = True

    with pytest.raises(UpstreamServiceError):
        fragile_stack.undo_last_action()
    assert _ids(fragile_stack.saved_lessons) == ["2"]
    assert fragile_stack.can_undo

    failing_storage.failing = False
    assert fragile_stack.undo_last_action()
    assert fragile_stack.saved_lessons == []
    assert json.loads(failing_storage.get(KEY))[1]["status"] == "active"


def test_failed_write_leaves_reset_unapplied(fragile_stack, failing_storage, items):
    _act(fragile_stack, CardActionType.DISMISS, "3")
    failing_storage.failing = True

    with pytest.raises(UpstreamServiceError):
        fragile_stack.reset_cards()
    with pytest.raises(UpstreamServiceError):
        fragile_stack.reset_with_lessons(items[:1])
    assert fragile_stack.dismissed_count == 1
    assert fragile_stack.total_cards == 3
