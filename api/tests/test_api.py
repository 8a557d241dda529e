from datetime import datetime

import pytest
from sqlmodel import Session, select

from lingodeck.api.v1.endpoints import exercises
from lingodeck.core.exceptions import UpstreamServiceError
from lingodeck.models.lesson import Lesson
from lingodeck.models.lesson_progress import LessonProgress
from lingodeck.models.saved_word import SavedWord
from lingodeck.models.vocabulary_item import VocabularyItem

PREFIX = "/api/v1"


@pytest.fixture
def lesson(db_engine):
    with Session(db_engine) as session:
        session.add(Lesson(id="lesson-1", title="Greetings", description="Basic greetings", language="arabic"))
        session.add(VocabularyItem(id="v1", lesson_id="lesson-1", word="مرحبا", translation="hello",
                                   language="arabic", created_at=datetime(2025, 1, 1, 0, 0)))
        session.add(VocabularyItem(id="v2", lesson_id="lesson-1", word="شكرا", translation="thank you",
                                   language="arabic", created_at=datetime(2025, 1, 1, 0, 1)))
        session.add(SavedWord(id="s1", word="كتاب", translation="book"))
        session.commit()
    return "lesson-1"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["status"] == "running"


def test_tokenize(client):
    response = client.post(f"{PREFIX}/text/tokenize", json={"text": "مرحبا، صديقي.", "language": "arabic"})
    assert response.status_code == 200
    data = response.json()
    assert "".join(token["text"] for token in data["tokens"]) == "مرحبا، صديقي."
    assert [token["text"] for token in data["word_tokens"]] == ["مرحبا", "صديقي"]


def test_tokenize_rejects_unknown_language(client):
    response = client.post(f"{PREFIX}/text/tokenize", json={"text": "hi", "language": "klingon"})
    assert response.status_code == 422


def test_hebrew_cognate(client):
    response = client.post(f"{PREFIX}/text/hebrew-cognate", json={"text": "كتاب", "language": "arabic"})
    assert response.json()["root"] == "כתב"

    response = client.post(f"{PREFIX}/text/hebrew-cognate", json={"text": "هذا كتاب", "language": "arabic"})
    assert response.json() is None


def test_practice_items(client, lesson):
    response = client.get(f"{PREFIX}/practice-items", params={"lesson_id": lesson})
    data = response.json()
    assert data["total"] == 3
    assert [item["id"] for item in data["items"]] == ["v1", "v2", "s1"]
    assert "memory_note" not in data["items"][0]

    response = client.get(f"{PREFIX}/practice-items", params={"include_saved": False})
    assert response.json()["total"] == 2


def test_card_stack_flow(client, lesson, scheduler):
    url = f"{PREFIX}/card-stacks/feed"
    data = client.get(url, params={"lesson_id": lesson, "include_saved": False}).json()
    assert [item["id"] for item in data["active_lessons"]] == ["v1", "v2"]

    data = client.post(f"{url}/actions", json={"type": "dismiss", "item_id": "v1"}).json()
    assert [item["id"] for item in data["active_lessons"]] == ["v2"]
    assert data["dismissed_count"] == 1
    assert data["can_undo"]
    assert data["last_action"] == {"type": "dismiss", "item_id": "v1"}

    data = client.post(f"{url}/undo").json()
    assert data["remaining_cards"] == 2
    assert not data["can_undo"]

    client.post(f"{url}/actions", json={"type": "save", "item_id": "v2"})
    scheduler.advance(5000)
    data = client.get(url).json()
    assert not data["can_undo"]
    assert [item["id"] for item in data["saved_lessons"]] == ["v2"]


def test_card_stack_reset_preserves_status(client, lesson):
    url = f"{PREFIX}/card-stacks/feed"
    client.get(url, params={"lesson_id": lesson, "include_saved": False})
    client.post(f"{url}/actions", json={"type": "save", "item_id": "v2"})

    data = client.post(f"{url}/reset", json={"lesson_id": lesson, "include_saved": True}).json()
    assert data["total_cards"] == 3
    assert [item["id"] for item in data["saved_lessons"]] == ["v2"]

    data = client.post(f"{url}/reset", json={"preserve_status": False}).json()
    assert data["saved_lessons"] == []


def test_card_stack_rejects_unknown_action(client, lesson):
    response = client.post(f"{PREFIX}/card-stacks/feed/actions", json={"type": "burn", "item_id": "v1"})
    assert response.status_code == 422


def test_exercise_flow_records_progress(client, lesson, db_engine, storage):
    url = f"{PREFIX}/exercises/{lesson}"
    data = client.get(url).json()
    assert data["phase"] == "prompting"
    assert data["current_item"]["id"] == "v1"
    assert data["is_hydrated"]

    data = client.post(f"{url}/skip").json()
    assert data["current_item"]["id"] == "v2"

    data = client.post(f"{url}/answer", json={"answer": "Thank you"}).json()
    assert data["phase"] == "feedback"
    assert data["last_answer"]["correct"]
    assert storage.get(f"exercise-progress-{lesson}") is not None

    client.post(f"{url}/continue")
    client.post(f"{url}/answer", json={"answer": "goodbye"})
    data = client.post(f"{url}/continue").json()
    assert data["phase"] == "complete"
    assert data["correct_count"] == 1
    assert storage.get(f"exercise-progress-{lesson}") is None

    with Session(db_engine) as session:
        progress = session.exec(select(LessonProgress)).all()
        assert [(row.lesson_id, row.score, row.items_practiced) for row in progress] == [(lesson, 50, 2)]
        assert session.get(VocabularyItem, "v1").times_practiced == 1
        assert session.get(VocabularyItem, "v2").times_practiced == 1


def test_exercise_go_to_and_start_fresh(client, lesson):
    url = f"{PREFIX}/exercises/{lesson}"
    data = client.post(f"{url}/go-to", json={"index": 1}).json()
    assert data["current_item"]["id"] == "v2"

    client.post(f"{url}/answer", json={"answer": "thank you"})
    data = client.post(f"{url}/start-fresh").json()
    assert data["answers"] == []
    assert data["current_item"]["id"] == "v1"
    assert not data["has_saved_progress"]


def test_exercise_unknown_lesson(client):
    response = client.get(f"{PREFIX}/exercises/missing")
    assert response.status_code == 404
    assert response.json()["type"] == "NotFoundError"


def test_exercise_completion_retries_after_store_failure(client, lesson, db_engine, storage, monkeypatch):
    url = f"{PREFIX}/exercises/{lesson}"
    client.post(f"{url}/answer", json={"answer": "hello"})
    client.post(f"{url}/continue")
    client.post(f"{url}/answer", json={"answer": "thank you"})

    def failing_record(*args, **kwargs):
        raise UpstreamServiceError("Failed to save session results")

    monkeypatch.setattr(exercises, "record_session_results", failing_record)
    response = client.post(f"{url}/continue")
    assert response.status_code == 502
    assert storage.get(f"exercise-progress-{lesson}") is not None
    assert client.get(url).json()["phase"] == "feedback"

    monkeypatch.undo()
    data = client.post(f"{url}/continue").json()
    assert data["phase"] == "complete"
    with Session(db_engine) as session:
        assert [row.score for row in session.exec(select(LessonProgress)).all()] == [100]


def test_delete_card_stack(client, lesson, storage):
    url = f"{PREFIX}/card-stacks/feed"
    client.get(url, params={"lesson_id": lesson, "include_saved": False})
    client.post(f"{url}/actions", json={"type": "dismiss", "item_id": "v1"})
    assert storage.get("feed") is not None

    assert client.delete(url).status_code == 204
    assert storage.get("feed") is None
    data = client.get(url, params={"lesson_id": lesson, "include_saved": False}).json()
    assert data["dismissed_count"] == 0


def test_practice_items_with_cognates(client, lesson):
    data = client.get(f"{PREFIX}/practice-items", params={"with_cognates": True}).json()
    by_id = {item["id"]: item for item in data["items"]}
    assert by_id["s1"]["hebrew_cognate"]["root"] == "כתב"
    assert "hebrew_cognate" not in by_id["v2"]

    data = client.get(f"{PREFIX}/practice-items").json()
    assert all("hebrew_cognate" not in item for item in data["items"])
