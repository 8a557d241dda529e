import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["GOOGLE_GEMINI_API_KEY"] = ""

from lingodeck import models  # noqa: E402,F401
from lingodeck.core.database import get_session  # noqa: E402
from lingodeck.core.exceptions import UpstreamServiceError  # noqa: E402
from lingodeck.main import app  # noqa: E402
from lingodeck.models.enums import AnswerType, ContentType, PracticeLanguage, PracticeSource  # noqa: E402
from lingodeck.schemas.practice import PracticeItem, PracticeOrigin, RawMastery  # noqa: E402
from lingodeck.services.answer_service import AnswerChecker  # noqa: E402
from lingodeck.services.engine_registry import EngineRegistry, get_registry  # noqa: E402
from lingodeck.services.scheduler import VirtualScheduler  # noqa: E402
from lingodeck.services.storage_service import InMemoryStorage  # noqa: E402


def make_item(item_id, target_text, translation, **overrides):
    """PracticeItem from lesson vocabulary with sensible defaults."""
    data = {
        "id": item_id,
        "language": PracticeLanguage.ARABIC,
        "content_type": ContentType.WORD,
        "target_text": target_text,
        "translation": translation,
        "answer_type": AnswerType.TEXT_TRANSLATION,
        "mastery": RawMastery(origin_type=PracticeSource.LESSON_VOCAB_ITEM, raw_value="new"),
        "origin": PracticeOrigin(type=PracticeSource.LESSON_VOCAB_ITEM, id=item_id),
    }
    data.update(overrides)
    return PracticeItem(**data)


@pytest.fixture
def items():
    return [
        make_item("1", "مرحبا", "hello", transliteration="marhaba"),
        make_item("2", "شكرا", "thank you", transliteration="shukran"),
        make_item("3", "نعم", "yes", transliteration="naam"),
    ]


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def scheduler():
    return VirtualScheduler(start_ms=1_700_000_000_000)


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def registry(storage, scheduler):
    return EngineRegistry(storage, scheduler=scheduler, checker_factory=AnswerChecker)


@pytest.fixture
def client(db_engine, registry):
    def override_get_session():
        with Session(db_engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()


class FailingStorage(InMemoryStorage):
    """In-memory storage whose writes fail while `failing` is set."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.failing = False
        self.writes = []

    def set(self, key, value):
        if self.failing:
            raise UpstreamServiceError("Could not save practice progress")
        self.writes.append(key)
        super().set(key, value)

    def remove(self, key):
        if self.failing:
            raise UpstreamServiceError("Could not clear saved practice progress")
        super().remove(key)


@pytest.fixture
def failing_storage():
    return FailingStorage()
