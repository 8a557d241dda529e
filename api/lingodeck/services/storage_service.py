"""
Durable key-value storage used by the practice engines.

Engines only see the KeyValueStorage interface, so tests run against
InMemoryStorage while the API uses DatabaseStorage over the practice_state
table. Values are opaque strings (serialized JSON snapshots). Every write is
applied before the call returns, so writes to one key land in call order.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from lingodeck.core.exceptions import UpstreamServiceError
from lingodeck.models.practice_state import PracticeState

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Minimal durable key-value store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Stored value for key, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key if present."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""


class InMemoryStorage(KeyValueStorage):
    """Dictionary-backed storage for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class DatabaseStorage(KeyValueStorage):
    """
    Storage backed by the practice_state table.

    A fresh session is opened per call so the storage can outlive the
    request that created it.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as session:
                row = session.get(PracticeState, key)
                return row.value if row else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read practice state '{key}': {str(e)}")
            raise UpstreamServiceError("Could not load saved practice progress") from e

    def set(self, key: str, value: str) -> None:
        try:
            with self._session_factory() as session:
                row = session.get(PracticeState, key)
                if row:
                    row.value = value
                    row.updated_at = datetime.utcnow()
                else:
                    row = PracticeState(key=key, value=value)
                session.add(row)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to write practice state '{key}': {str(e)}")
            raise UpstreamServiceError("Could not save practice progress") from e

    def remove(self, key: str) -> None:
        try:
            with self._session_factory() as session:
                row = session.get(PracticeState, key)
                if row:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to remove practice state '{key}': {str(e)}")
            raise UpstreamServiceError("Could not clear saved practice progress") from e

    def clear(self) -> None:
        try:
            with self._session_factory() as session:
                for row in session.exec(select(PracticeState)).all():
                    session.delete(row)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to clear practice state: {str(e)}")
            raise UpstreamServiceError("Could not clear saved practice progress") from e
