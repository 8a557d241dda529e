"""
PracticeState model.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text
from datetime import datetime


class PracticeState(SQLModel, table=True):
    """PracticeState table - durable key-value store for engine snapshots."""
    __tablename__ = "practice_state"

    key: str = Field(primary_key=True)
    value: str = Field(sa_column=Column(Text, nullable=False))  # Serialized JSON snapshot
    updated_at: datetime = Field(default_factory=datetime.utcnow)
