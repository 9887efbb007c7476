"""SQLAlchemy database models for persistent storage."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StoredBlob(Base):
    """An opaque JSON document stored under a fixed key."""
    __tablename__ = "stored_blobs"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)  # JSON string
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
