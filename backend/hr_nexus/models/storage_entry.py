from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from ..database import Base


class StorageEntry(Base):
    """One key of the portal's key-value store; `value` holds UTF-8 JSON text."""

    __tablename__ = "local_storage"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
