"""
SQLAlchemy ORM models for persistence.
"""
from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, String, Text

from db import Base


class BookORM(Base):
    __tablename__ = "books"

    # Insertion order; breaks ties between equal created_at values when listing
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, unique=True, index=True, nullable=False)
    title = Column(String(200), nullable=False)
    author = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    cover_image_url = Column(String, nullable=False, default="")
    # Removal handle for the cover in the asset store; never serialized to clients
    asset_handle = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
