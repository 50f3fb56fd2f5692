from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Text
from sqlalchemy.sql import func

from models.base import Base


class Preference(Base):
    __tablename__ = "app_preferences"

    key = Column(Text, primary_key=True)
    value_json = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
