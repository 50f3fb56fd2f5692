from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Text, UniqueConstraint
from sqlalchemy.sql import func

from models.base import Base


class ClassSection(Base):
    __tablename__ = "classes"

    class_id = Column(Integer, primary_key=True, autoincrement=True)
    class_name = Column(Text, nullable=False)
    year_level = Column(Integer, nullable=False)
    room_number = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    __table_args__ = (
        CheckConstraint("year_level >= 1 and year_level <= 13", name="ck_classes_year_level"),
        UniqueConstraint("class_name", "year_level", name="uq_classes_name_year"),
    )
