from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Text
from sqlalchemy.sql import func

from models.base import Base


class Teacher(Base):
    __tablename__ = "teachers"

    teacher_id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    phone = Column(Text, nullable=True)
    specialization = Column(Text, nullable=True)
    hire_date = Column(Date, nullable=True)
    status = Column(Text, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    __table_args__ = (
        CheckConstraint("status in ('active', 'inactive', 'on_leave')", name="ck_teachers_status"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
