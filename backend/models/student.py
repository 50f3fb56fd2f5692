from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Text
from sqlalchemy.sql import func

from models.base import Base


class Student(Base):
    __tablename__ = "students"

    student_id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=True, unique=True)
    phone = Column(Text, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    class_id = Column(Integer, ForeignKey("classes.class_id", ondelete="SET NULL"), nullable=True, index=True)
    enrollment_date = Column(Date, nullable=True)
    status = Column(Text, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    __table_args__ = (
        CheckConstraint("status in ('active', 'inactive', 'graduated')", name="ck_students_status"),
    )
