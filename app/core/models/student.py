"""Student enrollment record. Admission number is the human-facing key."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Index, Numeric, String, Text, Uuid

from app.db.session import Base


class Student(Base):
    __tablename__ = "students"
    __table_args__ = (
        Index("idx_students_grade_section", "grade", "section"),
        Index("idx_students_name", "name"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    admission_number = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    admission_date = Column(Date, nullable=False)
    aadhar_number = Column(String(20), nullable=True)
    pen_number = Column(String(30), nullable=True)
    aapar_id = Column(String(30), nullable=True)
    mobile_number = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    grade = Column(String(20), nullable=True)
    section = Column(String(20), nullable=True)
    father_name = Column(String(255), nullable=True)
    mother_name = Column(String(255), nullable=True)
    yearly_fee_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="active")  # active, left
    left_date = Column(Date, nullable=True)
    leaving_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
