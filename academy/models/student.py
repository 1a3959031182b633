"""Students Model"""

from sqlalchemy import Column, Numeric, String
from sqlalchemy.orm import relationship

from academy.models.base import BaseModel


class Student(BaseModel):
    """
    Rostered academy student.
    `program` is the free-text discipline the student trains in (e.g. "BJJ").
    """
    __tablename__ = "students"

    name = Column(String(255), nullable=False)
    program = Column(String(100), nullable=True, index=True)
    default_monthly_fee = Column(Numeric(10, 2), nullable=False, default=2000)
    profile_image_url = Column(String(500), nullable=True)

    # Relationships
    fees = relationship("Fee", back_populates="student", cascade="all, delete-orphan")
    progress = relationship("StudentProgress", back_populates="student", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Student {self.name} ({self.program})>"
