"""
Approval model - an administrator's sign-off on a person's identity.

The certification status shown with an approval is never stored here: it
is computed on every read by joining against `identities`
(see app.services.checking).
"""

from datetime import datetime
from sqlalchemy import Column, Text, DateTime, Integer, Index
from app.database import Base


class Approval(Base):
    """SQLAlchemy model for the approvals table."""
    __tablename__ = "approvals"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Serial id")
    student_id = Column(Text, nullable=False)
    name = Column(Text, nullable=False,
                  doc="Real name, matched against identities.realname")
    identity_number = Column(Text, nullable=True,
                             doc="Identity number recorded by the administrator")
    approved_time = Column(DateTime, nullable=True, default=datetime.now)
    college = Column(Text, nullable=False)
    major = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_approvals_student_id", "student_id"),
        Index("ix_approvals_approved_time", "approved_time"),
    )

    def __repr__(self):
        return f"<Approval(id={self.id}, student_id={self.student_id}, name='{self.name}')>"
