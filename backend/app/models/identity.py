"""
Identity model - verified real-name credentials of an authenticated user.

Rows are maintained by the campus identity verification integration;
this service only reads them.
"""

from sqlalchemy import Column, Text, Integer, Boolean, Index
from app.database import Base


class Identity(Base):
    """SQLAlchemy model for the identities table."""
    __tablename__ = "identities"

    uid = Column(Integer, primary_key=True, autoincrement=False,
                 doc="Authenticated identity id")
    student_id = Column(Text, nullable=False)
    realname = Column(Text, nullable=False)
    identity_number = Column(Text, nullable=True,
                             doc="National identity number")
    oa_certified = Column(Boolean, nullable=False, default=False,
                          doc="Certified through the campus OA system")

    __table_args__ = (
        Index("ix_identities_student_id", "student_id"),
    )

    def __repr__(self):
        return f"<Identity(uid={self.uid}, student_id={self.student_id}, certified={self.oa_certified})>"
