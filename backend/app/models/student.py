"""
Student model - one row per pre-enrollment applicant (freshman).

Rows are created by the bulk import before term starts. This service only
binds a row to an authenticated identity (`uid`) and updates the
profile fields the student controls (contact, visibility, last seen).
"""

from sqlalchemy import Column, Text, DateTime, Integer, Boolean, JSON, Index
from app.database import Base


class Student(Base):
    """
    SQLAlchemy model for the students table.

    An "account" is any of name, student_id or ticket; the secret is the
    last six characters of the national identity number.
    """
    __tablename__ = "students"

    student_id = Column(Text, primary_key=True,
                        doc="Student number assigned at admission")
    uid = Column(Integer, nullable=True, index=True,
                 doc="Bound identity (NULL while the record is unclaimed)")
    ticket = Column(Text, nullable=True,
                    doc="Admission ticket number")
    name = Column(Text, nullable=False,
                  doc="Display name")
    secret = Column(Text, nullable=False,
                    doc="Binding secret, never returned to clients")
    college = Column(Text, nullable=False)
    major = Column(Text, nullable=False)
    campus = Column(Text, nullable=False)
    building = Column(Text, nullable=False,
                      doc='Building name, e.g. "1号楼" or "南1号楼"')
    room = Column(Integer, nullable=False,
                  doc="Room number, e.g. 101")
    bed = Column(Text, nullable=False,
                 doc='Bed label, e.g. "101-1"')
    counselor_name = Column(Text, nullable=False)
    counselor_tel = Column(Text, nullable=False)
    province = Column(Text, nullable=True,
                      doc='Province without the "省" suffix')
    city = Column(Text, nullable=True)
    postcode = Column(Integer, nullable=True)
    graduated_from = Column(Text, nullable=True,
                            doc="High school the student graduated from")
    class_ = Column("class", Text, nullable=True,
                    doc="Class (cohort) reference")
    visible = Column(Boolean, nullable=False, default=False,
                     doc="Whether people who may know the student can see them")
    contact = Column(JSON, nullable=True,
                     doc="Free-form contact details (wechat, qq, tel...)")
    last_seen = Column(DateTime, nullable=True,
                       doc="Last time the student opened the freshman pages")

    __table_args__ = (
        Index("ix_students_name", "name"),
        Index("ix_students_ticket", "ticket"),
        Index("ix_students_class", "class"),
    )

    def __repr__(self):
        return f"<Student(student_id={self.student_id}, name='{self.name}', uid={self.uid})>"
