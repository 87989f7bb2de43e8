"""
Relationship queries - classmates, roommates and people a freshman may know.

All functions take the caller's own (already authorized) student record.
Callers are responsible for checking that the requesting identity is
bound to that record.
"""

from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.student import Student


def get_classmates(db: Session, student: Student) -> List[Student]:
    """All records in the caller's class, the caller included."""
    if student.class_ is None:
        return [student]
    return (
        db.query(Student)
        .filter(Student.class_ == student.class_)
        .order_by(Student.student_id)
        .all()
    )


def get_roommates(db: Session, student: Student) -> List[Student]:
    """Classmates living in the caller's room (same campus, building and room)."""
    if student.class_ is None:
        return [student]
    return (
        db.query(Student)
        .filter(
            Student.class_ == student.class_,
            Student.campus == student.campus,
            Student.building == student.building,
            Student.room == student.room,
        )
        .order_by(Student.bed, Student.student_id)
        .all()
    )


def get_people_familiar(db: Session, student: Student) -> List[Student]:
    """
    Visible students the caller might know.

    A candidate qualifies when ANY of these holds: same high school, same
    city, or a postcode sharing the caller's thousands prefix. The caller
    is excluded and results are deduplicated by name.
    """
    conditions = []
    if student.graduated_from:
        conditions.append(Student.graduated_from == student.graduated_from)
    if student.city:
        conditions.append(Student.city == student.city)
    if student.postcode is not None:
        conditions.append(Student.postcode // 1000 == student.postcode // 1000)
    if not conditions:
        return []

    exclusions = [Student.student_id != student.student_id]
    if student.uid is not None:
        # The same identity may hold several records.
        exclusions.append(or_(Student.uid.is_(None), Student.uid != student.uid))

    candidates = (
        db.query(Student)
        .filter(
            Student.visible.is_(True),
            *exclusions,
            or_(*conditions),
        )
        .order_by(Student.student_id)
        .all()
    )

    seen_names = set()
    people = []
    for candidate in candidates:
        if candidate.name in seen_names:
            continue
        seen_names.add(candidate.name)
        people.append(candidate)
    return people
