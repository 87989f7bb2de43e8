"""
Freshman API routes - account binding, profile and relationship lookups.

Every route is called with the caller's bearer token. The `{account}`
path segment is a student id, admission ticket number or name. Apart from
the first GET (which binds the account), routes require the caller to be
bound to that account already.
"""

import json
from typing import Optional
from fastapi import APIRouter, Depends, Form, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.auth import get_current_uid
from app.errors import SecretRequired, AccountMismatch, InvalidContact
from app.models.student import Student
from app.responses import ok
from app.services import account
from app.services.relationships import get_classmates, get_roommates, get_people_familiar
from app.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


def _isoformat(value):
    return value.isoformat() if value else None


def serialize_basic(student: Student) -> dict:
    """Dormitory, counselor and major of the caller. Never includes the secret."""
    return {
        "uid": student.uid,
        "studentId": student.student_id,
        "name": student.name,
        "college": student.college,
        "major": student.major,
        "campus": student.campus,
        "building": student.building,
        "room": student.room,
        "bed": student.bed,
        "counselorName": student.counselor_name,
        "counselorTel": student.counselor_tel,
        "visible": student.visible,
        "contact": student.contact,
    }


def serialize_mate(student: Student) -> dict:
    """A classmate or roommate as shown to other students."""
    return {
        "college": student.college,
        "major": student.major,
        "name": student.name,
        "province": student.province,
        "building": student.building,
        "room": student.room,
        "bed": student.bed,
        "lastSeen": _isoformat(student.last_seen),
        "contact": student.contact if student.visible else None,
    }


def serialize_familiar(student: Student) -> dict:
    return {
        "name": student.name,
        "college": student.college,
        "city": student.city,
        "contact": student.contact,
    }


def _bound_student(db: Session, uid: int, account_token: str) -> Student:
    student = account.get_bound_student(db, uid, account_token)
    if student is None:
        log_with_context(logger, "INFO", "Account is not bound to caller",
                         context={"uid": uid})
        raise AccountMismatch()
    return student


@router.get("/freshman/{account_token}")
def get_basic_info(
    account_token: str,
    secret: Optional[str] = Query(None, description="Last six characters of the id card number"),
    uid: int = Depends(get_current_uid),
    db: Session = Depends(get_db)
):
    """Bind the account to the caller when needed, then return the caller's basic info."""
    if not secret:
        raise SecretRequired()

    student = account.get_bound_student(db, uid, account_token, secret)
    if student is None:
        account.bind(db, uid, account_token, secret)
        student = account.get_bound_student(db, uid, account_token, secret)
    if student is None:
        # Bound to another same-named record, which this secret does not open.
        raise AccountMismatch()
    return ok({
        "me": serialize_basic(student),
        "sameNameCount": account.count_same_name(db, student) - 1,
    })


@router.put("/freshman/{account_token}")
def update_account(
    account_token: str,
    contact: Optional[str] = Form(None, description="Contact details as a JSON document"),
    visible: Optional[bool] = Form(None),
    last_seen: Optional[bool] = Form(None, description="Any value stamps the current time"),
    uid: int = Depends(get_current_uid),
    db: Session = Depends(get_db)
):
    """Update contact details, visibility and/or last-seen time of the caller."""
    student = _bound_student(db, uid, account_token)

    contact_json = None
    if contact is not None:
        try:
            contact_json = json.loads(contact)
        except json.JSONDecodeError:
            raise InvalidContact()

    if visible is not None:
        account.set_visibility(db, student, visible)
    if contact is not None:
        account.update_contact(db, student, contact_json)
    if last_seen is not None:
        account.update_last_seen(db, student)

    log_with_context(logger, "INFO", "Freshman profile updated",
                     context={"uid": uid, "student_id": student.student_id},
                     extra_data={"fields": [name for name, value in (
                         ("contact", contact), ("visible", visible), ("last_seen", last_seen)
                     ) if value is not None]})
    return ok()


@router.get("/freshman/{account_token}/roommate")
def get_roommate(
    account_token: str,
    uid: int = Depends(get_current_uid),
    db: Session = Depends(get_db)
):
    student = _bound_student(db, uid, account_token)
    return ok({"roommates": [serialize_mate(s) for s in get_roommates(db, student)]})


@router.get("/freshman/{account_token}/classmate")
def get_classmate(
    account_token: str,
    uid: int = Depends(get_current_uid),
    db: Session = Depends(get_db)
):
    student = _bound_student(db, uid, account_token)
    return ok({"classmates": [serialize_mate(s) for s in get_classmates(db, student)]})


@router.get("/freshman/{account_token}/familiar")
def get_familiar(
    account_token: str,
    uid: int = Depends(get_current_uid),
    db: Session = Depends(get_db)
):
    """People the caller may know: same high school, same city or nearby postcode."""
    student = _bound_student(db, uid, account_token)
    return ok({"fellows": [serialize_familiar(s) for s in get_people_familiar(db, student)]})
