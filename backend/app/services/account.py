"""
Account Service - resolves freshman accounts and binds them to identities.

An "account" token may be a student id, an admission ticket number or a
name. Tokens are matched against those columns in that order of
precedence, together with the secret (last six characters of the
national id number).

Binding is a two step sequence:
1. An advisory read ("is it bound already?") used only to produce a
   precise error for the client.
2. A single conditional UPDATE guarded by `uid IS NULL`. This statement
   is the only thing that keeps a record from being claimed twice; when
   two binds race, exactly one of them affects the row.
"""

import time
from datetime import datetime
from typing import Optional

from sqlalchemy import or_, update, func
from sqlalchemy.orm import Session

from app.models.student import Student
from app.errors import NoSuchAccount, SecretMismatch, AlreadyBound
from app.logging_config import get_logger, log_with_context

logger = get_logger("binding")

# Lookup precedence for an account token.
ACCOUNT_COLUMNS = (Student.student_id, Student.ticket, Student.name)


def _matches_account(token: str):
    """SQL predicate: token equals student id, ticket or name."""
    return or_(*(column == token for column in ACCOUNT_COLUMNS))


def resolve(db: Session, token: str, secret: str, unbound_only: bool = False) -> Student:
    """
    Return the student record identified by (token, secret).

    Columns are tried in ACCOUNT_COLUMNS order and the first column that
    yields a row wins; ties inside a column go to the lowest student id.
    With `unbound_only`, records that already belong to an identity are
    skipped, so a same-named unclaimed record can still be found.

    Raises:
        NoSuchAccount: no record matches both token and secret
    """
    for column in ACCOUNT_COLUMNS:
        query = db.query(Student).filter(column == token, Student.secret == secret)
        if unbound_only:
            query = query.filter(Student.uid.is_(None))
        student = query.order_by(Student.student_id).first()
        if student is not None:
            return student
    raise NoSuchAccount()


def account_exists(db: Session, token: str) -> bool:
    """True when some record matches the token, whatever its secret."""
    return db.query(Student.student_id).filter(_matches_account(token)).first() is not None


def is_account_bound(db: Session, token: str, secret: str) -> bool:
    """True when (token, secret) resolves to a record that already has an identity."""
    try:
        student = resolve(db, token, secret)
    except NoSuchAccount:
        return False
    return student.uid is not None


def get_bound_student(db: Session, uid: int, token: str,
                      secret: Optional[str] = None) -> Optional[Student]:
    """Return the record matching `token` that is bound to `uid`.

    The secret is only checked when one is given.
    """
    query = db.query(Student).filter(Student.uid == uid, _matches_account(token))
    if secret is not None:
        query = query.filter(Student.secret == secret)
    return query.order_by(Student.student_id).first()


def is_identity_bound_with(db: Session, uid: int, token: str) -> bool:
    """True when `uid` holds a record matching `token`. Used as an authorization gate."""
    return get_bound_student(db, uid, token) is not None


def bind(db: Session, uid: int, token: str, secret: str) -> str:
    """
    Claim the record identified by (token, secret) for `uid`.

    Returns:
        The bound record's student id

    Raises:
        SecretMismatch: the token is known but the secret is wrong
        NoSuchAccount: the token matches nothing
        AlreadyBound: every record matching (token, secret) belongs to an identity
    """
    start_time = time.time()

    try:
        student = resolve(db, token, secret, unbound_only=True)
    except NoSuchAccount:
        # Advisory diagnostics only; nothing below decides ownership.
        if is_account_bound(db, token, secret):
            log_with_context(logger, "INFO", "Bind rejected: every matching account is bound",
                             context={"uid": uid})
            raise AlreadyBound()
        if account_exists(db, token):
            log_with_context(logger, "WARNING", "Bind rejected: secret mismatch",
                             context={"uid": uid})
            raise SecretMismatch()
        raise

    student_id = student.student_id

    stmt = (
        update(Student)
        .where(
            Student.student_id == student_id,
            Student.secret == secret,
            Student.uid.is_(None),
        )
        .values(uid=uid)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()

    if result.rowcount != 1:
        # Another request claimed the row between the check and the update.
        log_with_context(logger, "WARNING", "Bind lost a concurrent update",
                         context={"uid": uid, "student_id": student_id})
        if db.get(Student, student_id) is None:
            raise NoSuchAccount()
        raise AlreadyBound()

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO", "Account {} bound to uid {}".format(student_id, uid),
                     context={"uid": uid, "student_id": student_id},
                     extra_data={"duration_ms": round(duration_ms, 2)})
    return student_id


def count_same_name(db: Session, student: Student) -> int:
    """Number of records carrying the same name as `student`, itself included."""
    return db.query(func.count(Student.student_id)).filter(Student.name == student.name).scalar()


def update_contact(db: Session, student: Student, contact: dict) -> None:
    student.contact = contact
    db.commit()


def set_visibility(db: Session, student: Student, visible: bool) -> None:
    student.visible = visible
    db.commit()


def update_last_seen(db: Session, student: Student) -> None:
    student.last_seen = datetime.now()
    db.commit()
