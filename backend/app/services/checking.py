"""
Checking Service - administrator approvals of real identities.

An approval record says an administrator reviewed a person's identity.
Whether that person is *certified* is derived on every read by looking up
the `identities` rows sharing the approval's (student_id, name):

    certified = identities.oa_certified
                OR (identities.identity_number = approvals.identity_number
                    AND identities.identity_number is not empty)

Nothing about certification is written with the approval, so an approval
submitted before the identity was certified reports the new status as
soon as it is read again.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_, func, select
from sqlalchemy.orm import Session

from app.config import PAGE_SIZE_CAP
from app.models.approval import Approval
from app.models.identity import Identity
from app.errors import NoSuchApprovalRecord, IdentityVerificationRequired
from app.logging_config import get_logger, log_with_context

logger = get_logger("checking")

ApprovalRow = Tuple[Approval, bool]


def _certified():
    """Correlated EXISTS over the identities sharing (student_id, name).

    Several identity rows may match the soft key; EXISTS keeps one result
    row per approval.
    """
    return (
        select(Identity.uid)
        .where(
            Identity.student_id == Approval.student_id,
            Identity.realname == Approval.name,
            or_(
                Identity.oa_certified.is_(True),
                and_(
                    Identity.identity_number == Approval.identity_number,
                    func.length(Identity.identity_number) > 0,
                ),
            ),
        )
        .exists()
    )


def _approvals_query(db: Session):
    """Approvals carrying the live cert_status."""
    return db.query(Approval, _certified().label("cert_status"))


def _newest_first(query):
    return query.order_by(Approval.approved_time.desc(), Approval.id.desc())


def _rows(rows) -> List[ApprovalRow]:
    return [(approval, bool(cert_status)) for approval, cert_status in rows]


def _cap(count: int) -> int:
    return max(0, min(count, PAGE_SIZE_CAP))


def get_approval(db: Session, approval_id: int) -> ApprovalRow:
    row = _approvals_query(db).filter(Approval.id == approval_id).first()
    if row is None:
        raise NoSuchApprovalRecord()
    approval, cert_status = row
    return approval, bool(cert_status)


def submit(db: Session, student_id: str, name: str, college: str,
           major: Optional[str] = None, identity_number: Optional[str] = None,
           approved_time: Optional[datetime] = None) -> ApprovalRow:
    """Insert an approval and return it with its current cert_status."""
    approval = Approval(
        student_id=student_id,
        name=name,
        college=college,
        major=major,
        identity_number=identity_number,
        approved_time=approved_time or datetime.now(),
    )
    db.add(approval)
    db.commit()
    db.refresh(approval)

    log_with_context(logger, "INFO", "Approval submitted",
                     context={"approval_id": approval.id, "student_id": student_id})
    return get_approval(db, approval.id)


def query_by_uid(db: Session, uid: int) -> ApprovalRow:
    """
    Return the certified approval of the identity `uid`.

    Raises:
        IdentityVerificationRequired: uid has no real-name identity
        NoSuchApprovalRecord: no approved, certified record for that identity
    """
    identity = db.get(Identity, uid)
    if identity is None:
        raise IdentityVerificationRequired()

    query = _approvals_query(db).filter(
        Approval.student_id == identity.student_id,
        Approval.name == identity.realname,
        Approval.approved_time.isnot(None),
    )
    if not identity.oa_certified:
        if not identity.identity_number:
            raise NoSuchApprovalRecord()
        query = query.filter(Approval.identity_number == identity.identity_number)

    row = _newest_first(query).first()
    if row is None:
        raise NoSuchApprovalRecord()
    return row[0], True


def list_approvals(db: Session, college: Optional[str] = None,
                   offset: int = 0, count: int = PAGE_SIZE_CAP) -> List[ApprovalRow]:
    """Approvals newest first, optionally filtered by a college substring."""
    query = _approvals_query(db)
    if college:
        query = query.filter(Approval.college.contains(college, autoescape=True))
    rows = _newest_first(query).offset(max(0, offset)).limit(_cap(count)).all()
    return _rows(rows)


def search(db: Session, name: str, count: int = PAGE_SIZE_CAP) -> List[ApprovalRow]:
    """Approvals whose name contains `name`, newest first."""
    query = _approvals_query(db).filter(Approval.name.contains(name, autoescape=True))
    return _rows(_newest_first(query).limit(_cap(count)).all())


def delete(db: Session, approval_id: int) -> None:
    """Remove an approval. Deleting a missing id is a no-op."""
    deleted = db.query(Approval).filter(Approval.id == approval_id).delete(synchronize_session=False)
    db.commit()
    log_with_context(logger, "INFO", "Approval deleted",
                     context={"approval_id": approval_id},
                     extra_data={"deleted": deleted})
