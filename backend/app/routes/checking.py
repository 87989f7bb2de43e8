"""
Checking API routes - identity approvals.

`/checking/me` is available to any authenticated user; everything under
`/checking/approvals` is reserved for administrators.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.config import PAGE_SIZE_CAP
from app.database import get_db
from app.auth import get_current_uid, require_admin
from app.models.approval import Approval
from app.responses import ok
from app.services import checking
from app.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


# ── Pydantic schemas ─────────────────────────────────────────

class ApprovalRequest(BaseModel):
    """Body of an approval submission."""
    student_id: str = Field(..., alias="studentId", min_length=1)
    name: str = Field(..., min_length=1)
    college: str = Field(..., min_length=1)
    major: Optional[str] = None
    identity_number: Optional[str] = Field(None, alias="identityNumber")
    approved_time: Optional[datetime] = Field(None, alias="approvedTime")


def serialize_approval(approval: Approval, cert_status: bool) -> dict:
    return {
        "id": approval.id,
        "studentId": approval.student_id,
        "name": approval.name,
        "approvedTime": approval.approved_time.isoformat() if approval.approved_time else None,
        "college": approval.college,
        "major": approval.major,
        "certStatus": cert_status,
    }


@router.get("/checking/me")
def get_my_approval(uid: int = Depends(get_current_uid), db: Session = Depends(get_db)):
    """Approval of the caller's own identity."""
    approval, cert_status = checking.query_by_uid(db, uid)
    return ok(serialize_approval(approval, cert_status))


@router.post("/checking/approvals")
def submit_approval(
    request: ApprovalRequest,
    admin_uid: int = Depends(require_admin),
    db: Session = Depends(get_db)
):
    approval, cert_status = checking.submit(
        db,
        student_id=request.student_id,
        name=request.name,
        college=request.college,
        major=request.major,
        identity_number=request.identity_number,
        approved_time=request.approved_time,
    )
    log_with_context(logger, "INFO", "Approval {} submitted by admin".format(approval.id),
                     context={"uid": admin_uid, "approval_id": approval.id})
    return ok(serialize_approval(approval, cert_status))


@router.get("/checking/approvals")
def list_approvals(
    college: Optional[str] = Query(None, description="Filter by college substring"),
    index: int = Query(1, ge=1, description="Page number"),
    count: int = Query(20, ge=1, description="Results per page (capped)"),
    admin_uid: int = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List approvals, newest first."""
    count = min(count, PAGE_SIZE_CAP)
    rows = checking.list_approvals(db, college, offset=(index - 1) * count, count=count)
    return ok([serialize_approval(a, c) for a, c in rows])


@router.get("/checking/approvals/search")
def search_approvals(
    q: str = Query(..., min_length=1, description="Name substring"),
    count: int = Query(20, ge=1),
    admin_uid: int = Depends(require_admin),
    db: Session = Depends(get_db)
):
    rows = checking.search(db, q, count)
    return ok([serialize_approval(a, c) for a, c in rows])


@router.get("/checking/approvals/{approval_id}")
def get_approval(
    approval_id: int,
    admin_uid: int = Depends(require_admin),
    db: Session = Depends(get_db)
):
    approval, cert_status = checking.get_approval(db, approval_id)
    return ok(serialize_approval(approval, cert_status))


@router.delete("/checking/approvals/{approval_id}")
def delete_approval(
    approval_id: int,
    admin_uid: int = Depends(require_admin),
    db: Session = Depends(get_db)
):
    checking.delete(db, approval_id)
    log_with_context(logger, "INFO", "Approval {} deleted by admin".format(approval_id),
                     context={"uid": admin_uid, "approval_id": approval_id})
    return ok()
