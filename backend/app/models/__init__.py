from app.models.student import Student
from app.models.identity import Identity
from app.models.approval import Approval

__all__ = ["Student", "Identity", "Approval"]
