"""
Domain exceptions and their wire representation.

Every error carries a stable numeric `code` that clients branch on, an
HTTP status, and a human-readable (localized) message. The handler
registered in app.main renders them as {"code": ..., "message": ...}.
"""


class ServiceError(Exception):
    """Base exception for all domain errors of this service."""

    code = 1
    status_code = 500
    message = "服务器内部错误"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


# ── Freshman (account) errors ───────────────────────────────

class FreshmanError(ServiceError):
    """Base class for account binding errors."""
    status_code = 400


class NoSuchAccount(FreshmanError):
    """No student record matches the account and secret."""
    code = 18
    status_code = 404
    message = "无匹配的新生数据"


class SecretMismatch(NoSuchAccount):
    """The account exists but the secret is wrong.

    Rendered exactly like NoSuchAccount so clients cannot learn which
    accounts exist.
    """


class AccountMismatch(FreshmanError):
    """The caller is not bound to the requested account."""
    code = 19
    status_code = 403
    message = "账户不匹配"


class AlreadyBound(FreshmanError):
    code = 20
    status_code = 409
    message = "已绑定"


class Unauthenticated(FreshmanError):
    code = 21
    status_code = 401
    message = "未登录"


class SecretRequired(FreshmanError):
    code = 22
    status_code = 400
    message = "需要凭据"


# ── Checking (approval) errors ──────────────────────────────

class CheckingError(ServiceError):
    """Base class for identity approval errors."""
    status_code = 400


class NoSuchApprovalRecord(CheckingError):
    code = 1001
    status_code = 404
    message = "无审核记录或个人信息填写错误"


class IdentityVerificationRequired(CheckingError):
    code = 1003
    status_code = 403
    message = "需要先实名认证"


class AdminRequired(CheckingError):
    """The route is reserved for administrators."""
    code = 1002
    status_code = 403
    message = "需要管理员权限"


# ── Request errors ──────────────────────────────────────────

class InvalidContact(FreshmanError):
    """The contact field is not a JSON document."""
    code = 23
    status_code = 400
    message = "联系方式格式错误"


class InvalidRequest(ServiceError):
    """Malformed parameters, rejected before reaching a handler."""
    code = 2
    status_code = 422
    message = "请求参数错误"
