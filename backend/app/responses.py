"""Response envelope shared by all routes."""


def ok(data=None) -> dict:
    """Successful response: {"code": 0} plus the payload when there is one."""
    if data is None:
        return {"code": 0}
    return {"code": 0, "data": data}
