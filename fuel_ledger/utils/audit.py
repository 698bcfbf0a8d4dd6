"""Audit logging for privileged actions."""

from fastapi import Request

from fuel_ledger.auth.dependencies import CurrentUser
from fuel_ledger.utils.logging import get_logger

logger = get_logger("audit")


def audit_logged(action: str):
    """Dependency factory that logs who performed a privileged action.

    Usage::

        @router.post("/in", dependencies=[Depends(audit_logged("stock_in"))])
    """

    async def _log(request: Request, current_user: CurrentUser) -> None:
        client_ip = request.client.host if request.client else "unknown"
        logger.info(
            "AUDIT action=%s user=%s role=%s site=%s ip=%s request_id=%s path=%s",
            action,
            current_user.username or current_user.id,
            current_user.role,
            current_user.site,
            client_ip,
            getattr(request.state, "request_id", "n/a"),
            request.url.path,
        )

    return _log
