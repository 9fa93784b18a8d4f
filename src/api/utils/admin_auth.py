"""
Log Administration Authorization

Gates the log administration endpoints on the caller's role. The role comes
from the identity service; this module only consumes it.
"""

from fastapi import Depends, Request, status
from libs.result import Error
from src.api.error import ClientError
from src.api.utils.request_info import request_provenance
from src.app.services.identity_service import IIdentityService
from src.app.services.log_writer import LogWriter
from src.depends import get_current_user, get_identity_service, get_log_writer
from config import ApplicationConfig


async def require_log_admin(
    request: Request,
    current_user: dict = Depends(get_current_user),
    identity_service: IIdentityService = Depends(get_identity_service),
    log_writer: LogWriter = Depends(get_log_writer),
) -> dict:
    """
    Require an authenticated caller holding one of LOG_ADMIN_ROLES.

    Raises:
        ClientError: 401 if unauthenticated (raised by get_current_user)
        ClientError: 403 if the caller's role is insufficient

    Returns:
        {"user_id": ..., "role": ...} of the caller
    """
    user_id = current_user["user_id"]
    role = await identity_service.get_role(user_id)

    if role not in ApplicationConfig.LOG_ADMIN_ROLES:
        ip, user_agent = request_provenance(request)
        log_writer.record_access(
            feature=request.url.path,
            actor=user_id,
            granted=False,
            ip=ip,
            user_agent=user_agent,
        )
        raise ClientError(
            Error("INSUFFICIENT_ROLE", "You do not have permission to manage logs"),
            status_code=status.HTTP_403_FORBIDDEN,
        )

    return {"user_id": user_id, "role": role}
