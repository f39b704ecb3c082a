"""
Identity dependency for FastAPI.

The X-User-Id header is trusted as-is: it is never verified, only required.
It establishes the tenant scope for every task operation in the request.
"""
from typing import Optional

from tasktrack.adapters.http_framework import HTTPFrameworkAdapter
from tasktrack.exceptions import UnauthorizedError

http_adapter = HTTPFrameworkAdapter()
Header = http_adapter.Header
Request = http_adapter.Request

USER_ID_HEADER = "X-User-Id"


async def get_current_user_id(
    request: Request,
    x_user_id: Optional[str] = Header(None, alias=USER_ID_HEADER),
) -> str:
    """
    Extract the caller's user ID from the trusted header.

    Returns:
        The user ID string
    Raises:
        UnauthorizedError: If the header is missing or blank
    """
    if x_user_id is None or not x_user_id.strip():
        raise UnauthorizedError()
    request.state.user_id = x_user_id
    return x_user_id
