from typing import Optional

from fastapi import Header, HTTPException


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
) -> str:
    """The caller's id, set by the upstream auth layer. This service never issues or checks sessions."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return x_user_id.strip()


def get_optional_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
) -> Optional[str]:
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return None
