"""Shared API dependencies."""

import secrets
from typing import Optional
from fastapi import Header

from ..config.settings import get_settings
from ..core.exceptions import UnauthorizedError


def get_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-ID")) -> str:
    """Extract user ID from gateway headers."""
    user_id = (x_user_id or "").strip()
    if not user_id or len(user_id) > 100:
        raise UnauthorizedError("Missing or invalid X-User-ID header")
    return user_id


def verify_upload_callback(
    x_upload_callback_secret: Optional[str] = Header(None, alias="X-Upload-Callback-Secret")
) -> None:
    """Check the storage provider's shared secret when one is configured."""
    expected = get_settings().upload_callback_secret
    if not expected:
        return
    provided = (x_upload_callback_secret or "").encode()
    if not secrets.compare_digest(provided, expected.encode()):
        raise UnauthorizedError("Invalid upload callback secret")
