"""Direct-to-storage upload endpoints."""

import logging
from fastapi import APIRouter, HTTPException, Depends

from ...models.requests import (
    UploadCompletedRequest,
    UploadCompletedResponse,
    UploadTokenRequest,
    UploadTokenResponse,
)
from ...core.upload_manager import UploadManager
from ...core.exceptions import DocumentNotFoundError, UploadRejectedError
from ...api.dependencies import get_user_id, verify_upload_callback

router = APIRouter(prefix="/api/v1/uploads", tags=["uploads"])
logger = logging.getLogger(__name__)

# Set by main.py during startup
upload_manager: UploadManager = None


def set_upload_manager(manager: UploadManager):
    """Set the upload manager instance (called from main.py)."""
    global upload_manager
    globals()['upload_manager'] = manager


@router.post(
    "/token",
    response_model=UploadTokenResponse,
    summary="Issue Upload Token",
    description="""
Mint a short-lived token that lets the client upload a file for one of its
documents straight to blob storage.

**Workflow**:
1. Verify the caller owns `document_id`
2. Check the declared content type (PDF, Word, PNG, JPEG, WebP) and size (≤25MB)
3. Sign a token carrying the allowed types, size cap and a correlation
   payload; storage returns the token on completion

**Authorization**: Required (X-User-ID header)
**User Isolation**: Returns 404 if document belongs to different user
    """,
    responses={
        200: {"description": "Token issued"},
        401: {"description": "Missing or invalid authentication"},
        404: {"description": "Document not found or access denied"},
        422: {"description": "Content type or size not accepted"},
    }
)
async def issue_upload_token(request: UploadTokenRequest, user_id: str = Depends(get_user_id)):
    """Issue an upload token."""
    try:
        return await upload_manager.issue_token(user_id, request)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except UploadRejectedError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to issue upload token: {e}")
        raise HTTPException(status_code=500, detail="Upload failed")


@router.post(
    "/complete",
    response_model=UploadCompletedResponse,
    summary="Upload Completed Callback",
    description="""
Called by the storage provider once an upload finishes, with the
`client_token` issued for it. The token's signature and expiry are verified
and the stored object's URL and path plus the file details from the signed
payload are copied onto the document. Missing, forged or expired tokens are
logged and ignored.
    """,
    dependencies=[Depends(verify_upload_callback)],
)
async def upload_completed(request: UploadCompletedRequest):
    """Reconcile a finished upload."""
    updated = await upload_manager.complete_upload(request)
    return UploadCompletedResponse(updated=updated)
