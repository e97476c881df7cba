"""Signed upload tokens and storage callback reconciliation.

Files go straight from the client to blob storage. The service mints a
short-lived token scoped to one document, the allowed content types and a
size cap; the storage provider hands the same token back when the upload
completes, and only its verified claims decide which document gets the file.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import jwt
from pydantic import ValidationError

from ..infrastructure.database.client import DatabaseClient
from ..models.requests import (
    UploadCompletedRequest,
    UploadTokenPayload,
    UploadTokenRequest,
    UploadTokenResponse,
)
from .exceptions import DocumentNotFoundError, UploadRejectedError, UpstreamPayloadError

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"

ALLOWED_CONTENT_TYPES = [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "image/png",
    "image/jpeg",
    "image/webp",
]


class UploadManager:
    """Issues upload tokens and applies completed uploads to documents."""

    def __init__(
        self,
        db_client: DatabaseClient,
        secret: str,
        ttl_seconds: int = 3600,
        max_size_bytes: int = 25 * 1024 * 1024
    ):
        """Initialize upload manager.

        Args:
            db_client: Database client for ownership checks and updates
            secret: HMAC secret used to sign tokens
            ttl_seconds: Token lifetime
            max_size_bytes: Largest accepted upload
        """
        self.db = db_client
        self.secret = secret
        self.ttl = timedelta(seconds=ttl_seconds)
        self.max_size_bytes = max_size_bytes

    async def issue_token(self, user_id: str, request: UploadTokenRequest) -> UploadTokenResponse:
        """Mint an upload token for a document the caller owns.

        Raises:
            DocumentNotFoundError: document missing or owned by someone else
            UploadRejectedError: declared type or size is not accepted
        """
        document = await self.db.get_document(request.document_id, user_id)
        if not document:
            raise DocumentNotFoundError(request.document_id)

        if request.file_type is not None and request.file_type not in ALLOWED_CONTENT_TYPES:
            raise UploadRejectedError(f"Content type '{request.file_type}' is not allowed")
        if request.file_size is not None and request.file_size > self.max_size_bytes:
            raise UploadRejectedError(
                f"File exceeds the maximum size of {self.max_size_bytes} bytes"
            )

        token_payload = UploadTokenPayload(
            user_id=user_id,
            document_id=request.document_id,
            file_name=request.file_name,
            file_size=request.file_size,
            file_type=request.file_type,
        )
        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + self.ttl
        claims = {
            "sub": user_id,
            "pathname": request.pathname,
            "allowed_content_types": ALLOWED_CONTENT_TYPES,
            "maximum_size_in_bytes": self.max_size_bytes,
            "token_payload": token_payload.model_dump_json(),
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(claims, self.secret, algorithm=TOKEN_ALGORITHM)

        logger.info(f"Issued upload token for document {request.document_id}")
        return UploadTokenResponse(
            client_token=token,
            pathname=request.pathname,
            allowed_content_types=ALLOWED_CONTENT_TYPES,
            maximum_size_in_bytes=self.max_size_bytes,
            expires_at=expires_at,
        )

    def decode_token(self, token: str) -> Dict[str, Any]:
        """Verify a token's signature and expiry and return its claims.

        Raises:
            jwt.InvalidTokenError: token is forged, malformed or expired
        """
        return jwt.decode(token, self.secret, algorithms=[TOKEN_ALGORITHM])

    @staticmethod
    def parse_token_payload(raw: Optional[str]) -> UploadTokenPayload:
        """Parse the correlation payload carried inside a verified token.

        Raises:
            UpstreamPayloadError: payload missing, not JSON or failing the schema
        """
        if not raw or not isinstance(raw, str):
            raise UpstreamPayloadError("Upload token carries no token payload")
        try:
            return UploadTokenPayload.model_validate_json(raw)
        except ValidationError as e:
            raise UpstreamPayloadError(f"Invalid token payload ({e.error_count()} errors)") from e

    def verify_completion(self, client_token: Optional[str]) -> UploadTokenPayload:
        """Recover the correlation payload from a token this service signed.

        Raises:
            UpstreamPayloadError: token missing, forged, expired or inconsistent
        """
        if not client_token:
            raise UpstreamPayloadError("Upload completed without client token")
        try:
            claims = self.decode_token(client_token)
        except jwt.InvalidTokenError as e:
            raise UpstreamPayloadError(f"Invalid client token: {e}") from e

        payload = self.parse_token_payload(claims.get("token_payload"))
        if payload.user_id != claims.get("sub"):
            raise UpstreamPayloadError("Token payload does not match token subject")
        return payload

    async def complete_upload(self, request: UploadCompletedRequest) -> bool:
        """Attach a finished upload to its document.

        The document and owner come only from the signed token. Missing,
        forged or expired tokens are logged and skipped; the callback has
        nobody to report them to.

        Returns:
            True if a document was updated
        """
        try:
            payload = self.verify_completion(request.client_token)
        except UpstreamPayloadError as e:
            logger.warning(f"Skipping upload completion for {request.blob.url}: {e}")
            return False

        file_name = payload.file_name or request.blob.pathname.split("/")[-1] or None
        updated = await self.db.update_document_file(
            payload.document_id,
            payload.user_id,
            file_url=request.blob.url,
            file_pathname=request.blob.pathname,
            file_name=file_name,
            file_size=payload.file_size,
            file_type=payload.file_type,
        )

        if updated:
            logger.info(f"Attached file {request.blob.pathname} to document {payload.document_id}")
        else:
            logger.warning(f"Upload completed for unknown document {payload.document_id}")
        return updated
