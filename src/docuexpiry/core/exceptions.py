"""Domain errors raised by the DocuExpiry managers."""


class DocuExpiryError(Exception):
    """Base class for service errors."""


class UnauthorizedError(DocuExpiryError):
    """Raised when a request carries no usable identity."""


class DocumentNotFoundError(DocuExpiryError):
    """Raised when a document lookup scoped to the caller finds nothing.

    Covers both a missing document and one owned by another user, so the
    response never reveals which.
    """

    def __init__(self, document_id: str):
        super().__init__("Document not found")
        self.document_id = document_id


class UploadRejectedError(DocuExpiryError):
    """Raised when an upload token request fails content checks."""


class UpstreamPayloadError(DocuExpiryError):
    """Raised when a storage callback carries a missing or malformed payload."""
