"""DocuExpiry: track documents and their expiry dates."""

__version__ = "1.0.0"
