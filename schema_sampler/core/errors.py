"""
Error taxonomy for the schema sampler.

Every failure raised by this package derives from SchemaSamplerError. Wire
values that cannot be decoded are not errors; the decoder normalizes them
to None.
"""

from typing import Optional


class SchemaSamplerError(Exception):
    """Base class for all schema sampler errors"""
    pass


class ConfigurationError(SchemaSamplerError):
    """Raised when the run is misconfigured (missing project, credential, bad limits)"""
    pass


class TransportError(SchemaSamplerError):
    """Raised when the document store answers with a non-success status or cannot be reached"""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body


class CredentialError(ConfigurationError, TransportError):
    """Raised when the document store rejects the supplied credential"""
    pass
