class AuditError(Exception):
    """Base class for every failure that aborts an audit run."""
    step = "audit"
    default_message = "Audit failed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class ConfigUnreadable(AuditError):
    """Raised when the trust configuration cannot be read or parsed."""
    step = "config"
    default_message = "No valid configuration given"


class UnknownSuite(AuditError):
    step = "config"
    default_message = "Unknown cryptographic suite"


class InvalidPublicKeyEncoding(AuditError):
    """Raised when the aggregate public key is not a valid point of the suite."""
    step = "config"
    default_message = "Aggregate public key is not a valid point"


class NetworkError(AuditError):
    step = "fetch"
    default_message = "Couldn't get STH"


class MalformedResponse(AuditError):
    step = "fetch"
    default_message = "CT log returned a malformed STH"


class MalformedEnvelope(AuditError):
    """Raised when the cosi signature of an STH cannot be decoded."""
    step = "decode"
    default_message = "Couldn't convert cosi signature"
