"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.

License outcomes such as HW_MISMATCH or REVOKED are reported to callers
as statuses, not raised. The exceptions below cover validation,
authorization and storage failures.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class LicenseException(DomainException):
    """Base exception for license-related errors."""

    pass


class LicenseNotFoundError(LicenseException):
    """Raised when a license is not found."""

    def __init__(self, message: str = "License not found"):
        super().__init__(message, code="LICENSE_NOT_FOUND")


class LicenseValidationError(LicenseException):
    """Raised when a request is malformed. Never audited, never stored."""

    def __init__(self, message: str = "Invalid license request"):
        super().__init__(message, code="VALIDATION_ERROR")


class DuplicateLicenseKeyError(LicenseException):
    """Raised by a store when an insert collides with an existing key."""

    def __init__(self, message: str = "License key already exists", key: str = None):
        super().__init__(message, code="DUPLICATE_KEY")
        self.key = key


class KeyGenerationError(LicenseException):
    """Raised when no unique license key could be produced."""

    def __init__(self, message: str = "Unable to generate a unique license key"):
        super().__init__(message, code="KEY_GENERATION_FAILED")


class LicenseStorageError(LicenseException):
    """Raised when the license store fails to read or write."""

    def __init__(self, message: str = "License storage failure", code: str = "STORAGE_ERROR"):
        super().__init__(message, code=code)


class ConcurrencyRetryExhaustedError(LicenseStorageError):
    """Raised when a conditional write keeps losing to concurrent writers."""

    def __init__(self, message: str = "Too many concurrent updates"):
        super().__init__(message, code="CONCURRENCY_CONFLICT")


class AuditWriteError(DomainException):
    """Raised by an audit sink that could not append an entry."""

    def __init__(self, message: str = "Audit log write failed"):
        super().__init__(message, code="AUDIT_WRITE_FAILED")


class AdminAuthorizationError(DomainException):
    """Raised when a caller may not perform an admin operation."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="FORBIDDEN")
