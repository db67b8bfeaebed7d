"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NormalizationError(DomainException):
    """Date string could not be turned into a real calendar date"""

    def __init__(self, raw: str, reason: str):
        super().__init__(f"Invalid date {raw!r}: {reason}")
        self.raw = raw
        self.reason = reason


class ValidationError(DomainException):
    """Required input missing or out of range"""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InvariantViolation(DomainException):
    """Internally computed state broke a rule that should always hold"""

    pass


class RecordNotFoundError(DomainException):
    """Persistence collaborator has no record with the requested id"""

    pass


class BillGenerationError(DomainException):
    """External bill generator failed or returned nothing usable"""

    pass
