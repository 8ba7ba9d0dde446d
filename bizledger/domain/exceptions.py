"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input is malformed or out of range (negative amounts, unknown status, empty fields)"""

    pass


class NotFoundError(DomainException):
    """A referenced customer, employee, account or record does not exist"""

    pass


class PersistenceError(DomainException):
    """Underlying storage failure or constraint violation; the unit of work was rolled back"""

    pass


class PermissionDeniedError(DomainException):
    """Acting user lacks the permission required for the operation"""

    pass
