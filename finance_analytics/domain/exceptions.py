"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class TransactionStoreError(DomainException):
    """Transaction store returned an error or is unavailable"""

    pass


class InvalidTransactionDataError(DomainException):
    """Transaction row is malformed (unknown direction, negative amount, bad date)"""

    pass


class AdviceUnavailableError(DomainException):
    """Advice collaborator timed out, failed, or returned nothing usable"""

    pass
