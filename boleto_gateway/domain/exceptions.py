"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidRequestError(DomainException):
    """Caller input is missing or malformed (unknown payer, no billing configuration)"""

    pass


class NotFoundError(DomainException):
    """Referenced boleto does not exist"""

    pass


class InvalidStateTransitionError(DomainException):
    """Boleto status does not allow the requested lifecycle transition"""

    pass


class ConcurrentModificationError(DomainException):
    """Boleto changed between validation and commit"""

    pass


class GatewayError(DomainException):
    """Bank API call failed or the bank declared a business error"""

    def __init__(self, message: str, operation: str | None = None, remote_message: str | None = None):
        super().__init__(message)
        self.operation = operation
        self.remote_message = remote_message


class GatewayUnavailableError(GatewayError):
    """Bank API timed out or could not be reached"""

    pass


class PersistenceError(DomainException):
    """Registry rejected a write (e.g. duplicate nosso número)"""

    pass
