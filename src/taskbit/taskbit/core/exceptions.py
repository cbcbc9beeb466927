class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class BusinessRuleError(DomainError):
    """Raised when a request is well-formed but breaks a stored invariant."""

    code = "BUSINESS_RULE_VIOLATION"


class PaymentExceedsRemainingError(BusinessRuleError):
    code = "PAYMENT_EXCEEDS_REMAINING"

    def __init__(self, remaining=None):
        super().__init__("Payment amount cannot exceed remaining task amount")
        self.remaining = remaining


class DuplicateSalaryError(BusinessRuleError):
    code = "DUPLICATE_MONTHLY_SALARY"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "AUTHENTICATION_FAILED"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "ACCESS_DENIED"


class NotFoundError(DomainError):
    """Raised when the target row does not exist (or is soft-deleted)."""

    code = "NOT_FOUND"
