"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class PermissionDeniedError(DomainError):
    """The current actor's role does not allow the operation."""


class CurrencyMismatchError(ValidationError):
    """Arithmetic attempted across two different currencies."""


def customer_not_found(customer: int | str) -> str:
    """Return message for missing customer."""
    if isinstance(customer, int):
        return f"Customer {customer} not found"
    return f"Customer '{customer}' not found"


def bank_account_not_found(bank_account: int | str) -> str:
    """Return message for missing bank account."""
    if isinstance(bank_account, int):
        return f"Bank account {bank_account} not found"
    return f"Bank account '{bank_account}' not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing exchange transaction."""
    return f"Transaction {transaction_id} not found"


def cash_record_not_found(day) -> str:
    """Return message for a day without a cash tracker record."""
    return f"No cash tracker record for {day.isoformat()}"


def not_positive(field_name: str) -> str:
    return f"{field_name} must be greater than zero"


def permission_denied(role: str, action: str) -> str:
    """Return message when a role may not perform an action."""
    return f"Role '{role}' is not allowed to {action}"
