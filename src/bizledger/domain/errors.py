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


class UnauthorizedError(DomainError):
    """No authenticated identity was supplied."""


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def client_not_found(client_id: str) -> str:
    """Return message for missing client."""
    return f"Client {client_id} not found"


def invoice_not_found(invoice_id: str) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def invalid_choice(field: str, value: str, choices: tuple[str, ...]) -> str:
    """Return message for a value outside an enumerated set."""
    return f"Invalid {field} '{value}'. Expected one of: {', '.join(choices)}"
