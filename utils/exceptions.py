"""
Domain exceptions.

Each exception carries the HTTP status the global error handler in
``app.register_error_handlers`` responds with.
"""


class BudgetTrackingError(Exception):
    """Base class for all errors raised by the budget tracking services."""
    status_code = 500

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class BudgetNotFoundError(BudgetTrackingError):
    status_code = 404


class TransactionNotFoundError(BudgetTrackingError):
    status_code = 404


class AlertNotFoundError(BudgetTrackingError):
    status_code = 404


class InvalidBudgetError(BudgetTrackingError):
    status_code = 400


class ValidationFailedError(BudgetTrackingError):
    """Request payload or query parameters failed validation.

    ``errors`` is a list of ``{'field', 'message', 'rejected_value'}`` dicts.
    """
    status_code = 400

    def __init__(self, errors, message='Validation failed'):
        super().__init__(message, errors=errors)

    @classmethod
    def from_form(cls, form):
        errors = []
        for name, messages in form.errors.items():
            field = form[name]
            rejected = field.raw_data[0] if field.raw_data else None
            for message in messages:
                errors.append({
                    'field': name,
                    'message': message,
                    'rejected_value': rejected,
                })
        return cls(errors)
