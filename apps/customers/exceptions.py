"""
Domain exceptions for customers app.

Validation and business-rule failures inside the operations are collected
as messages on an ErrorTracker and never raised. The exceptions below are
for conditions the operations cannot recover from, or for guards on the
models themselves.
"""


class CustomersServiceError(Exception):
    """Base exception for customers service errors."""
    pass


class DefaultCustomerGroupError(CustomersServiceError):
    """Raised when there is not exactly one default customer group."""
    pass


class DefaultGroupDeletionError(CustomersServiceError):
    """Raised when something tries to delete the default customer group."""
    pass
