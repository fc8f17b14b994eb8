# app/errors.py
"""
Domain errors raised by the services.

Routers don't catch these one by one: app.main registers a single handler
that turns any AccountingError into {"error": message} with `status_code`.
"""

from __future__ import annotations


class AccountingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(AccountingError):
    """Plan, account, movement or transaction id is absent."""

    status_code = 404


class ValidationError(AccountingError):
    """Missing/invalid field. Not pydantic's: this one is raised by services."""

    status_code = 400


class InvalidInstallmentNumber(ValidationError):
    pass


class DuplicatePayment(AccountingError):
    """The installment number is already in the payment journal."""

    status_code = 409


class NoSourceData(AccountingError):
    """Replication: the previous month has no fixed expenses."""

    status_code = 400


class AllAlreadyExist(AccountingError):
    """Replication: every fixed expense already exists in the target month."""

    status_code = 400


__all__ = [
    "AccountingError",
    "NotFound",
    "ValidationError",
    "InvalidInstallmentNumber",
    "DuplicatePayment",
    "NoSourceData",
    "AllAlreadyExist",
]
