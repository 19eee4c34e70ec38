"""Exception hierarchy for the e-wallet API."""


class EWalletError(Exception):
    """Base exception for all e-wallet errors."""


class ValidationError(EWalletError):
    """Raised when request parameters cannot be accepted."""


class InvalidDateFormat(ValidationError):
    """Raised when a date filter is not a valid YYYY-MM-DD calendar date."""


class AuthenticationError(EWalletError):
    """Raised when the caller cannot be identified from the bearer token."""


class StoreError(EWalletError):
    """Raised when the relational store fails to answer a query."""


class QueryCancelledError(StoreError):
    """Raised when a query is abandoned because its deadline passed."""
