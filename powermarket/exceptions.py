"""
Custom exceptions for the power market forecasting and bidding service.
"""


class PowerMarketError(Exception):
    """Base exception for the power market service."""
    pass


class DataUnavailable(PowerMarketError):
    """Raised when no historical observations are available to forecast from."""
    pass


class InvalidRequest(PowerMarketError):
    """Raised when caller input is missing or malformed."""
    pass


class SourceUnreadable(PowerMarketError):
    """Raised when an ingestion source exists but cannot be parsed."""

    def __init__(self, path, reason: str = ""):
        self.path = str(path)
        self.reason = reason
        message = f"Cannot read source {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
