"""
Custom Exception Types for the Dunning Coordinator.

Each exception carries an application error code and a details mapping so
callers can report which customer, account or transaction a failure belongs to.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class DunningError(Exception):
  """
  Base exception for all Dunning Coordinator errors.

  Attributes:
      message: Human-readable error message
      error_code: Application-specific error code for categorization
      details: Additional error context and metadata
      timestamp: When the error occurred
  """

  def __init__(
    self,
    message: str,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
  ):
    super().__init__(message)
    self.message = message
    self.error_code = error_code or self.__class__.__name__
    self.details = details or {}
    self.timestamp = datetime.now(timezone.utc).isoformat()

  def to_dict(self) -> Dict[str, Any]:
    """Convert exception to dictionary for reporting."""
    return {
      "error": self.error_code,
      "message": self.message,
      "details": self.details,
      "timestamp": self.timestamp,
    }


# ============================================================================
# Billing Exceptions
# ============================================================================


class BillingError(DunningError):
  """Base exception for billing reconciliation."""

  pass


class BillingFetchError(BillingError):
  """
  Raised when a billing data fetch fails during reconciliation.

  Wraps the originating error together with the key that was being fetched
  (customer, billing account or transaction IDs). The run is aborted.
  """

  def __init__(self, operation: str, key: str, cause: Exception):
    super().__init__(
      f"Failed to {operation} for '{key}': {cause}",
      error_code="BILLING_FETCH_FAILED",
      details={
        "operation": operation,
        "key": key,
        "cause": type(cause).__name__,
      },
    )
    self.operation = operation
    self.key = key
    self.cause = cause


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(DunningError):
  """Raised when there are configuration issues."""

  def __init__(self, message: str, config_key: Optional[str] = None):
    super().__init__(
      message,
      error_code="CONFIGURATION_ERROR",
      details={"config_key": config_key} if config_key else {},
    )
