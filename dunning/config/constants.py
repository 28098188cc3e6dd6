"""
Static constants configuration.

This module contains both operational constants (timeouts, retry settings) and
static string constants from the triPica billing domain that don't change
based on environment.
"""

# =============================================================================
# OPERATIONAL CONSTANTS
# =============================================================================

# Default Timeouts (seconds)
DEFAULT_HTTP_TIMEOUT = 30

# Retry Configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0  # seconds
DEFAULT_RETRY_BACKOFF = 2.0

# Reconciliation defaults
DEFAULT_DUE_DATE_OFFSET_DAYS = 14
DEFAULT_CUSTOMER_GRACE_PERIOD_DAYS = 30

# Error bodies are truncated to keep logs and exception details readable
MAX_ERROR_BODY_LENGTH = 500


# =============================================================================
# TRIPICA BILLING CONSTANTS
# =============================================================================


class LedgerCodeConstants:
  """Substrings of a charge's general ledger ID that carry meaning."""

  # Charges containing any of these are skipped when inferring a balance type
  IGNORED = ("CANCELLED", "REJECTED", "RETURN", "REBOOKED", "RECEIVABLE")

  BILL = "BILL"
  DOWN_PAYMENT = "ABSCHLAG"
  BANK_FEE = "BANK_FEE"


class BillingAccountConstants:
  """Literal values found on billing accounts and settlement advices."""

  PRESENTATION_MEDIA_POSTMAIL = "POSTMAIL"
  RELATIONSHIP_PARENT = "PARENT"
  SETTLEMENT_CATEGORY_LAST = "LAST"
  SETTLEMENT_STATE_SETTLED = "SETTLED"
  BALANCE_STATUS_DUE = "DUE"


class TriPicaPaths:
  """triPica agent billing API paths, relative to the billing base path."""

  BILLING_BASE_PATH = "/api/private/v1/agent/billing"

  BILLING_ACCOUNT_BY_MBA = "/billingAccount/name/{mba}"
  BILLING_ACCOUNTS_BY_CUSTOMER = "/billingAccount/customerOuid/{customer_ouid}"
  DUE_BALANCES_BY_CUSTOMER = (
    "/billingAccountBalance/customerOuid/{customer_ouid}/status/{status}"
  )
  APPLIED_BILLING_CHARGES = "/appliedBillingCharge"
  SETTLEMENT_ADVICES_BY_ACCOUNT = (
    "/settlement/billingAccountOuid/{billing_account_ouid}"
  )
