"""Billing models package.

Read-only snapshots of triPica billing records, plus the fields a
reconciliation run derives for them.
"""

from .account import BillingAccount, BillingAccountRelationship
from .balance import BalanceType, BillingAccountBalance
from .charge import AppliedBillingCharge
from .settlement import SettlementNoteAdvice

__all__ = [
  "AppliedBillingCharge",
  "BalanceType",
  "BillingAccount",
  "BillingAccountBalance",
  "BillingAccountRelationship",
  "SettlementNoteAdvice",
]
