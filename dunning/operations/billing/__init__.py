"""Billing reconciliation operations."""

from .balances import (
  deduplicate_balances,
  filter_and_deduplicate_balances,
  filter_relevant_balances,
)
from .classification import ChargeFacts, classify_charge, infer_balance_type
from .customer_status import has_final_bill, is_offline_customer, is_within_grace_period
from .due_dates import find_settlement_advice, resolve_bill_due_date, resolve_due_date
from .hierarchy import resolve_relevant_accounts
from .reconciliation import BillingDataSource, OverdueBalanceService

__all__ = [
  "BillingDataSource",
  "ChargeFacts",
  "OverdueBalanceService",
  "classify_charge",
  "deduplicate_balances",
  "filter_and_deduplicate_balances",
  "filter_relevant_balances",
  "find_settlement_advice",
  "has_final_bill",
  "infer_balance_type",
  "is_offline_customer",
  "is_within_grace_period",
  "resolve_bill_due_date",
  "resolve_due_date",
  "resolve_relevant_accounts",
]
