"""Customer-level predicates used by dunning decisions around a reconciliation."""

from datetime import datetime, timedelta
from typing import Iterable

from ...models.billing import BillingAccount, SettlementNoteAdvice
from .due_dates import ensure_utc


def is_offline_customer(account: BillingAccount) -> bool:
  """Check whether the customer receives bills by post."""
  return account.is_offline_customer()


def is_within_grace_period(
  account: BillingAccount, now: datetime, grace_period_days: int
) -> bool:
  """
  Check whether the billing account is still too new to raise claims for.

  An account without a creation date is never within the grace period.
  """
  if account.date_time_create is None:
    return False

  grace_period_end = ensure_utc(account.date_time_create) + timedelta(
    days=grace_period_days
  )
  return ensure_utc(now) < grace_period_end


def has_final_bill(advices: Iterable[SettlementNoteAdvice]) -> bool:
  """Check whether any settlement note advice is a settled final bill."""
  return any(advice.is_settled_final_bill for advice in advices)
