"""
Due date inference for billing account balances.

Bills are due on the payment due date of their settlement note advice. Every
other balance type is due on its start date, but only counts as due once the
configured offset has passed. Balances that are not due yet get ``ignore``
set; that is expected filtering, not an error.
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from ...models.billing import BillingAccountBalance, SettlementNoteAdvice


def ensure_utc(moment: datetime) -> datetime:
  """Treat naive datetimes as UTC and convert aware ones to UTC."""
  if moment.tzinfo is None:
    return moment.replace(tzinfo=timezone.utc)
  return moment.astimezone(timezone.utc)


def find_settlement_advice(
  balance: BillingAccountBalance, advices: Iterable[SettlementNoteAdvice]
) -> Optional[SettlementNoteAdvice]:
  """Return the advice the balance references, if it is among ``advices``."""
  reference = balance.settlement_note_advice_ouid
  if not reference:
    return None

  for advice in advices:
    if advice.ouid == reference:
      return advice
  return None


def resolve_bill_due_date(
  balance: BillingAccountBalance,
  advice: Optional[SettlementNoteAdvice],
  now: datetime,
) -> bool:
  """
  Resolve the due date of a bill balance from its settlement note advice.

  Args:
      balance: Bill balance to update in place
      advice: The advice matching the balance's reference, or None
      now: Reference time for "not yet due"

  Returns:
      False when no advice matched and the balance was ignored, True otherwise
  """
  if advice is None:
    balance.ignore = True
    return False

  balance.settlement_note_advice = advice
  payment_due_at = advice.payment_due_at
  if ensure_utc(now) < payment_due_at:
    balance.ignore = True
    return True

  balance.due_date = payment_due_at
  return True


def resolve_due_date(
  balance: BillingAccountBalance, due_date_offset_days: int, now: datetime
) -> bool:
  """
  Resolve the due date of a non-bill balance.

  The balance is ignored while ``start_date + due_date_offset_days`` lies in
  the future. Otherwise its due date is the unmodified start date.

  Returns:
      False when the balance has no start date and was ignored, True otherwise
  """
  if balance.start_date is None:
    balance.ignore = True
    return False

  start_date = ensure_utc(balance.start_date)
  if ensure_utc(now) < start_date + timedelta(days=due_date_offset_days):
    balance.ignore = True
    return True

  balance.due_date = start_date
  return True
