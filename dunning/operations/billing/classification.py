"""
Charge classification and balance type inference.

A balance's type is never read from triPica. It is inferred from the ledger
codes of the charges booked under the balance's transaction:

  1. Rechnung - if any bill charge is present
  2. Abschlag und Bankgebühren - if down payments and bank fees are present
  3. Abschlag - if only down payment charges are present
  4. Bankgebühren - if only bank fees are present
  5. Sonstiges - if no type can be inferred

Charges whose ledger code marks them as cancelled, rejected, returned,
rebooked or receivable contribute nothing.
"""

from dataclasses import dataclass
from typing import Iterable

from ...config.constants import LedgerCodeConstants
from ...models.billing import AppliedBillingCharge, BalanceType


@dataclass(frozen=True)
class ChargeFacts:
  """What a single ledger code says about its charge."""

  ignored: bool = False
  is_bill: bool = False
  is_down_payment: bool = False
  is_bank_fee: bool = False


IGNORED_CHARGE = ChargeFacts(ignored=True)


def classify_charge(general_ledger_id: str) -> ChargeFacts:
  """
  Classify a charge by substrings of its ledger code (case-sensitive).

  The ignore list is checked first; an ignored charge reports no other fact.
  The remaining facts are tested independently, so a ledger code containing
  both ABSCHLAG and BANK_FEE reports both.
  """
  code = general_ledger_id or ""

  if any(marker in code for marker in LedgerCodeConstants.IGNORED):
    return IGNORED_CHARGE

  return ChargeFacts(
    is_bill=LedgerCodeConstants.BILL in code,
    is_down_payment=LedgerCodeConstants.DOWN_PAYMENT in code,
    is_bank_fee=LedgerCodeConstants.BANK_FEE in code,
  )


def balance_type_from_facts(
  is_down_payment: bool, is_bill: bool, is_bank_fee: bool
) -> BalanceType:
  """Resolve accumulated charge facts by priority."""
  if is_bill:
    return BalanceType.BILL
  if is_bank_fee and is_down_payment:
    return BalanceType.DOWN_PAYMENT_AND_BANK_FEE
  if is_down_payment:
    return BalanceType.DOWN_PAYMENT
  if is_bank_fee:
    return BalanceType.BANK_FEE
  return BalanceType.OTHER


def infer_balance_type(charges: Iterable[AppliedBillingCharge]) -> BalanceType:
  """
  Infer a balance type from the balance's charges.

  Scanning stops at the first bill charge: one bill dominates whatever else
  was booked on the transaction. An empty sequence yields OTHER; callers are
  expected to drop balances without charges before inferring.
  """
  is_down_payment, is_bill, is_bank_fee = False, False, False

  for charge in charges:
    facts = classify_charge(charge.general_ledger_id)
    if facts.ignored:
      continue
    if facts.is_bill:
      is_bill = True
      break
    if facts.is_down_payment:
      is_down_payment = True
    if facts.is_bank_fee:
      is_bank_fee = True

  return balance_type_from_facts(is_down_payment, is_bill, is_bank_fee)
