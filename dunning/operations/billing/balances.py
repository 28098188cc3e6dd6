"""Filtering and deduplication of due balances."""

from typing import Dict, List, Sequence

from ...models.billing import BillingAccount, BillingAccountBalance


def filter_relevant_balances(
  balances: Sequence[BillingAccountBalance],
  relevant_accounts: Sequence[BillingAccount],
) -> List[BillingAccountBalance]:
  """Keep balances owned by one of ``relevant_accounts``, in order."""
  account_ouids = {account.ouid for account in relevant_accounts}
  return [
    balance for balance in balances if balance.billing_account_ouid in account_ouids
  ]


def deduplicate_balances(
  balances: Sequence[BillingAccountBalance],
) -> List[BillingAccountBalance]:
  """
  Merge balances sharing a transaction ID.

  The first balance seen for a transaction survives and carries the sum of
  all amounts booked under it. Survivors are copies; the inputs are not
  modified.
  """
  survivors: Dict[str, BillingAccountBalance] = {}

  for balance in balances:
    survivor = survivors.get(balance.transaction_id)
    if survivor is None:
      survivors[balance.transaction_id] = balance.model_copy(deep=True)
    else:
      survivor.amount += balance.amount

  return list(survivors.values())


def filter_and_deduplicate_balances(
  balances: Sequence[BillingAccountBalance],
  relevant_accounts: Sequence[BillingAccount],
) -> List[BillingAccountBalance]:
  """Restrict balances to the account hierarchy, then merge by transaction."""
  return deduplicate_balances(filter_relevant_balances(balances, relevant_accounts))
