"""Resolution of a customer's relevant billing accounts."""

from typing import List, Sequence

from ...models.billing import BillingAccount


def resolve_relevant_accounts(
  accounts: Sequence[BillingAccount], master_account: BillingAccount
) -> List[BillingAccount]:
  """
  Reduce a customer's billing accounts to the master account and its children.

  Children keep their relative order and the master is appended last. The
  master appears exactly once whether or not ``accounts`` contains it.
  """
  relevant = [
    account
    for account in accounts
    if account.ouid != master_account.ouid
    and account.is_child_of(master_account.ouid)
  ]
  relevant.append(master_account)
  return relevant
