"""
Overdue balance reconciliation.

Determines which balances on a customer's billing account hierarchy are
genuinely overdue:

1. Reduce the customer's billing accounts to the master account and its
   children.
2. Restrict the customer's due balances to those accounts and merge balances
   sharing a transaction ID.
3. Fetch the charges of all remaining transactions in one call.
4. Attach charges to balances; balances without charges are dropped.
5. Infer each balance's type and due date. Bills need their settlement note
   advice, fetched per billing account.
6. Return the balances that are not ignored.

Any failed fetch aborts the run. Balances that can't be classified are dropped
with a warning and the run continues.
"""

from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple, TypeVar

from ...config import env
from ...exceptions import BillingFetchError, ConfigurationError
from ...logger import billing_logger as logger
from ...logger import log_classification_gap, performance_timer
from ...models.billing import (
  AppliedBillingCharge,
  BalanceType,
  BillingAccount,
  BillingAccountBalance,
  SettlementNoteAdvice,
)
from .balances import filter_and_deduplicate_balances
from .classification import infer_balance_type
from .customer_status import has_final_bill, is_offline_customer
from .customer_status import is_within_grace_period as _is_within_grace_period
from .due_dates import (
  ensure_utc,
  find_settlement_advice,
  resolve_bill_due_date,
  resolve_due_date,
)
from .hierarchy import resolve_relevant_accounts

T = TypeVar("T")


class BillingDataSource(Protocol):
  """Fetch operations the reconciliation consumes."""

  def fetch_billing_accounts(self, customer_id: str) -> List[BillingAccount]: ...

  def fetch_due_balances(self, customer_id: str) -> List[BillingAccountBalance]: ...

  def fetch_charges(self, transaction_ids_csv: str) -> List[AppliedBillingCharge]: ...

  def fetch_settlement_advices(
    self, billing_account_id: str
  ) -> List[SettlementNoteAdvice]: ...


class OverdueBalanceService:
  """Service resolving a customer's overdue balances."""

  def __init__(
    self,
    data_source: BillingDataSource,
    due_date_offset_days: Optional[int] = None,
    customer_grace_period_days: Optional[int] = None,
    parallel_initial_fetch: Optional[bool] = None,
    settlement_advice_cache: Optional[bool] = None,
  ):
    """
    Initialize the service.

    Args:
        data_source: Billing data collaborator, e.g. the triPica client
        due_date_offset_days: Days after start before a non-bill balance is due
        customer_grace_period_days: Days after account creation without claims
        parallel_initial_fetch: Fetch accounts and balances concurrently
        settlement_advice_cache: Reuse advices per billing account within a run

    Raises:
        ConfigurationError: If the environment or an override is invalid
    """
    problems = env.validate()
    if problems:
      raise ConfigurationError(
        "Invalid environment configuration: " + "; ".join(problems)
      )

    self.data_source = data_source
    self.due_date_offset_days = (
      env.DUE_DATE_OFFSET_DAYS
      if due_date_offset_days is None
      else due_date_offset_days
    )
    self.customer_grace_period_days = (
      env.CUSTOMER_GRACE_PERIOD_DAYS
      if customer_grace_period_days is None
      else customer_grace_period_days
    )
    self.parallel_initial_fetch = (
      env.RECONCILIATION_PARALLEL_FETCH
      if parallel_initial_fetch is None
      else parallel_initial_fetch
    )
    self.settlement_advice_cache = (
      env.SETTLEMENT_ADVICE_CACHE_ENABLED
      if settlement_advice_cache is None
      else settlement_advice_cache
    )

    if self.due_date_offset_days < 0:
      raise ConfigurationError(
        "due_date_offset_days must not be negative", "DUE_DATE_OFFSET_DAYS"
      )
    if self.customer_grace_period_days < 0:
      raise ConfigurationError(
        "customer_grace_period_days must not be negative",
        "CUSTOMER_GRACE_PERIOD_DAYS",
      )

  @performance_timer(logger, "reconciliation", "resolve_overdue_balances")
  def resolve_overdue_balances(
    self,
    customer_id: str,
    master_billing_account: BillingAccount,
    now: Optional[datetime] = None,
  ) -> List[BillingAccountBalance]:
    """
    Resolve the overdue balances of a customer's account hierarchy.

    Args:
        customer_id: Customer OUID
        master_billing_account: The customer's master billing account
        now: Reference time, defaults to the current UTC time

    Returns:
        Overdue balances with inferred type and due date attached

    Raises:
        BillingFetchError: If any billing data fetch fails
    """
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

    accounts, due_balances = self._fetch_accounts_and_balances(customer_id)

    relevant_accounts = resolve_relevant_accounts(accounts, master_billing_account)
    balances = filter_and_deduplicate_balances(due_balances, relevant_accounts)
    if not balances:
      logger.debug(f"No due balances for customer {customer_id}")
      return []

    transaction_ids = ",".join(balance.transaction_id for balance in balances)
    charges = self._fetch(
      "fetch applied billing charges",
      transaction_ids,
      self.data_source.fetch_charges,
    )
    balances = self._attach_charges(balances, charges)

    advice_cache: Dict[str, List[SettlementNoteAdvice]] = {}
    for balance in balances:
      self._infer_balance_data(balance, now, advice_cache)

    overdue = [balance for balance in balances if not balance.ignore]
    logger.info(
      f"Resolved {len(overdue)} overdue balances for customer {customer_id}",
      extra={
        "component": "reconciliation",
        "action": "overdue_balances_resolved",
        "customer_id": customer_id,
        "metadata": {
          "relevant_accounts": len(relevant_accounts),
          "candidate_balances": len(balances),
          "overdue_balances": len(overdue),
        },
      },
    )
    return overdue

  def _fetch_accounts_and_balances(
    self, customer_id: str
  ) -> Tuple[List[BillingAccount], List[BillingAccountBalance]]:
    """Fetch billing accounts and due balances, concurrently if configured."""
    if not self.parallel_initial_fetch:
      accounts = self._fetch(
        "fetch billing accounts",
        customer_id,
        self.data_source.fetch_billing_accounts,
      )
      balances = self._fetch(
        "fetch due balances", customer_id, self.data_source.fetch_due_balances
      )
      return accounts, balances

    with ThreadPoolExecutor(max_workers=2) as executor:
      accounts_future = executor.submit(
        self._fetch,
        "fetch billing accounts",
        customer_id,
        self.data_source.fetch_billing_accounts,
      )
      balances_future = executor.submit(
        self._fetch,
        "fetch due balances",
        customer_id,
        self.data_source.fetch_due_balances,
      )
      return accounts_future.result(), balances_future.result()

  def _fetch(self, operation: str, key: str, fetch: Callable[[str], T]) -> T:
    """Run one data source call, wrapping failures with the fetched key."""
    try:
      return fetch(key)
    except BillingFetchError:
      raise
    except Exception as e:
      raise BillingFetchError(operation, key, e) from e

  def _attach_charges(
    self,
    balances: Sequence[BillingAccountBalance],
    charges: Sequence[AppliedBillingCharge],
  ) -> List[BillingAccountBalance]:
    """Attach charges by transaction ID, dropping balances without any."""
    charges_by_transaction: Dict[str, List[AppliedBillingCharge]] = defaultdict(list)
    for charge in charges:
      charges_by_transaction[charge.transaction_id].append(charge)

    attached = []
    for balance in balances:
      balance.charges = list(charges_by_transaction.get(balance.transaction_id, []))
      if not balance.charges:
        log_classification_gap(
          logger,
          "no charges found for transaction",
          balance.ouid,
          balance.transaction_id,
          balance.billing_account_ouid,
        )
        continue
      attached.append(balance)
    return attached

  def _infer_balance_data(
    self,
    balance: BillingAccountBalance,
    now: datetime,
    advice_cache: Dict[str, List[SettlementNoteAdvice]],
  ) -> None:
    """Infer the balance type and due date of a single balance."""
    balance.inferred_balance_type = infer_balance_type(balance.charges)

    if balance.inferred_balance_type != BalanceType.BILL:
      if not resolve_due_date(balance, self.due_date_offset_days, now):
        log_classification_gap(
          logger,
          "balance has no start date",
          balance.ouid,
          balance.transaction_id,
          balance.billing_account_ouid,
          metadata={"balance_type": balance.inferred_balance_type.value},
        )
      return

    advices = self._settlement_advices(balance.billing_account_ouid, advice_cache)
    advice = find_settlement_advice(balance, advices)
    if not resolve_bill_due_date(balance, advice, now):
      if balance.settlement_note_advice_ouid:
        reason = "couldn't infer due date for a bill"
      else:
        # An empty reference never matches, not even an advice without OUID
        reason = "bill has no settlement note advice reference"
      log_classification_gap(
        logger,
        reason,
        balance.ouid,
        balance.transaction_id,
        balance.billing_account_ouid,
        metadata={
          "settlement_note_advice_ouid": balance.settlement_note_advice_ouid,
        },
      )

  def _settlement_advices(
    self,
    billing_account_ouid: str,
    advice_cache: Dict[str, List[SettlementNoteAdvice]],
  ) -> List[SettlementNoteAdvice]:
    if self.settlement_advice_cache and billing_account_ouid in advice_cache:
      return advice_cache[billing_account_ouid]

    advices = self._fetch(
      "fetch settlement note advices",
      billing_account_ouid,
      self.data_source.fetch_settlement_advices,
    )
    if self.settlement_advice_cache:
      advice_cache[billing_account_ouid] = advices
    return advices

  # Customer status predicates

  def is_within_grace_period(
    self, account: BillingAccount, now: Optional[datetime] = None
  ) -> bool:
    """Check the account against the configured customer grace period."""
    now = now if now is not None else datetime.now(timezone.utc)
    return _is_within_grace_period(account, now, self.customer_grace_period_days)

  @staticmethod
  def is_offline_customer(account: BillingAccount) -> bool:
    return is_offline_customer(account)

  @staticmethod
  def has_final_bill(advices: Sequence[SettlementNoteAdvice]) -> bool:
    return has_final_bill(advices)
