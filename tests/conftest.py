import os

os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timezone  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402

from dunning.models.billing import (  # noqa: E402
  AppliedBillingCharge,
  BillingAccount,
  BillingAccountBalance,
  BillingAccountRelationship,
  SettlementNoteAdvice,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def epoch_millis(moment: datetime) -> int:
  return int(moment.timestamp() * 1000)


def make_account(ouid, parent_ouid=None, created=None, media="EMAIL", **kwargs):
  relationships = []
  if parent_ouid:
    relationships.append(
      BillingAccountRelationship(
        ouid=f"rel-{ouid}", type="PARENT", target_billing_account_ouid=parent_ouid
      )
    )
  return BillingAccount(
    ouid=ouid,
    name=kwargs.pop("name", f"MBA-{ouid}"),
    customer_ouid=kwargs.pop("customer_ouid", "C1"),
    bill_presentation_media=media,
    date_time_create=created,
    billing_account_relationships=kwargs.pop("relationships", relationships),
  )


def make_balance(
  ouid,
  account,
  transaction_id,
  amount=100,
  start=datetime(2024, 1, 1, tzinfo=timezone.utc),
  advice_ouid=None,
):
  return BillingAccountBalance(
    ouid=ouid,
    billing_account_ouid=account,
    amount=amount,
    status="DUE",
    transaction_id=transaction_id,
    settlement_note_advice_ouid=advice_ouid,
    start_date=start,
  )


def make_charge(glid, transaction_id="T1", account="A1", ouid=None):
  return AppliedBillingCharge(
    ouid=ouid or f"charge-{glid}",
    general_ledger_id=glid,
    billing_account_ouid=account,
    transaction_id=transaction_id,
    currency_code="EUR",
  )


def make_advice(ouid, payment_due, category="MONTHLY", state="OPEN"):
  return SettlementNoteAdvice(
    ouid=ouid,
    id=f"ext-{ouid}",
    payment_due_date=epoch_millis(payment_due),
    category=category,
    state=state,
  )


@pytest.fixture
def now():
  return NOW


@pytest.fixture
def data_source():
  """A billing data source with nothing due."""
  source = MagicMock()
  source.fetch_billing_accounts.return_value = []
  source.fetch_due_balances.return_value = []
  source.fetch_charges.return_value = []
  source.fetch_settlement_advices.return_value = []
  return source
