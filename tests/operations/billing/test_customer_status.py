"""Tests for customer status predicates."""

from datetime import datetime, timedelta, timezone

from dunning.operations.billing.customer_status import (
  has_final_bill,
  is_offline_customer,
  is_within_grace_period,
)
from tests.conftest import NOW, make_account, make_advice


def test_offline_customer_receives_post():
  assert is_offline_customer(make_account("A1", media="POSTMAIL")) is True
  assert is_offline_customer(make_account("A1", media="EMAIL")) is False


class TestGracePeriod:
  """Test cases for is_within_grace_period."""

  def test_new_account_is_within_grace(self):
    account = make_account("A1", created=NOW - timedelta(days=5))

    assert is_within_grace_period(account, NOW, 30) is True

  def test_old_account_is_outside_grace(self):
    account = make_account("A1", created=NOW - timedelta(days=31))

    assert is_within_grace_period(account, NOW, 30) is False

  def test_grace_ends_exactly_at_boundary(self):
    account = make_account("A1", created=NOW - timedelta(days=30))

    assert is_within_grace_period(account, NOW, 30) is False

  def test_account_without_creation_date(self):
    assert is_within_grace_period(make_account("A1"), NOW, 30) is False

  def test_naive_now(self):
    account = make_account("A1", created=datetime(2023, 1, 1, tzinfo=timezone.utc))

    assert is_within_grace_period(account, datetime(2023, 1, 10), 30) is True


class TestFinalBill:
  """Test cases for has_final_bill."""

  def test_settled_last_advice(self):
    advices = [
      make_advice("S1", NOW, category="MONTHLY", state="SETTLED"),
      make_advice("S2", NOW, category="LAST", state="SETTLED"),
    ]

    assert has_final_bill(advices) is True

  def test_unsettled_last_advice(self):
    assert has_final_bill([make_advice("S1", NOW, category="LAST")]) is False

  def test_no_advices(self):
    assert has_final_bill([]) is False
