"""Tests for charge classification and balance type inference."""

import pytest

from dunning.models.billing import BalanceType
from dunning.operations.billing.classification import (
  ChargeFacts,
  balance_type_from_facts,
  classify_charge,
  infer_balance_type,
)
from tests.conftest import make_charge


def charges(*ledger_codes):
  return [make_charge(code) for code in ledger_codes]


class TestClassifyCharge:
  """Test cases for classify_charge."""

  @pytest.mark.parametrize(
    "ledger_code",
    [
      "CANCELLED_BILL_1",
      "REJECTED_ABSCHLAG",
      "BANK_FEE_RETURN",
      "REBOOKED",
      "RECEIVABLE_BILL",
    ],
  )
  def test_ignored_codes_report_no_other_fact(self, ledger_code):
    assert classify_charge(ledger_code) == ChargeFacts(ignored=True)

  def test_bill(self):
    assert classify_charge("BILL_2023") == ChargeFacts(is_bill=True)

  def test_down_payment(self):
    assert classify_charge("ABSCHLAG_2023") == ChargeFacts(is_down_payment=True)

  def test_bank_fee(self):
    assert classify_charge("BANK_FEE_X") == ChargeFacts(is_bank_fee=True)

  def test_unknown_code(self):
    assert classify_charge("INTEREST") == ChargeFacts()

  def test_empty_code(self):
    assert classify_charge("") == ChargeFacts()

  def test_matching_is_case_sensitive(self):
    assert classify_charge("cancelled_bill") == ChargeFacts()
    assert classify_charge("abschlag") == ChargeFacts()

  def test_facts_are_tested_independently(self):
    # Known ambiguity: a code matching both down payment and bank fee keeps
    # both facts rather than picking one.
    facts = classify_charge("ABSCHLAG_BANK_FEE")

    assert facts == ChargeFacts(is_down_payment=True, is_bank_fee=True)


class TestInferBalanceType:
  """Test cases for infer_balance_type."""

  def test_bill_short_circuits_down_payment(self):
    assert infer_balance_type(charges("ABSCHLAG_2023", "BILL_2023")) == BalanceType.BILL

  def test_bill_first_dominates(self):
    assert infer_balance_type(charges("BILL_2023", "BANK_FEE_X")) == BalanceType.BILL

  def test_down_payment_and_bank_fee(self):
    assert (
      infer_balance_type(charges("BANK_FEE_X", "ABSCHLAG_Y"))
      == BalanceType.DOWN_PAYMENT_AND_BANK_FEE
    )

  def test_only_ignored_charge_is_other(self):
    assert infer_balance_type(charges("CANCELLED_BILL_1")) == BalanceType.OTHER

  def test_ignored_bill_does_not_dominate(self):
    assert (
      infer_balance_type(charges("CANCELLED_BILL_1", "ABSCHLAG_Y"))
      == BalanceType.DOWN_PAYMENT
    )

  def test_down_payment_only(self):
    assert (
      infer_balance_type(charges("ABSCHLAG_1", "ABSCHLAG_2")) == BalanceType.DOWN_PAYMENT
    )

  def test_bank_fee_only(self):
    assert infer_balance_type(charges("BANK_FEE_X")) == BalanceType.BANK_FEE

  def test_unrecognized_charges_are_other(self):
    assert infer_balance_type(charges("INTEREST", "DUNNING_FEE")) == BalanceType.OTHER

  def test_no_charges_is_other(self):
    assert infer_balance_type([]) == BalanceType.OTHER

  def test_single_charge_with_both_markers(self):
    # Known ambiguity, see TestClassifyCharge.test_facts_are_tested_independently
    assert (
      infer_balance_type(charges("ABSCHLAG_BANK_FEE"))
      == BalanceType.DOWN_PAYMENT_AND_BANK_FEE
    )


@pytest.mark.parametrize(
  "down_payment,bill,bank_fee,expected",
  [
    (True, True, True, BalanceType.BILL),
    (False, True, False, BalanceType.BILL),
    (True, False, True, BalanceType.DOWN_PAYMENT_AND_BANK_FEE),
    (True, False, False, BalanceType.DOWN_PAYMENT),
    (False, False, True, BalanceType.BANK_FEE),
    (False, False, False, BalanceType.OTHER),
  ],
)
def test_balance_type_priority(down_payment, bill, bank_fee, expected):
  assert balance_type_from_facts(down_payment, bill, bank_fee) == expected
