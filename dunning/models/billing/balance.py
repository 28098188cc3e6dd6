"""Billing account balance model and the inferred balance types."""

from datetime import datetime
from enum import Enum

from pydantic import Field, field_validator

from .base import TriPicaModel, from_epoch_millis
from .charge import AppliedBillingCharge
from .settlement import SettlementNoteAdvice


class BalanceType(str, Enum):
  """
  Cause of a balance, inferred from its charges.

  The values are the labels downstream dunning consumers match on and must
  not change.
  """

  DOWN_PAYMENT = "Abschlag"
  BILL = "Rechnung"
  DOWN_PAYMENT_AND_BANK_FEE = "Abschlag und Bankgebühren"
  BANK_FEE = "Bankgebühren"
  OTHER = "Sonstiges"


class BillingAccountBalance(TriPicaModel):
  """
  A balance on a billing account.

  The upstream fields are read-only snapshots. The fields below the divider are
  computed during a reconciliation run and never serialized.
  """

  ouid: str = Field("", description="Balance OUID")
  billing_account_ouid: str = Field("", alias="billingAccountOuid")
  amount: int = Field(0, description="Signed amount in minor currency units")
  status: str = Field("", description="Balance status, e.g. DUE")
  type: str = Field("", description="Raw upstream balance type")
  transaction_id: str = Field("", alias="transactionId")
  settlement_note_advice_ouid: str | None = Field(
    None, alias="settlementNoteAdviceOuid"
  )
  start_date: datetime | None = Field(None, alias="startDateTime")

  # ---- derived ----
  inferred_balance_type: BalanceType | None = Field(None, exclude=True)
  due_date: datetime | None = Field(None, exclude=True)
  ignore: bool = Field(False, exclude=True)
  charges: list[AppliedBillingCharge] = Field(default_factory=list, exclude=True)
  settlement_note_advice: SettlementNoteAdvice | None = Field(None, exclude=True)

  @field_validator("start_date", mode="before")
  @classmethod
  def _parse_start_date(cls, value):
    return from_epoch_millis(value)
