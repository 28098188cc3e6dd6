"""Settlement note advice model."""

from datetime import datetime, timezone

from pydantic import Field, field_validator

from ...config.constants import BillingAccountConstants
from .base import TriPicaModel, from_epoch_millis


class SettlementNoteAdvice(TriPicaModel):
  """A statement for a billing account stating when a bill has to be paid."""

  ouid: str = Field("", description="Settlement note advice OUID")
  id: str = Field("", description="External ID")
  bill_date: datetime | None = Field(None, alias="billDate")
  payment_due_date: int = Field(
    0, alias="paymentDueDate", description="Payment due timestamp in epoch ms"
  )
  category: str = Field("", description="Advice category, LAST for final bills")
  state: str = Field("", description="Advice state")

  @field_validator("bill_date", mode="before")
  @classmethod
  def _parse_bill_date(cls, value):
    return from_epoch_millis(value)

  @property
  def payment_due_at(self) -> datetime:
    """Payment due date as a UTC datetime."""
    return datetime.fromtimestamp(self.payment_due_date / 1000, tz=timezone.utc)

  @property
  def is_settled_final_bill(self) -> bool:
    return (
      self.category == BillingAccountConstants.SETTLEMENT_CATEGORY_LAST
      and self.state == BillingAccountConstants.SETTLEMENT_STATE_SETTLED
    )
