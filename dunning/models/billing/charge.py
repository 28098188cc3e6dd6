"""Applied billing charge model."""

from pydantic import Field

from .base import TriPicaModel


class AppliedBillingCharge(TriPicaModel):
  """A charge applied to a billing account as part of one transaction."""

  ouid: str = Field("", description="Charge OUID")
  general_ledger_id: str = Field(
    "", alias="glid", description="Ledger code encoding the charge semantics"
  )
  billing_account_ouid: str = Field("", alias="billingAccountOuid")
  transaction_id: str = Field("", alias="transactionId")
  currency_code: str = Field("", alias="currencyCode")

  def classify(self):
    """Classify this charge by its ledger code."""
    from ...operations.billing.classification import classify_charge

    return classify_charge(self.general_ledger_id)
