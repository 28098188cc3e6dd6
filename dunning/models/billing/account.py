"""Billing account models."""

from datetime import datetime

from pydantic import Field, field_validator

from ...config.constants import BillingAccountConstants
from .base import TriPicaModel, from_epoch_millis


class BillingAccountRelationship(TriPicaModel):
  """Relationship from one billing account to another."""

  ouid: str = Field("", description="Relationship OUID")
  type: str = Field("", description="Relationship type, e.g. PARENT")
  target_billing_account_ouid: str = Field(
    "",
    alias="targetBillingAccountOuid",
    description="OUID of the related billing account",
  )

  @property
  def is_parent(self) -> bool:
    return self.type == BillingAccountConstants.RELATIONSHIP_PARENT


class BillingAccount(TriPicaModel):
  """
  A triPica billing account.

  Whether an account is a master (MBA) or a child (CBA) is not stored; a child
  carries a PARENT relationship pointing at its master.
  """

  ouid: str = Field(..., description="Billing account OUID")
  name: str = Field("", description="External name (the MBA number)")
  customer_ouid: str = Field("", alias="customerOuid", description="Owning customer")
  bill_presentation_media: str = Field(
    "",
    alias="billPresentationMedia",
    description="How bills are delivered, POSTMAIL for offline customers",
  )
  date_time_create: datetime | None = Field(
    None, alias="dateTimeCreate", description="Creation timestamp (UTC)"
  )
  billing_account_relationships: list[BillingAccountRelationship] = Field(
    default_factory=list, alias="billingAccountRelationships"
  )

  @field_validator("date_time_create", mode="before")
  @classmethod
  def _parse_date_time_create(cls, value):
    return from_epoch_millis(value)

  def is_child_of(self, master_ouid: str) -> bool:
    """Check whether this account has a PARENT relationship to ``master_ouid``."""
    return any(
      relationship.is_parent
      and relationship.target_billing_account_ouid == master_ouid
      for relationship in self.billing_account_relationships
    )

  def is_offline_customer(self) -> bool:
    """Check whether the customer receives bills by post."""
    return (
      self.bill_presentation_media
      == BillingAccountConstants.PRESENTATION_MEDIA_POSTMAIL
    )
