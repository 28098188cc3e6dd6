"""Shared pieces for models parsed from triPica billing payloads."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


def from_epoch_millis(value: Any) -> Any:
  """
  Convert a triPica timestamp (milliseconds since epoch) to a UTC datetime.

  triPica sends dates as numbers or numeric strings. Values that are already
  datetimes are normalized to UTC; anything else is handed to pydantic's own
  validation.
  """
  if value is None or value == "":
    return None
  if isinstance(value, datetime):
    if value.tzinfo is None:
      return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
  if isinstance(value, bool):
    return value
  if isinstance(value, (int, float)):
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
  if isinstance(value, str) and value.strip().lstrip("-").isdigit():
    return datetime.fromtimestamp(int(value.strip()) / 1000, tz=timezone.utc)
  return value


class TriPicaModel(BaseModel):
  """
  Base model accepting triPica camelCase payloads.

  triPica sends ``null`` for fields it has no value for. A ``null`` on a field
  with a non-None default yields that default, so one sparse record doesn't
  fail a whole list. Fields defaulting to None keep the ``null``; required
  fields still reject it.
  """

  model_config = ConfigDict(populate_by_name=True, extra="ignore")

  @model_validator(mode="before")
  @classmethod
  def _null_as_default(cls, data: Any) -> Any:
    if not isinstance(data, dict):
      return data

    defaulted = set()
    for name, field in cls.model_fields.items():
      if field.is_required() or field.default is None:
        continue
      defaulted.add(name)
      if field.alias:
        defaulted.add(field.alias)

    return {
      key: value
      for key, value in data.items()
      if not (value is None and key in defaulted)
    }
