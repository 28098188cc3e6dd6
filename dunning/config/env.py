"""
Environment configuration for the dunning coordinator.

Every setting is read once at import through the typed helpers below and
exposed on the ``env`` singleton. Reconciliation tunables can still be
overridden per service instance.
"""

import os
from functools import lru_cache
from typing import List

from .constants import (
  DEFAULT_CUSTOMER_GRACE_PERIOD_DAYS,
  DEFAULT_DUE_DATE_OFFSET_DAYS,
  DEFAULT_HTTP_TIMEOUT,
)


# ==========================================================================
# TYPED ACCESSORS
# ==========================================================================


def get_int_env(key: str, default: int) -> int:
  """
  Read an integer setting.

  Unparseable values fall back to ``default`` with a printed warning.
  """
  raw = os.getenv(key)
  if raw is None:
    return default
  try:
    return int(raw)
  except ValueError:
    # Logging isn't configured yet while env is being imported
    print(f"Warning: Invalid {key} value, using default: {default}")
    return default


def get_bool_env(key: str, default: bool = False) -> bool:
  """Read a boolean setting; true, 1, yes and on count as true."""
  raw = os.getenv(key)
  if raw is None:
    return default
  return raw.strip().lower() in ("true", "1", "yes", "on")


def get_str_env(key: str, default: str = "") -> str:
  return os.getenv(key, default)


# ==========================================================================
# SETTINGS
# ==========================================================================


class EnvConfig:
  """Settings of the dunning coordinator, grouped by concern."""

  # Runtime
  ENVIRONMENT = get_str_env("ENVIRONMENT", "dev")
  LOG_LEVEL = get_str_env("LOG_LEVEL", "INFO")

  # triPica; TRIPICA_CLIENT_* variables override these per client
  TRIPICA_BASE_URL = get_str_env("TRIPICA_BASE_URL", "")
  TRIPICA_TIMEOUT = get_int_env("TRIPICA_TIMEOUT", DEFAULT_HTTP_TIMEOUT)

  # Reconciliation
  DUE_DATE_OFFSET_DAYS = get_int_env(
    "DUE_DATE_OFFSET_DAYS", DEFAULT_DUE_DATE_OFFSET_DAYS
  )
  CUSTOMER_GRACE_PERIOD_DAYS = get_int_env(
    "CUSTOMER_GRACE_PERIOD_DAYS", DEFAULT_CUSTOMER_GRACE_PERIOD_DAYS
  )
  RECONCILIATION_PARALLEL_FETCH = get_bool_env(
    "RECONCILIATION_PARALLEL_FETCH", False
  )
  SETTLEMENT_ADVICE_CACHE_ENABLED = get_bool_env(
    "SETTLEMENT_ADVICE_CACHE_ENABLED", True
  )

  @classmethod
  def is_production(cls) -> bool:
    return cls.ENVIRONMENT.lower() in ("prod", "production")

  @classmethod
  def is_staging(cls) -> bool:
    return cls.ENVIRONMENT.lower() in ("staging", "stage")

  @classmethod
  @lru_cache(maxsize=1)
  def validate(cls) -> List[str]:
    """
    Check the settings for values a reconciliation can't run with.

    Returns:
        Human-readable problems, empty when the configuration is usable
    """
    errors = []

    if (cls.is_production() or cls.is_staging()) and not cls.TRIPICA_BASE_URL:
      errors.append("TRIPICA_BASE_URL must be set in production and staging")
    if cls.DUE_DATE_OFFSET_DAYS < 0:
      errors.append("DUE_DATE_OFFSET_DAYS must not be negative")
    if cls.CUSTOMER_GRACE_PERIOD_DAYS < 0:
      errors.append("CUSTOMER_GRACE_PERIOD_DAYS must not be negative")
    if cls.TRIPICA_TIMEOUT <= 0:
      errors.append("TRIPICA_TIMEOUT must be positive")

    return errors


env = EnvConfig()
