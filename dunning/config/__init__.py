"""
Centralized configuration package for the Dunning Coordinator.

This package provides a single source of truth for environment settings,
static billing constants, and logging configuration.
"""

# Import env first to avoid circular dependencies
from .constants import (
  BillingAccountConstants,
  LedgerCodeConstants,
  TriPicaPaths,
)
from .env import EnvConfig, env

__all__ = [
  "BillingAccountConstants",
  "EnvConfig",
  "LedgerCodeConstants",
  "TriPicaPaths",
  "env",
]
