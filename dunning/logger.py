"""
Dunning coordinator logging.

Importing this module configures logging for the current ``ENVIRONMENT``
(see ``dunning.config.logging``) and provides the component loggers:

- ``logger``: general application logger
- ``billing_logger``: reconciliation runs
- ``client_logger``: triPica HTTP client
"""

from .config.logging import (
  get_logger,
  log_classification_gap,
  log_error,
  performance_timer,
  setup_logging,
)

setup_logging()

logger = get_logger("dunning")
billing_logger = get_logger("dunning.billing")
client_logger = get_logger("dunning.tripica")


__all__ = [
  "logger",
  "billing_logger",
  "client_logger",
  "get_logger",
  "log_classification_gap",
  "log_error",
  "performance_timer",
]
