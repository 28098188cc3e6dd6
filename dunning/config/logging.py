"""
Structured logging for the dunning coordinator.

Outside development every record is written as one JSON line so reconciliation
runs can be searched by customer, billing account and transaction. Records are
split into three tiers (critical, operational, debug) that go to separate
handlers, and each environment picks its level and tiers from a profile.
"""

import json
import logging
import logging.config
import time
import traceback
from datetime import datetime, timezone
from functools import wraps
from typing import Any

from dunning.config.env import EnvConfig

APPLICATION_LOGGERS = ["dunning", "dunning.billing", "dunning.tripica"]

# Optional record attributes copied into the JSON line when present
CONTEXT_FIELDS = (
  "action",
  "customer_id",
  "billing_account_ouid",
  "transaction_id",
  "duration_ms",
  "status_code",
)

# Level range [low, high) accepted by each tier
TIER_LEVELS = {
  "critical": (logging.ERROR, None),
  "operational": (logging.INFO, logging.ERROR),
  "debug": (logging.DEBUG, logging.INFO),
}

# environment -> (level, debug tier enabled); dev is handled separately
ENVIRONMENT_PROFILES = {
  "prod": ("INFO", False),
  "staging": ("INFO", True),
  "test": ("WARNING", False),
}


def _utc_timestamp(created: float) -> str:
  moment = datetime.fromtimestamp(created, tz=timezone.utc)
  return moment.isoformat().replace("+00:00", "Z")


class StructuredFormatter(logging.Formatter):
  """Render a record as a single JSON object."""

  def format(self, record: logging.LogRecord) -> str:
    entry: dict[str, Any] = {
      "timestamp": _utc_timestamp(record.created),
      "level": record.levelname,
      "component": getattr(record, "component", record.name),
      "message": record.getMessage(),
    }
    entry.update(
      {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}
    )

    if record.levelno >= logging.ERROR:
      if record.exc_info:
        exc_type, exc_value, _ = record.exc_info
        entry["error"] = {
          "type": exc_type.__name__ if exc_type else "Unknown",
          "message": str(exc_value) if exc_value else "",
          "traceback": traceback.format_exception(*record.exc_info),
        }
      if hasattr(record, "error_category"):
        entry["error_category"] = record.error_category

    if hasattr(record, "metadata"):
      entry["metadata"] = record.metadata

    return json.dumps(entry, default=str, separators=(",", ":"))


class TieredLogFilter:
  """Accept only records whose level falls into one tier."""

  def __init__(self, tier: str):
    self.tier = tier

  def filter(self, record: logging.LogRecord) -> bool:
    if self.tier not in TIER_LEVELS:
      return True
    low, high = TIER_LEVELS[self.tier]
    return record.levelno >= low and (high is None or record.levelno < high)


def _tier_handler(tier: str, level: str, stream: str) -> dict[str, Any]:
  return {
    "class": "logging.StreamHandler",
    "level": level,
    "formatter": "structured",
    "filters": [f"{tier}_filter"],
    "stream": stream,
  }


def get_logging_config(environment: str | None = None) -> dict[str, Any]:
  """
  Build a ``dictConfig`` mapping for an environment.

  prod and staging log INFO, staging adding a debug tier; test only logs
  warnings and errors. dev logs to the console at LOG_LEVEL (DEBUG if unset)
  with a plain text formatter.
  """
  environment = environment or EnvConfig.ENVIRONMENT
  is_dev = environment not in ENVIRONMENT_PROFILES

  if is_dev:
    level = getattr(EnvConfig, "LOG_LEVEL", None) or "DEBUG"
    debug_tier = level == "DEBUG"
  else:
    level, debug_tier = ENVIRONMENT_PROFILES[environment]

  handlers = {
    "critical": _tier_handler("critical", "ERROR", "ext://sys.stderr"),
    "operational": _tier_handler("operational", "INFO", "ext://sys.stdout"),
    "console": {
      "class": "logging.StreamHandler",
      "level": level,
      "formatter": "simple" if is_dev else "structured",
      "stream": "ext://sys.stdout",
    },
  }
  if debug_tier:
    handlers["debug"] = _tier_handler("debug", "DEBUG", "ext://sys.stdout")

  if is_dev:
    app_handlers = ["console"]
  else:
    app_handlers = ["critical", "operational"] + (["debug"] if debug_tier else [])

  loggers: dict[str, Any] = {
    name: {"level": level, "handlers": list(app_handlers), "propagate": False}
    for name in APPLICATION_LOGGERS
  }
  # HTTP transport chatter stays at WARNING everywhere
  for name in ("httpx", "httpcore"):
    loggers[name] = {
      "level": "WARNING",
      "handlers": ["console"] if is_dev else ["operational"],
      "propagate": False,
    }

  return {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
      "structured": {"()": StructuredFormatter},
      "simple": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
    },
    "filters": {
      f"{tier}_filter": {"()": TieredLogFilter, "tier": tier} for tier in TIER_LEVELS
    },
    "handlers": handlers,
    "loggers": loggers,
    "root": {"level": "WARNING", "handlers": ["console"] if is_dev else ["critical"]},
  }


def setup_logging(environment: str | None = None) -> None:
  logging.config.dictConfig(get_logging_config(environment))


def get_logger(name: str) -> logging.Logger:
  return logging.getLogger(name)


def log_error(
  logger: logging.Logger,
  error: Exception,
  component: str,
  action: str,
  error_category: str = "application",
  customer_id: str | None = None,
  metadata: dict[str, Any] | None = None,
) -> None:
  """Log ``error`` with its traceback and searchable context."""
  logger.error(
    f"Error in {component}.{action}: {error!s}",
    exc_info=True,
    extra={
      "component": component,
      "action": action,
      "error_category": error_category,
      "customer_id": customer_id,
      "metadata": metadata or {},
    },
  )


def log_classification_gap(
  logger: logging.Logger,
  reason: str,
  balance_ouid: str,
  transaction_id: str,
  billing_account_ouid: str | None = None,
  metadata: dict[str, Any] | None = None,
) -> None:
  """Log a balance that was dropped because it could not be classified."""
  logger.warning(
    f"Dropping balance {balance_ouid} (transaction {transaction_id}): {reason}",
    extra={
      "component": "reconciliation",
      "action": "classification_gap",
      "transaction_id": transaction_id,
      "billing_account_ouid": billing_account_ouid,
      "metadata": {"balance_ouid": balance_ouid, "reason": reason, **(metadata or {})},
    },
  )


def performance_timer(logger: logging.Logger, component: str, action: str):
  """
  Log how long the decorated call took.

  Successful calls log at INFO with ``duration_ms``. Failures are logged
  through ``log_error`` and re-raised unchanged.
  """

  def decorator(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
      started = time.perf_counter()

      def elapsed_ms() -> float:
        return (time.perf_counter() - started) * 1000

      try:
        result = func(*args, **kwargs)
      except Exception as e:
        log_error(logger, e, component, action, metadata={"duration_ms": elapsed_ms()})
        raise

      duration_ms = elapsed_ms()
      logger.info(
        f"{component}.{action} completed ({duration_ms:.2f}ms)",
        extra={"component": component, "action": action, "duration_ms": duration_ms},
      )
      return result

    return wrapper

  return decorator
