"""
triPica client settings.

Connection and retry settings start from the application-wide ``env``
(``TRIPICA_BASE_URL``, ``TRIPICA_TIMEOUT``) and can be overridden per client
through ``TRIPICA_CLIENT_*`` variables or keyword arguments.
"""

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from ...config import env
from ...config.constants import (
  DEFAULT_HTTP_TIMEOUT,
  DEFAULT_MAX_RETRIES,
  DEFAULT_RETRY_BACKOFF,
  DEFAULT_RETRY_DELAY,
)


def _parse_bool(value: str) -> bool:
  return value.strip().lower() in ("true", "1", "yes")


# Environment suffix and parser per overridable setting
_ENV_OVERRIDES: Dict[str, tuple[str, Callable[[str], Any]]] = {
  "base_url": ("BASE_URL", str),
  "timeout": ("TIMEOUT", int),
  "max_retries": ("MAX_RETRIES", int),
  "retry_delay": ("RETRY_DELAY", float),
  "retry_backoff": ("RETRY_BACKOFF", float),
  "verify_ssl": ("VERIFY_SSL", _parse_bool),
}


@dataclass
class TriPicaClientConfig:
  """Settings of one triPica billing client."""

  base_url: str = ""
  timeout: int = DEFAULT_HTTP_TIMEOUT
  max_retries: int = DEFAULT_MAX_RETRIES
  retry_delay: float = DEFAULT_RETRY_DELAY
  retry_backoff: float = DEFAULT_RETRY_BACKOFF

  headers: Dict[str, str] = field(default_factory=dict)
  verify_ssl: bool = True

  @classmethod
  def from_env(cls, prefix: str = "TRIPICA_CLIENT_") -> "TriPicaClientConfig":
    """
    Build settings from the environment.

    ``<prefix>TIMEOUT`` and ``<prefix>BASE_URL`` win over ``TRIPICA_TIMEOUT``
    and ``TRIPICA_BASE_URL``.
    """
    values: Dict[str, Any] = {
      "base_url": env.TRIPICA_BASE_URL,
      "timeout": env.TRIPICA_TIMEOUT,
    }
    for name, (suffix, parse) in _ENV_OVERRIDES.items():
      raw = os.environ.get(prefix + suffix)
      if raw is not None:
        values[name] = parse(raw)
    return cls(**values)

  def with_overrides(self, **kwargs: Any) -> "TriPicaClientConfig":
    """Return a copy with ``kwargs`` applied; headers are copied, not shared."""
    kwargs.setdefault("headers", dict(self.headers))
    return dataclasses.replace(self, **kwargs)
