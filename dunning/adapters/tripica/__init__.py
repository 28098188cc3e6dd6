"""
triPica billing API client.

Fetches billing accounts, due balances, applied charges and settlement note
advices for the overdue balance reconciliation.
"""

from .client import TriPicaBillingClient
from .config import TriPicaClientConfig
from .exceptions import (
  TriPicaAPIError,
  TriPicaClientError,
  TriPicaParseError,
  TriPicaServerError,
  TriPicaTimeoutError,
  TriPicaTransientError,
)

__all__ = [
  "TriPicaAPIError",
  "TriPicaBillingClient",
  "TriPicaClientConfig",
  "TriPicaClientError",
  "TriPicaParseError",
  "TriPicaServerError",
  "TriPicaTimeoutError",
  "TriPicaTransientError",
]
