"""
Base triPica Client.

Configuration handling, retry policy and error mapping for the triPica
billing client.
"""

import random
from typing import Optional
from urllib.parse import urljoin

from ...config import env
from ...config.constants import MAX_ERROR_BODY_LENGTH, TriPicaPaths
from .config import TriPicaClientConfig
from .exceptions import (
  TriPicaAPIError,
  TriPicaClientError,
  TriPicaServerError,
  TriPicaTransientError,
)


class BaseTriPicaClient:
  """Base class for triPica clients with shared functionality."""

  def __init__(
    self,
    base_url: Optional[str] = None,
    config: Optional[TriPicaClientConfig] = None,
    **kwargs,
  ):
    """
    Initialize the client.

    Args:
        base_url: triPica host, e.g. https://tripica.example.com
        config: Client configuration
        **kwargs: Additional config overrides
    """
    self.config = config or TriPicaClientConfig.from_env()

    if base_url:
      self.config.base_url = base_url
    elif not self.config.base_url:
      self.config.base_url = env.TRIPICA_BASE_URL

    if kwargs:
      self.config = self.config.with_overrides(**kwargs)

    if not self.config.base_url:
      raise ValueError("base_url must be provided or set in environment")

    self.config.base_url = self.config.base_url.rstrip("/")
    self.billing_url = self.config.base_url + TriPicaPaths.BILLING_BASE_PATH

  def _build_url(self, path: str) -> str:
    """Build a full billing API URL from a path relative to the billing base."""
    if path.startswith("/"):
      path = path[1:]
    return urljoin(self.billing_url + "/", path)

  def _should_retry(self, error: Exception, attempt: int) -> bool:
    """
    Determine if request should be retried.

    Args:
        error: The exception that occurred
        attempt: Current attempt number (0-based)

    Returns:
        True if should retry, False otherwise
    """
    if attempt >= self.config.max_retries:
      return False

    if isinstance(error, TriPicaTransientError):
      return True

    if isinstance(error, TriPicaServerError):
      # 500 errors might be retriable
      return True

    # Client errors, parse errors and unknown errors are final
    return False

  def _calculate_retry_delay(self, attempt: int) -> float:
    """
    Calculate delay before retry using exponential backoff with jitter.

    Args:
        attempt: Current attempt number (0-based)

    Returns:
        Delay in seconds
    """
    delay = self.config.retry_delay * (self.config.retry_backoff**attempt)
    jitter = random.uniform(0, delay * 0.1)
    return delay + jitter

  def _handle_response_error(
    self, status_code: int, body: str, context: str
  ) -> TriPicaAPIError:
    """
    Convert an unexpected HTTP status code to the matching exception.

    Args:
        status_code: HTTP status code
        body: Response body text
        context: What was being fetched, for the error message

    Returns:
        Appropriate TriPicaAPIError subclass
    """
    if len(body) > MAX_ERROR_BODY_LENGTH:
      body = body[:MAX_ERROR_BODY_LENGTH] + "..."
    message = f"couldn't retrieve {context}: status {status_code}: {body}"

    if status_code in (502, 503, 504):
      return TriPicaTransientError(message, status_code, body)
    elif status_code in (400, 401, 403, 404, 422):
      return TriPicaClientError(message, status_code, body)
    elif status_code >= 500:
      return TriPicaServerError(message, status_code, body)
    else:
      return TriPicaAPIError(message, status_code, body)
