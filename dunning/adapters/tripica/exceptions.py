"""
triPica Client Exceptions.

Defines exception hierarchy for triPica billing API calls.
"""

from typing import Optional


class TriPicaAPIError(Exception):
  """Base exception for all triPica API errors."""

  def __init__(
    self,
    message: str,
    status_code: Optional[int] = None,
    body: Optional[str] = None,
  ):
    super().__init__(message)
    self.status_code = status_code
    self.body = body


class TriPicaTransientError(TriPicaAPIError):
  """
  Transient errors that can be retried.

  Examples: Network failures, 503 Service Unavailable, 502 Bad Gateway
  """

  pass


class TriPicaTimeoutError(TriPicaTransientError):
  """Request timeout errors."""

  pass


class TriPicaClientError(TriPicaAPIError):
  """
  Client errors that should not be retried.

  Examples: 400 Bad Request, 401 Unauthorized, 404 Not Found
  """

  pass


class TriPicaServerError(TriPicaAPIError):
  """
  Server errors that might be retriable.

  Examples: 500 Internal Server Error
  """

  pass


class TriPicaParseError(TriPicaAPIError):
  """The response body could not be parsed into the expected records."""

  pass
