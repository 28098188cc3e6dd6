"""
triPica Billing Client.

Synchronous client for the triPica agent billing API. Implements the fetch
operations the overdue balance reconciliation consumes.
"""

import time
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from ...config.constants import (
  MAX_ERROR_BODY_LENGTH,
  BillingAccountConstants,
  TriPicaPaths,
)
from ...logger import client_logger as logger
from ...models.billing import (
  AppliedBillingCharge,
  BillingAccount,
  BillingAccountBalance,
  SettlementNoteAdvice,
)
from .base import BaseTriPicaClient
from .config import TriPicaClientConfig
from .exceptions import (
  TriPicaParseError,
  TriPicaTimeoutError,
  TriPicaTransientError,
)

T = TypeVar("T")


class TriPicaBillingClient(BaseTriPicaClient):
  """Client for triPica billing endpoints."""

  def __init__(
    self,
    base_url: Optional[str] = None,
    config: Optional[TriPicaClientConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
    **kwargs,
  ):
    """
    Initialize the triPica billing client.

    Args:
        base_url: triPica host
        config: Client configuration
        transport: Optional httpx transport, e.g. for tests
        **kwargs: Additional config overrides
    """
    super().__init__(base_url, config, **kwargs)

    self.client = httpx.Client(
      timeout=httpx.Timeout(self.config.timeout),
      headers=self.config.headers,
      verify=self.config.verify_ssl,
      transport=transport,
    )

  def __enter__(self):
    return self

  def __exit__(self, exc_type, exc_val, exc_tb):
    self.close()

  def close(self) -> None:
    """Close the client and cleanup resources."""
    self.client.close()

  # ---------------------------------------------------------------------------
  # Billing endpoints
  # ---------------------------------------------------------------------------

  def get_billing_account_by_mba(self, mba: str) -> Optional[BillingAccount]:
    """
    Retrieve a billing account by its MBA number.

    Returns:
        The billing account, or None if triPica has no content for it
    """
    response = self._request(
      TriPicaPaths.BILLING_ACCOUNT_BY_MBA.format(mba=mba),
      context=f"billing account with mba {mba}",
      allow_no_content=True,
    )
    if response is None:
      return None
    return self._parse(response, BillingAccount)

  def fetch_billing_accounts(self, customer_id: str) -> List[BillingAccount]:
    """Retrieve all billing accounts of a customer."""
    response = self._request(
      TriPicaPaths.BILLING_ACCOUNTS_BY_CUSTOMER.format(customer_ouid=customer_id),
      context=f"customer billing accounts with customerOUID {customer_id}",
    )
    return self._parse_list(response, BillingAccount)

  def fetch_due_balances(self, customer_id: str) -> List[BillingAccountBalance]:
    """Retrieve the customer's billing account balances with status DUE."""
    response = self._request(
      TriPicaPaths.DUE_BALANCES_BY_CUSTOMER.format(
        customer_ouid=customer_id, status=BillingAccountConstants.BALANCE_STATUS_DUE
      ),
      context=f"billing balances with customerOUID {customer_id}",
    )
    return self._parse_list(response, BillingAccountBalance)

  def fetch_charges(self, transaction_ids_csv: str) -> List[AppliedBillingCharge]:
    """Retrieve applied billing charges for comma-separated transaction IDs."""
    response = self._request(
      TriPicaPaths.APPLIED_BILLING_CHARGES,
      context=f"billing charges with transactionIDs {transaction_ids_csv}",
      params={"filters": f"transactionIds={transaction_ids_csv}"},
    )
    return self._parse_list(response, AppliedBillingCharge)

  def fetch_settlement_advices(
    self, billing_account_id: str
  ) -> List[SettlementNoteAdvice]:
    """Retrieve the settlement note advices of a billing account."""
    response = self._request(
      TriPicaPaths.SETTLEMENT_ADVICES_BY_ACCOUNT.format(
        billing_account_ouid=billing_account_id
      ),
      context=f"settlement notes with billingAccountOUID {billing_account_id}",
    )
    return self._parse_list(response, SettlementNoteAdvice)

  # ---------------------------------------------------------------------------
  # Request handling
  # ---------------------------------------------------------------------------

  def _execute_with_retry(self, func, *args, **kwargs):
    """
    Execute a function with retry logic.

    Raises:
        TriPicaAPIError: If all retries fail
    """
    last_error = None

    for attempt in range(self.config.max_retries + 1):
      try:
        return func(*args, **kwargs)

      except Exception as e:
        last_error = e

        # Convert to appropriate exception type
        if isinstance(e, httpx.TimeoutException):
          last_error = TriPicaTimeoutError(f"Request timeout: {e}")
        elif isinstance(e, httpx.RequestError):
          last_error = TriPicaTransientError(f"Request error: {e}")

        if not self._should_retry(last_error, attempt):
          if last_error is e:
            raise
          raise last_error from e

        delay = self._calculate_retry_delay(attempt)
        logger.warning(
          f"triPica request failed (attempt {attempt + 1}/{self.config.max_retries + 1}), "
          f"retrying in {delay:.2f}s: {last_error}",
          extra={
            "component": "tripica",
            "action": "retry",
            "status_code": getattr(last_error, "status_code", None),
            "metadata": {"attempt": attempt + 1, "delay_s": round(delay, 3)},
          },
        )
        time.sleep(delay)

    # Unreachable: the last attempt either returns or raises
    raise RuntimeError("Retry logic failed without capturing an exception")

  def _request(
    self,
    path: str,
    context: str,
    params: Optional[Dict[str, Any]] = None,
    allow_no_content: bool = False,
  ) -> Optional[httpx.Response]:
    """
    GET a billing endpoint with retry logic.

    Args:
        path: Path relative to the billing base path
        context: What is being fetched, for error messages
        params: Query parameters
        allow_no_content: Return None on 204 instead of failing

    Returns:
        Response object, or None for an allowed 204
    """
    url = self._build_url(path)

    def make_request():
      logger.debug(f"Making request: GET {url}")
      response = self.client.get(url, params=params)

      if response.status_code == 204 and allow_no_content:
        return None
      if response.status_code != 200:
        raise self._handle_response_error(response.status_code, response.text, context)

      return response

    return self._execute_with_retry(make_request)

  def _parse(self, response: httpx.Response, model: Type[T]) -> T:
    """Parse a single record from a JSON response."""
    try:
      return TypeAdapter(model).validate_json(response.content)
    except ValidationError as e:
      raise self._parse_error(response, e) from e

  def _parse_list(self, response: httpx.Response, model: Type[T]) -> List[T]:
    """Parse a JSON array response; a JSON null parses as an empty list."""
    try:
      records = TypeAdapter(Optional[List[model]]).validate_json(response.content)  # type: ignore[valid-type]
    except ValidationError as e:
      raise self._parse_error(response, e) from e
    return records or []

  def _parse_error(self, response: httpx.Response, error: Exception) -> TriPicaParseError:
    body = response.text
    if len(body) > MAX_ERROR_BODY_LENGTH:
      body = body[:MAX_ERROR_BODY_LENGTH] + "..."
    return TriPicaParseError(
      f"couldn't parse triPica response: {error}", response.status_code, body
    )
