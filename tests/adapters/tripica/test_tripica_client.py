"""Tests for the triPica billing client."""

import json
from datetime import timedelta
from unittest.mock import patch

import httpx
import pytest

from dunning.adapters.tripica import (
  TriPicaAPIError,
  TriPicaBillingClient,
  TriPicaClientConfig,
  TriPicaClientError,
  TriPicaParseError,
  TriPicaServerError,
  TriPicaTimeoutError,
  TriPicaTransientError,
)
from dunning.exceptions import BillingFetchError
from dunning.models.billing import BalanceType, BillingAccount
from dunning.operations.billing import OverdueBalanceService
from tests.conftest import NOW, epoch_millis

BASE_URL = "https://tripica.test"
BILLING = "/api/private/v1/agent/billing"
SLEEP_PATH = "dunning.adapters.tripica.client.time.sleep"


class Recorder:
  """MockTransport handler replaying canned responses per path."""

  def __init__(self, routes=None, default=None):
    self.routes = routes or {}
    self.default = default
    self.requests = []

  def __call__(self, request: httpx.Request) -> httpx.Response:
    self.requests.append(request)
    route = self.routes.get(request.url.path, self.default)
    if isinstance(route, list):
      route = route.pop(0)
    if isinstance(route, Exception):
      raise route
    if callable(route):
      return route(request)
    if route is None:
      return httpx.Response(404, text="not found")
    # Fresh copy so a canned response can be served more than once
    return httpx.Response(route.status_code, content=route.content)


def json_response(payload, status_code=200):
  return httpx.Response(status_code, content=json.dumps(payload).encode())


def make_client(recorder, **overrides):
  config = TriPicaClientConfig(base_url=BASE_URL, max_retries=2, retry_delay=0.0)
  return TriPicaBillingClient(
    config=config, transport=httpx.MockTransport(recorder), **overrides
  )


class TestEndpoints:
  """Each fetch hits its triPica path and parses the payload."""

  def test_fetch_billing_accounts(self):
    recorder = Recorder(
      {
        f"{BILLING}/billingAccount/customerOuid/C1": json_response(
          [
            {"ouid": "A1", "name": "MBA-1", "customerOuid": "C1"},
            {
              "ouid": "A2",
              "billingAccountRelationships": [
                {"type": "PARENT", "targetBillingAccountOuid": "A1"}
              ],
            },
          ]
        )
      }
    )

    with make_client(recorder) as client:
      accounts = client.fetch_billing_accounts("C1")

    assert [account.ouid for account in accounts] == ["A1", "A2"]
    assert accounts[1].is_child_of("A1")
    assert recorder.requests[0].method == "GET"

  def test_fetch_due_balances(self):
    recorder = Recorder(
      {
        f"{BILLING}/billingAccountBalance/customerOuid/C1/status/DUE": json_response(
          [
            {
              "ouid": "b1",
              "billingAccountOuid": "A1",
              "amount": 1250,
              "status": "DUE",
              "transactionId": "T1",
              "startDateTime": epoch_millis(NOW),
            }
          ]
        )
      }
    )

    with make_client(recorder) as client:
      balances = client.fetch_due_balances("C1")

    assert balances[0].amount == 1250
    assert balances[0].start_date == NOW

  def test_fetch_charges_sends_transaction_filter(self):
    recorder = Recorder(
      {
        f"{BILLING}/appliedBillingCharge": json_response(
          [
            {"ouid": "c1", "glid": "BILL_1", "transactionId": "T1"},
            {"ouid": "c2", "glid": "ABSCHLAG_1", "transactionId": "T2"},
          ]
        )
      }
    )

    with make_client(recorder) as client:
      charges = client.fetch_charges("T1,T2")

    assert [charge.general_ledger_id for charge in charges] == ["BILL_1", "ABSCHLAG_1"]
    assert recorder.requests[0].url.params["filters"] == "transactionIds=T1,T2"

  def test_fetch_settlement_advices(self):
    recorder = Recorder(
      {
        f"{BILLING}/settlement/billingAccountOuid/A1": json_response(
          [{"ouid": "S1", "paymentDueDate": epoch_millis(NOW), "category": "LAST"}]
        )
      }
    )

    with make_client(recorder) as client:
      advices = client.fetch_settlement_advices("A1")

    assert advices[0].payment_due_at == NOW
    assert advices[0].category == "LAST"

  def test_get_billing_account_by_mba(self):
    recorder = Recorder(
      {f"{BILLING}/billingAccount/name/MBA-1": json_response({"ouid": "A1"})}
    )

    with make_client(recorder) as client:
      account = client.get_billing_account_by_mba("MBA-1")

    assert isinstance(account, BillingAccount)
    assert account.ouid == "A1"

  def test_get_billing_account_no_content(self):
    recorder = Recorder(
      {f"{BILLING}/billingAccount/name/MBA-9": httpx.Response(204)}
    )

    with make_client(recorder) as client:
      assert client.get_billing_account_by_mba("MBA-9") is None

  def test_no_content_is_an_error_for_lists(self):
    recorder = Recorder(default=httpx.Response(204))

    with make_client(recorder) as client:
      with pytest.raises(TriPicaAPIError) as exc_info:
        client.fetch_billing_accounts("C1")

    assert exc_info.value.status_code == 204

  def test_null_list_is_empty(self):
    recorder = Recorder(default=httpx.Response(200, content=b"null"))

    with make_client(recorder) as client:
      assert client.fetch_due_balances("C1") == []

  def test_configured_headers_are_sent(self):
    recorder = Recorder(default=json_response([]))

    with make_client(recorder, headers={"Authorization": "Bearer t"}) as client:
      client.fetch_billing_accounts("C1")

    assert recorder.requests[0].headers["Authorization"] == "Bearer t"


class TestErrorHandling:
  """HTTP failures map to the triPica exception hierarchy."""

  def test_not_found_is_not_retried(self):
    recorder = Recorder(default=httpx.Response(404, text="unknown customer"))

    with make_client(recorder) as client, patch(SLEEP_PATH) as mock_sleep:
      with pytest.raises(TriPicaClientError) as exc_info:
        client.fetch_billing_accounts("C1")

    assert len(recorder.requests) == 1
    mock_sleep.assert_not_called()
    assert exc_info.value.status_code == 404
    assert "customer billing accounts with customerOUID C1" in str(exc_info.value)
    assert "unknown customer" in str(exc_info.value)

  def test_unavailable_is_retried_then_succeeds(self):
    path = f"{BILLING}/billingAccount/customerOuid/C1"
    recorder = Recorder(
      {
        path: [
          httpx.Response(503, text="busy"),
          httpx.Response(502, text="gateway"),
          json_response([{"ouid": "A1"}]),
        ]
      }
    )

    with make_client(recorder) as client, patch(SLEEP_PATH) as mock_sleep:
      accounts = client.fetch_billing_accounts("C1")

    assert [account.ouid for account in accounts] == ["A1"]
    assert len(recorder.requests) == 3
    assert mock_sleep.call_count == 2

  def test_retries_are_bounded(self):
    recorder = Recorder(default=httpx.Response(500, text="error"))

    with make_client(recorder) as client, patch(SLEEP_PATH):
      with pytest.raises(TriPicaServerError):
        client.fetch_due_balances("C1")

    assert len(recorder.requests) == 3

  def test_connection_error_is_transient(self):
    def refuse(request):
      raise httpx.ConnectError("refused", request=request)

    recorder = Recorder(default=refuse)

    with make_client(recorder, max_retries=0) as client:
      with pytest.raises(TriPicaTransientError) as exc_info:
        client.fetch_charges("T1")

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

  def test_timeout(self):
    def slow(request):
      raise httpx.ReadTimeout("slow", request=request)

    recorder = Recorder(default=slow)

    with make_client(recorder) as client, patch(SLEEP_PATH):
      with pytest.raises(TriPicaTimeoutError):
        client.fetch_settlement_advices("A1")

    assert len(recorder.requests) == 3

  def test_invalid_payload_raises_parse_error(self):
    recorder = Recorder(default=httpx.Response(200, content=b'{"not": "a list"}'))

    with make_client(recorder) as client, patch(SLEEP_PATH) as mock_sleep:
      with pytest.raises(TriPicaParseError) as exc_info:
        client.fetch_billing_accounts("C1")

    mock_sleep.assert_not_called()
    assert exc_info.value.body == '{"not": "a list"}'

  def test_error_body_is_truncated(self):
    recorder = Recorder(default=httpx.Response(400, text="x" * 2000))

    with make_client(recorder) as client:
      with pytest.raises(TriPicaClientError) as exc_info:
        client.fetch_billing_accounts("C1")

    assert len(exc_info.value.body) == 503
    assert exc_info.value.body.endswith("...")


class TestReconciliationOverHttp:
  """The client serves as the reconciliation's data source."""

  def test_overdue_bill(self):
    past_due = NOW - timedelta(days=2)
    recorder = Recorder(
      {
        f"{BILLING}/billingAccount/customerOuid/C1": json_response(
          [
            {"ouid": "A1"},
            {
              "ouid": "A2",
              "billingAccountRelationships": [
                {"type": "PARENT", "targetBillingAccountOuid": "A1"}
              ],
            },
          ]
        ),
        f"{BILLING}/billingAccountBalance/customerOuid/C1/status/DUE": json_response(
          [
            {
              "ouid": "b1",
              "billingAccountOuid": "A1",
              "amount": 100,
              "transactionId": "T1",
              "settlementNoteAdviceOuid": "S1",
            },
            {
              "ouid": "b2",
              "billingAccountOuid": "A2",
              "amount": 50,
              "transactionId": "T1",
              "settlementNoteAdviceOuid": "S1",
            },
          ]
        ),
        f"{BILLING}/appliedBillingCharge": json_response(
          [{"glid": "BILL_2024", "transactionId": "T1"}]
        ),
        f"{BILLING}/settlement/billingAccountOuid/A1": json_response(
          [{"ouid": "S1", "paymentDueDate": epoch_millis(past_due)}]
        ),
      }
    )

    with make_client(recorder) as client:
      service = OverdueBalanceService(
        client,
        due_date_offset_days=14,
        parallel_initial_fetch=False,
        settlement_advice_cache=True,
      )
      overdue = service.resolve_overdue_balances(
        "C1", BillingAccount(ouid="A1"), now=NOW
      )

    assert len(overdue) == 1
    assert overdue[0].amount == 150
    assert overdue[0].inferred_balance_type == BalanceType.BILL
    assert overdue[0].due_date == past_due

  def test_http_failure_aborts_run(self):
    recorder = Recorder(default=httpx.Response(401, text="denied"))

    with make_client(recorder) as client:
      service = OverdueBalanceService(client, parallel_initial_fetch=False)
      with pytest.raises(BillingFetchError) as exc_info:
        service.resolve_overdue_balances("C1", BillingAccount(ouid="A1"), now=NOW)

    assert exc_info.value.details["cause"] == "TriPicaClientError"
    assert exc_info.value.key == "C1"


class TestSparsePayloads:
  """Records with null fields parse instead of failing the whole list."""

  def test_null_fields_in_one_advice(self):
    recorder = Recorder(
      default=json_response(
        [
          {"ouid": "S1", "paymentDueDate": epoch_millis(NOW), "category": "LAST"},
          {"ouid": "S2", "paymentDueDate": None, "category": None, "state": None},
        ]
      )
    )

    with make_client(recorder) as client:
      advices = client.fetch_settlement_advices("A1")

    assert [advice.ouid for advice in advices] == ["S1", "S2"]
    assert advices[1].payment_due_date == 0
    assert advices[1].category == ""

  def test_null_balance_type(self):
    recorder = Recorder(
      default=json_response(
        [{"ouid": "b1", "type": None, "amount": 10, "transactionId": "T1"}]
      )
    )

    with make_client(recorder) as client:
      balances = client.fetch_due_balances("C1")

    assert balances[0].type == ""
    assert balances[0].amount == 10


def test_retry_warning_carries_status_code():
  recorder = Recorder(
    default=[httpx.Response(503, text="busy"), json_response([])]
  )

  with make_client(recorder) as client, patch(SLEEP_PATH), patch(
    "dunning.adapters.tripica.client.logger"
  ) as mock_logger:
    client.fetch_billing_accounts("C1")

  extra = mock_logger.warning.call_args.kwargs["extra"]
  assert extra["action"] == "retry"
  assert extra["status_code"] == 503
  assert extra["metadata"]["attempt"] == 1
