from __future__ import annotations

import json
import unittest
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from auth.session import ApiSession
from services.api_client import ApiClient, build_url, clean_params
from services.api_models import FetchOutcome, classify_status
from services.app_config import ApiConfig


class FakeResponse:
    def __init__(self, status_code: int, body: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self.text = text if text is not None else ("" if body is None else json.dumps(body))


class FakeHttp:
    """Minimal requests.Session look-alike that records every request."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse(200, {"data": []})
        self.error = error
        self.requests: List[Dict[str, Any]] = []

    def request(self, **kwargs: Any) -> FakeResponse:
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def make_client(http: FakeHttp, token: str = "tok-123") -> ApiClient:
    config = ApiConfig(base_url="https://api.example.test", timeout_s=5.0)
    return ApiClient(config, ApiSession(token=token), http=http)


class ClassificationTests(unittest.TestCase):
    def test_status_mapping(self) -> None:
        self.assertEqual(classify_status(200), FetchOutcome.SUCCESS)
        self.assertEqual(classify_status(204), FetchOutcome.SUCCESS)
        self.assertEqual(classify_status(401), FetchOutcome.UNAUTHORIZED)
        self.assertEqual(classify_status(403), FetchOutcome.UNAUTHORIZED)
        self.assertEqual(classify_status(422), FetchOutcome.VALIDATION_EMPTY)
        self.assertEqual(classify_status(404), FetchOutcome.SERVER_ERROR)
        self.assertEqual(classify_status(500), FetchOutcome.SERVER_ERROR)


class ApiClientTests(unittest.TestCase):
    def test_missing_token_never_touches_network(self) -> None:
        http = FakeHttp()
        result = make_client(http, token="  ").fetch_list("/api/v1/loans", {"page": 1})

        self.assertEqual(result.outcome, FetchOutcome.MISSING_CREDENTIAL)
        self.assertEqual(http.requests, [])

    def test_list_request_carries_bearer_and_query(self) -> None:
        body = {
            "data": [{"id": 1}, {"id": 2}],
            "meta": {"current_page": 1, "last_page": 3, "from": 1, "to": 2, "total": 6, "per_page": 2},
        }
        http = FakeHttp(FakeResponse(200, body))

        result = make_client(http).fetch_list("/api/v1/loans", {"page": 1, "per_page": 2, "name_search": ""})

        sent = http.requests[0]
        self.assertEqual(sent["method"], "GET")
        self.assertEqual(sent["url"], "https://api.example.test/api/v1/loans?page=1&per_page=2")
        self.assertEqual(sent["headers"]["Authorization"], "Bearer tok-123")
        self.assertEqual(sent["headers"]["Accept"], "application/json")
        self.assertIsNone(sent["files"])

        self.assertTrue(result.ok)
        page = result.page_result()
        self.assertEqual(page.items, [{"id": 1}, {"id": 2}])
        self.assertEqual((page.meta.last_page, page.meta.total), (3, 6))

    def test_approve_loan_is_multipart_with_put_override(self) -> None:
        http = FakeHttp(FakeResponse(200, {"data": {"id": 42, "is_approved": 1}}))

        result = make_client(http).approve_loan(42, {"loan_amount": 5000, "term_months": 12})

        sent = http.requests[0]
        self.assertEqual(sent["method"], "POST")
        self.assertEqual(sent["url"], "https://api.example.test/api/v1/loans/42/approve")
        self.assertEqual(
            sent["files"],
            {"loan_amount": (None, "5000"), "term_months": (None, "12"), "_method": (None, "PUT")},
        )
        self.assertEqual(result.data, {"id": 42, "is_approved": 1})

    def test_loan_eligibility_sends_one_or_zero(self) -> None:
        http = FakeHttp(FakeResponse(200, {"message": "ok"}))
        make_client(http).update_product_loan_eligibility(11, False)

        sent = http.requests[0]
        self.assertEqual(sent["url"], "https://api.example.test/api/v1/products/11/update-loan-eligibility")
        self.assertEqual(sent["files"], {"is_loan_eligible": (None, "0"), "_method": (None, "PUT")})

    def test_apply_loan_posts_user_id(self) -> None:
        http = FakeHttp(FakeResponse(201, {"data": {"id": 9}}))
        result = make_client(http).apply_loan(5)

        self.assertEqual(http.requests[0]["url"], "https://api.example.test/api/v1/loans")
        self.assertEqual(http.requests[0]["files"], {"user_id": (None, "5")})
        self.assertTrue(result.ok)

    def test_unauthorized(self) -> None:
        http = FakeHttp(FakeResponse(401, {"message": "Unauthenticated."}))
        result = make_client(http).fetch_list("/api/v1/loans")

        self.assertEqual(result.outcome, FetchOutcome.UNAUTHORIZED)
        self.assertEqual(result.status, 401)

    def test_validation_error(self) -> None:
        http = FakeHttp(FakeResponse(422, {"message": "The phone number field is invalid."}))
        result = make_client(http).fetch_list("/api/v1/loans")

        self.assertEqual(result.outcome, FetchOutcome.VALIDATION_EMPTY)
        self.assertEqual(result.message, "The phone number field is invalid.")

    def test_server_error_without_json_body(self) -> None:
        http = FakeHttp(FakeResponse(502, text="<html>Bad gateway</html>"))
        result = make_client(http).fetch_list("/api/v1/loans")

        self.assertEqual(result.outcome, FetchOutcome.SERVER_ERROR)
        self.assertEqual(result.message, "HTTP 502")

    def test_network_failure_is_transport_error(self) -> None:
        http = FakeHttp(error=requests.ConnectionError("connection refused"))
        result = make_client(http).fetch_list("/api/v1/loans")

        self.assertEqual(result.outcome, FetchOutcome.TRANSPORT_ERROR)
        self.assertIsNone(result.status)

    def test_malformed_success_body_is_transport_error(self) -> None:
        http = FakeHttp(FakeResponse(200, text="{not json"))
        result = make_client(http).fetch_list("/api/v1/loans")

        self.assertEqual(result.outcome, FetchOutcome.TRANSPORT_ERROR)
        self.assertEqual(result.status, 200)

    def test_request_log_shortens_long_form_values(self) -> None:
        messages: List[str] = []
        sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="INFO")
        try:
            make_client(FakeHttp()).approve_loan(42, {"loan_amount": 5000, "description": "x" * 300})
        finally:
            logger.remove(sink_id)

        request_line = next(m for m in messages if m.startswith("HTTP REQ:"))
        self.assertIn("...(300 chars)", request_line)
        self.assertNotIn("tok-123", request_line)


class UrlHelperTests(unittest.TestCase):
    def test_build_url_joins_slashes(self) -> None:
        self.assertEqual(build_url("https://h/", "/api/v1/loans"), "https://h/api/v1/loans")
        self.assertEqual(build_url("https://h", "api/v1/loans"), "https://h/api/v1/loans")
        self.assertEqual(build_url("", "/x"), "")

    def test_bracket_keys_are_encoded(self) -> None:
        url = build_url("https://h", "/api/v1/products", {"price[gte]": 100})
        self.assertEqual(url, "https://h/api/v1/products?price%5Bgte%5D=100")

    def test_clean_params(self) -> None:
        self.assertEqual(
            clean_params({"a": None, "b": "", "c": "  ", "d": 0, "e": True, "f": "x"}),
            {"d": 0, "e": 1, "f": "x"},
        )


if __name__ == "__main__":
    unittest.main()
