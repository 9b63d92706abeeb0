from __future__ import annotations

import json
import time
from typing import Any, Dict, Optional, TYPE_CHECKING
from urllib.parse import urlencode, urlparse

import requests
from loguru import logger

from services.api_models import ApiResult, FetchOutcome, PageMeta, classify_status
from services.app_config import ApiConfig
from services.logging_setup import redact_for_log, summarize_for_log

if TYPE_CHECKING:
	from auth.session import ApiSession


API_PREFIX = "/api/v1"


class ApiClient:
	"""
	Blocking client for the admin REST API.

	Every call returns an ApiResult; nothing raises on HTTP or transport failure.
	The bearer token comes from the ApiSession passed in at construction, so
	pages and tests decide which credential is used.
	Call from the UI through `nicegui.run.io_bound`.
	"""

	def __init__(self, config: ApiConfig, session: "ApiSession", http: Optional[requests.Session] = None) -> None:
		self.config = config
		self.session = session
		self._http = http or requests.Session()

	# ------------------------------------------------------------------ Lists

	def fetch_list(self, path: str, params: Optional[Dict[str, Any]] = None) -> ApiResult:
		return self._request("GET", path, params=params)

	def list_categories(self) -> ApiResult:
		return self._request("GET", f"{API_PREFIX}/categories")

	# ------------------------------------------------------------------ Mutations

	def approve_loan(self, loan_id: int, form: Dict[str, Any]) -> ApiResult:
		return self._request(
			"POST",
			f"{API_PREFIX}/loans/{loan_id}/approve",
			form=form,
			method_override="PUT",
		)

	def approve_loan_user(self, loan_user_id: int, loan_cap: Any) -> ApiResult:
		return self._request(
			"POST",
			f"{API_PREFIX}/loan-users/{loan_user_id}/approve",
			form={"loan_cap": loan_cap},
		)

	def update_product_loan_eligibility(self, product_id: int, is_loan_eligible: bool) -> ApiResult:
		return self._request(
			"POST",
			f"{API_PREFIX}/products/{product_id}/update-loan-eligibility",
			form={"is_loan_eligible": 1 if is_loan_eligible else 0},
			method_override="PUT",
		)

	def apply_loan(self, user_id: int) -> ApiResult:
		return self._request("POST", f"{API_PREFIX}/loans", form={"user_id": user_id})

	# ------------------------------------------------------------------ Request implementation

	def _request(
		self,
		method: str,
		path: str,
		*,
		params: Optional[Dict[str, Any]] = None,
		form: Optional[Dict[str, Any]] = None,
		method_override: Optional[str] = None,
	) -> ApiResult:
		if not self.session.has_token:
			logger.warning(f"[_request] - missing_credential - method={method} path={path}")
			return ApiResult(outcome=FetchOutcome.MISSING_CREDENTIAL, message="Not signed in")

		url = build_url(self.config.base_url, path, params)
		headers: Dict[str, str] = dict(self.config.headers)
		headers["Authorization"] = f"Bearer {self.session.token}"
		headers["Accept"] = "application/json"

		files = None
		if form is not None:
			fields = dict(form)
			if method_override:
				fields["_method"] = method_override
			files = _multipart_fields(fields)

		logger.info(
			f"HTTP REQ: method={method} url={url} timeout_s={self.config.timeout_s} "
			f"headers={_shorten_json(redact_for_log(headers), 800)} form={summarize_for_log(redact_for_log(form))}"
		)

		start = time.time()
		try:
			resp = self._http.request(
				method=method,
				url=url,
				headers=headers,
				files=files,
				timeout=self.config.timeout_s,
				verify=self.config.verify_ssl,
			)
		except requests.RequestException as exc:
			elapsed_ms = round((time.time() - start) * 1000.0, 2)
			logger.warning(f"HTTP FAIL: method={method} url={url} elapsed_ms={elapsed_ms} err={exc!r}")
			return ApiResult(outcome=FetchOutcome.TRANSPORT_ERROR, message=str(exc), elapsed_ms=elapsed_ms)

		elapsed_ms = round((time.time() - start) * 1000.0, 2)
		status = int(resp.status_code)
		text = resp.text or ""
		outcome = classify_status(status)

		logger.info(
			f"HTTP RESP: method={method} url={url} status={status} outcome={outcome} elapsed_ms={elapsed_ms} "
			f"text={_shorten_str(text, 2000)}"
		)

		try:
			payload = json.loads(text) if text.strip() else None
		except ValueError as exc:
			if outcome == FetchOutcome.SUCCESS:
				logger.warning(f"[_request] - response_not_json - url={url} status={status} err={exc}")
				return ApiResult(
					outcome=FetchOutcome.TRANSPORT_ERROR,
					status=status,
					message="Malformed response from server",
					elapsed_ms=elapsed_ms,
				)
			payload = None

		if outcome != FetchOutcome.SUCCESS:
			return ApiResult(
				outcome=outcome,
				status=status,
				message=_error_message(payload, status),
				elapsed_ms=elapsed_ms,
			)

		data = payload.get("data") if isinstance(payload, dict) else payload
		meta = PageMeta.from_dict(payload.get("meta")) if isinstance(payload, dict) else None
		return ApiResult(outcome=outcome, status=status, data=data, meta=meta, elapsed_ms=elapsed_ms)


# ------------------------------------------------------------------ Helpers

def build_url(base_url: str, path: Optional[str], params: Optional[Dict[str, Any]] = None) -> str:
	base = str(base_url or "").strip()
	if not base:
		return ""

	url = base
	if path:
		if not url.endswith("/"):
			url += "/"
		url += str(path).lstrip("/")

	query = clean_params(params)
	if query:
		sep = "&" if urlparse(url).query else "?"
		url = f"{url}{sep}{urlencode(query, doseq=True)}"

	return url


def clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
	"""Drop None and blank-string values; the API treats a present-but-empty filter as a filter."""
	if not params:
		return {}
	out: Dict[str, Any] = {}
	for key, value in params.items():
		if value is None:
			continue
		if isinstance(value, str) and not value.strip():
			continue
		if isinstance(value, bool):
			value = 1 if value else 0
		out[str(key)] = value
	return out


def _multipart_fields(fields: Dict[str, Any]) -> Dict[str, tuple[None, str]]:
	# (None, value) tuples make requests send plain multipart form fields
	return {str(k): (None, "" if v is None else str(v)) for k, v in fields.items()}


def _error_message(payload: Any, status: int) -> str:
	if isinstance(payload, dict):
		message = str(payload.get("message", "") or "").strip() or str(payload.get("error", "") or "").strip()
		if message:
			return message
	return f"HTTP {status}"


def _shorten_str(s: str, n: int) -> str:
	s = s or ""
	if len(s) <= n:
		return s
	return s[:n] + "..."


def _shorten_json(value: Any, n: int) -> str:
	try:
		s = json.dumps(value, ensure_ascii=False, sort_keys=True, default=str)
	except (TypeError, ValueError):
		s = repr(value)
	return _shorten_str(s, n)
