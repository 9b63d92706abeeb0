from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional


class FetchOutcome(StrEnum):
	SUCCESS = "success"
	MISSING_CREDENTIAL = "missing_credential"
	UNAUTHORIZED = "unauthorized"
	VALIDATION_EMPTY = "validation_empty"
	SERVER_ERROR = "server_error"
	TRANSPORT_ERROR = "transport_error"


# outcomes that mean "the session is not usable"
AUTH_OUTCOMES = frozenset({FetchOutcome.MISSING_CREDENTIAL, FetchOutcome.UNAUTHORIZED})


def classify_status(status: int) -> FetchOutcome:
	if 200 <= status < 300:
		return FetchOutcome.SUCCESS
	if status in (401, 403):
		return FetchOutcome.UNAUTHORIZED
	if status == 422:
		return FetchOutcome.VALIDATION_EMPTY
	return FetchOutcome.SERVER_ERROR


def _opt_int(value: Any) -> Optional[int]:
	if value is None or value == "":
		return None
	try:
		return int(value)
	except (TypeError, ValueError):
		return None


@dataclass(frozen=True)
class PageMeta:
	current_page: int = 1
	last_page: int = 1
	from_: Optional[int] = None
	to: Optional[int] = None
	total: int = 0
	per_page: int = 10

	@classmethod
	def from_dict(cls, raw: Any) -> Optional["PageMeta"]:
		if not isinstance(raw, dict):
			return None
		last_page = max(1, _opt_int(raw.get("last_page")) or 1)
		current_page = _opt_int(raw.get("current_page")) or 1
		return cls(
			current_page=min(max(1, current_page), last_page),
			last_page=last_page,
			from_=_opt_int(raw.get("from")),
			to=_opt_int(raw.get("to")),
			total=_opt_int(raw.get("total")) or 0,
			per_page=_opt_int(raw.get("per_page")) or 10,
		)


@dataclass
class PageResult:
	items: list[dict[str, Any]] = field(default_factory=list)
	meta: Optional[PageMeta] = None


@dataclass
class ApiResult:
	"""Outcome of one request against the backend."""

	outcome: FetchOutcome
	status: Optional[int] = None
	data: Any = None
	meta: Optional[PageMeta] = None
	message: str = ""
	elapsed_ms: float = 0.0

	@property
	def ok(self) -> bool:
		return self.outcome == FetchOutcome.SUCCESS

	def page_result(self) -> PageResult:
		items = self.data if isinstance(self.data, list) else []
		return PageResult(items=list(items), meta=self.meta)
