from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from loguru import logger

from services.api_client import ApiClient
from services.api_models import AUTH_OUTCOMES, ApiResult, FetchOutcome
from services.expansion_state import ExpansionState, PendingFlags
from services.list_controller import ListController, PatchFn, RedirectFn

NotifyFn = Callable[[str, str], None]
RequestFn = Callable[[Dict[str, Any]], Awaitable[ApiResult]]
# runs a blocking ApiClient call off the event loop, e.g. nicegui.run.io_bound
Runner = Callable[..., Awaitable[ApiResult]]


# failures where the server's own "message" is worth showing to the user
_SERVER_MESSAGE_OUTCOMES = frozenset({FetchOutcome.SERVER_ERROR, FetchOutcome.VALIDATION_EMPTY})


class ClientValidationError(ValueError):
	def __init__(self, field: str, message: str) -> None:
		super().__init__(message)
		self.field = field


@dataclass(frozen=True)
class FieldRule:
	name: str
	label: str
	required: bool = True
	numeric: bool = False
	positive: bool = False
	integer: bool = False


LOAN_APPROVAL_RULES: tuple[FieldRule, ...] = (
	FieldRule("loan_amount", "Loan amount", numeric=True, positive=True),
	FieldRule("term_months", "Term (months)", numeric=True, positive=True, integer=True),
	FieldRule("description", "Description"),
	FieldRule("loan_cap", "Loan cap", numeric=True, positive=True),
)

LOAN_USER_APPROVAL_RULES: tuple[FieldRule, ...] = (
	FieldRule("loan_cap", "Loan cap", numeric=True, positive=True),
)


def _parse_number(rule: FieldRule, raw: Any) -> float:
	if isinstance(raw, bool):
		raise ClientValidationError(rule.name, f"{rule.label} must be a number")
	try:
		value = float(str(raw).strip())
	except ValueError:
		raise ClientValidationError(rule.name, f"{rule.label} must be a number") from None
	if not math.isfinite(value):
		raise ClientValidationError(rule.name, f"{rule.label} must be a number")
	return value


def validate_form(form: Dict[str, Any], rules: Iterable[FieldRule]) -> Dict[str, Any]:
	"""
	Check a staged form before it is submitted.

	Returns the cleaned values (numbers parsed, whole numbers as int).
	Raises ClientValidationError on the first rule that fails.
	"""
	cleaned: Dict[str, Any] = {}
	for rule in rules:
		raw = form.get(rule.name)
		if raw is None or str(raw).strip() == "":
			if rule.required:
				raise ClientValidationError(rule.name, f"{rule.label} is required")
			continue

		if not rule.numeric:
			cleaned[rule.name] = str(raw).strip()
			continue

		value = _parse_number(rule, raw)
		if rule.positive and value <= 0:
			raise ClientValidationError(rule.name, f"{rule.label} must be greater than zero")
		if rule.integer and not value.is_integer():
			raise ClientValidationError(rule.name, f"{rule.label} must be a whole number")
		cleaned[rule.name] = int(value) if value.is_integer() else value
	return cleaned


# ------------------------------------------------------------------ patches

def merge_fields(server_fields: Dict[str, Any]) -> PatchFn:
	"""Shallow merge: server fields win, local keys the server did not send are kept."""
	def _patch(item: Dict[str, Any]) -> Dict[str, Any]:
		return {**item, **server_fields}
	return _patch


def append_to(key: str, value: Any) -> PatchFn:
	def _patch(item: Dict[str, Any]) -> Dict[str, Any]:
		existing = item.get(key)
		return {**item, key: [*(existing if isinstance(existing, list) else []), value]}
	return _patch


@dataclass(frozen=True)
class MutationOutcome:
	ok: bool
	message: str = ""
	result: Optional[ApiResult] = None


class MutationAction:
	"""
	Single-entity write with local reconciliation.

	Idle -> Submitting -> Idle. The pending flag is always cleared, whatever
	the request does. On success the list entry is patched, the form section
	closed and the staged draft dropped. On failure the entry and the draft
	stay as they were so the user can retry.
	"""

	def __init__(
		self,
		controller: ListController,
		*,
		pending: Optional[PendingFlags] = None,
		expansion: Optional[ExpansionState] = None,
		notify: Optional[NotifyFn] = None,
		on_unauthenticated: Optional[RedirectFn] = None,
		on_change: Optional[Callable[[], None]] = None,
	) -> None:
		self.controller = controller
		self.pending = pending or PendingFlags()
		self.expansion = expansion or ExpansionState()
		self._notify_fn = notify
		self._on_unauthenticated = on_unauthenticated
		self._on_change = on_change
		self.drafts: Dict[Any, Dict[str, Any]] = {}
		self.errors: Dict[Any, str] = {}
		self._log = logger.bind(component="MutationAction", resource=controller.resource.key)

	# ------------------------------------------------------------------ staged input

	def draft(self, entity_id: Any) -> Dict[str, Any]:
		return dict(self.drafts.get(entity_id, {}))

	def stage(self, entity_id: Any, field: str, value: Any) -> None:
		self.drafts[entity_id] = {**self.drafts.get(entity_id, {}), field: value}

	def discard(self, entity_id: Any) -> None:
		self.drafts.pop(entity_id, None)
		self.errors.pop(entity_id, None)

	# ------------------------------------------------------------------ submit

	async def submit(
		self,
		entity_id: Any,
		request: RequestFn,
		*,
		rules: Iterable[FieldRule] = (),
		form: Optional[Dict[str, Any]] = None,
		patch: Optional[Callable[[ApiResult], Optional[PatchFn]]] = None,
		close_section: Optional[str] = None,
		success_message: str = "Saved",
		failure_message: str = "Request failed",
	) -> MutationOutcome:
		if self.pending.is_pending(entity_id):
			return MutationOutcome(ok=False, message="Already submitting")

		try:
			cleaned = validate_form(form or {}, rules)
		except ClientValidationError as exc:
			self._log.info(f"[submit] - client_validation_failed - entity_id={entity_id} field={exc.field} reason={exc}")
			self.errors[entity_id] = str(exc)
			self._notify(str(exc), "warning")
			self._changed()
			return MutationOutcome(ok=False, message=str(exc))

		self.errors.pop(entity_id, None)
		self.pending.begin(entity_id)
		self._changed()
		try:
			result = await request(cleaned)

			if not result.ok:
				message = result.message if result.outcome in _SERVER_MESSAGE_OUTCOMES and result.message else failure_message
				self._log.warning(
					f"[submit] - mutation_failed - entity_id={entity_id} outcome={result.outcome} status={result.status} message={result.message}"
				)
				self.errors[entity_id] = message
				self._notify(message, "negative")
				if result.outcome in AUTH_OUTCOMES and self._on_unauthenticated is not None:
					self._on_unauthenticated(result)
				return MutationOutcome(ok=False, message=message, result=result)

			patch_fn = patch(result) if patch is not None else _default_patch(result)
			if patch_fn is not None:
				self.controller.patch_item(entity_id, patch_fn)
			if close_section:
				self.expansion.close(entity_id, close_section)
			self.discard(entity_id)
			self._log.success(f"[submit] - mutation_succeeded - entity_id={entity_id} status={result.status}")
			self._notify(success_message, "positive")
			return MutationOutcome(ok=True, message=success_message, result=result)
		finally:
			self.pending.end(entity_id)
			self._changed()

	def _notify(self, message: str, kind: str) -> None:
		if self._notify_fn is not None:
			self._notify_fn(message, kind)

	def _changed(self) -> None:
		if self._on_change is not None:
			self._on_change()


def _default_patch(result: ApiResult) -> Optional[PatchFn]:
	if isinstance(result.data, dict):
		return merge_fields(result.data)
	return None


# ------------------------------------------------------------------ operations

async def approve_loan(action: MutationAction, api: ApiClient, loan_id: int, *, runner: Runner) -> MutationOutcome:
	return await action.submit(
		loan_id,
		lambda form: runner(api.approve_loan, loan_id, form),
		rules=LOAN_APPROVAL_RULES,
		form=action.draft(loan_id),
		close_section="approve",
		success_message="Loan approved successfully",
		failure_message="Failed to approve loan",
	)


async def approve_loan_user(action: MutationAction, api: ApiClient, loan_user_id: int, *, runner: Runner) -> MutationOutcome:
	sent: Dict[str, Any] = {}

	def request(form: Dict[str, Any]) -> Awaitable[ApiResult]:
		sent.update(form)
		return runner(api.approve_loan_user, loan_user_id, form["loan_cap"])

	return await action.submit(
		loan_user_id,
		request,
		rules=LOAN_USER_APPROVAL_RULES,
		form=action.draft(loan_user_id),
		# the endpoint answers with the user record, not the loan-user row
		patch=lambda result: merge_fields({
			"is_approved": 1,
			"loan_cap": sent.get("loan_cap"),
			**({"user": result.data} if isinstance(result.data, dict) else {}),
		}),
		close_section="approve",
		success_message="Loan user approved successfully",
		failure_message="Failed to approve loan user",
	)


async def toggle_product_loan_eligibility(
	action: MutationAction,
	api: ApiClient,
	product_id: int,
	is_loan_eligible: bool,
	*,
	runner: Runner,
) -> MutationOutcome:
	return await action.submit(
		product_id,
		lambda _form: runner(api.update_product_loan_eligibility, product_id, is_loan_eligible),
		patch=lambda _result: merge_fields({"is_loan_eligible": 1 if is_loan_eligible else 0}),
		success_message="Loan eligibility updated",
		failure_message="Failed to update loan eligibility",
	)


async def apply_loan_for_user(action: MutationAction, api: ApiClient, user_id: int, *, runner: Runner) -> MutationOutcome:
	return await action.submit(
		user_id,
		lambda _form: runner(api.apply_loan, user_id),
		patch=lambda result: append_to("loans", result.data) if isinstance(result.data, dict) else None,
		success_message="Loan applied successfully!",
		failure_message="Failed to apply for loan",
	)
