from __future__ import annotations

from typing import Any, Dict

from nicegui import run, ui

from layout.app_style import button_classes, button_props, panel_classes, status_color
from layout.context import PageContext
from layout.page_scaffold import build_page
from pages.utils.list_widgets import (
	ListPage,
	build_filter_bar,
	build_list_body,
	build_page_size_select,
	create_list_page,
	detail_grid,
	section_toggle,
	table_rows,
	user_detail_pairs,
	yes_no,
)
from services.mutations import LOAN_APPROVAL_RULES, approve_loan
from services.resources import LOANS

TRANSACTION_COLUMNS = (
	("id", "ID"),
	("loan_transaction_code", "Transaction Code"),
	("order_id", "Order ID"),
	("amount", "Amount"),
	("penalty", "Penalty"),
	("type", "Type"),
	("status", "Status"),
	("paid_date", "Paid Date"),
	("due_date", "Due Date"),
	("payment_method", "Payment Method"),
	("created_at", "Created At"),
)


def _loan_details(loan: Dict[str, Any]) -> list[tuple[str, Any]]:
	return [
		("Loan ID", loan.get("id")),
		("Loan Code", loan.get("loan_code")),
		("Loan Amount", loan.get("loan_amount")),
		("Loan Cap", loan.get("loan_cap")),
		("Is Approved", yes_no(loan.get("is_approved"))),
		("All Amount Spent", loan.get("is_all_amount_spent")),
		("Status", loan.get("status")),
		("Payment Completed", loan.get("payment_completed_at_date")),
		("Repayment Rule", loan.get("repayment_rule")),
		("Description", loan.get("description")),
		("User ID", loan.get("user_id")),
		("Created At", loan.get("created_at")),
	]


def _render_approve_form(page: ListPage, loan: Dict[str, Any]) -> None:
	loan_id = loan["id"]
	draft = page.action.draft(loan_id)
	busy = page.pending.is_pending(loan_id)

	with ui.column().classes("w-full gap-2 p-3 rounded-lg bg-blue-50"):
		with ui.grid(columns=2).classes("w-full gap-3"):
			for rule in LOAN_APPROVAL_RULES:
				ui.input(
					rule.label,
					value=str(draft.get(rule.name, "") or ""),
					on_change=lambda e, name=rule.name: page.action.stage(loan_id, name, e.value),
				).props("dense outlined").classes("w-full")

		error = page.action.errors.get(loan_id)
		if error:
			ui.label(error).classes("text-sm text-red-600")

		async def do_submit() -> None:
			await approve_loan(page.action, page.api, loan_id, runner=run.io_bound)

		with ui.row().classes("gap-2"):
			btn = ui.button("Submit Approval", icon="check", on_click=do_submit).props(
				button_props("success")
			).classes(button_classes())
			if busy:
				btn.props("loading")
				btn.disable()
			ui.button("Cancel", on_click=lambda: (page.expansion.close(loan_id, "approve"), page.refresh_body())).props(
				button_props("neutral")
			).classes(button_classes())


def _render_loan(page: ListPage, loan: Dict[str, Any]) -> None:
	loan_id = loan.get("id")
	approved = loan.get("is_approved") == 1

	with ui.card().classes(panel_classes()):
		with ui.row().classes("w-full items-center"):
			ui.label(f"Loan #{loan_id}").classes("text-lg font-semibold text-blue-900")
			ui.badge(str(loan.get("status") or "unknown")).props(f"color={status_color(loan.get('status'))}")
			ui.space()

			def open_approve() -> None:
				if not page.expansion.is_open(loan_id, "approve"):
					page.expansion.toggle(loan_id, "approve")
				page.refresh_body()

			approve_btn = ui.button("Approved" if approved else "Approve Loan", on_click=open_approve).props(
				button_props("neutral" if approved else "success")
			).classes(button_classes())
			if approved:
				approve_btn.disable()

		if page.expansion.is_open(loan_id, "approve") and not approved:
			_render_approve_form(page, loan)

		detail_grid("Loan Details", _loan_details(loan))

		user = loan.get("user") if isinstance(loan.get("user"), dict) else None
		if user and section_toggle(page, loan_id, "user", "Show User Details", "Hide User Details"):
			detail_grid(None, user_detail_pairs(user))

		transactions = loan.get("loan_transactions") or []
		if section_toggle(page, loan_id, "transactions", "Show Transactions", "Hide Transactions"):
			if transactions:
				table_rows(TRANSACTION_COLUMNS, transactions)
			else:
				ui.label("No transactions for this loan.").classes("text-sm text-gray-500")


def render(container: ui.element, ctx: PageContext) -> None:
	page = create_list_page(ctx, LOANS)

	def content(_area: ui.element) -> None:
		build_filter_bar(page)
		build_page_size_select(page)
		build_list_body(page, lambda loan: _render_loan(page, loan), loading_text="Loading loans...")

	def toolbar(_area: ui.element) -> None:
		ui.button("Refresh", icon="refresh", on_click=page.controller.refresh).props(
			button_props("primary")
		).classes(button_classes())

	build_page(ctx, container, title=LOANS.title, content=content, toolbar=toolbar)
	page.controller.refresh()
