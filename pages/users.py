from __future__ import annotations

from typing import Any, Dict

from nicegui import run, ui

from layout.app_style import button_classes, button_props, panel_classes
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
	yes_no,
)
from services.mutations import apply_loan_for_user
from services.resources import USERS

FAYDA_COLUMNS = (
	("id", "ID"),
	("name", "Name"),
	("email", "Email"),
	("phone_number", "Phone"),
	("birthdate", "Birthdate"),
	("gender", "Gender"),
	("address", "Address"),
	("nationality", "Nationality"),
	("is_verified", "Verified"),
)

LOAN_COLUMNS = (
	("id", "ID"),
	("loan_code", "Loan Code"),
	("loan_amount", "Amount"),
	("loan_cap", "Loan Cap"),
	("is_approved", "Approved"),
	("status", "Status"),
	("repayment_rule", "Repayment Rule"),
	("description", "Description"),
	("created_at", "Created At"),
)


def _fayda_row(fayda: Dict[str, Any]) -> Dict[str, Any]:
	address = fayda.get("address")
	if isinstance(address, dict):
		address = ", ".join(str(address.get(k) or "-") for k in ("region", "zone", "woreda"))
	return {**fayda, "address": address, "is_verified": yes_no(fayda.get("is_verified"))}


def _loan_row(loan: Dict[str, Any]) -> Dict[str, Any]:
	return {**loan, "is_approved": yes_no(loan.get("is_approved"))}


def _render_user(page: ListPage, user: Dict[str, Any]) -> None:
	user_id = user.get("id")
	applying = page.pending.is_pending(user_id)
	name = " ".join(p for p in (str(user.get("first_name") or ""), str(user.get("last_name") or "")) if p)

	with ui.card().classes(panel_classes()):
		with ui.row().classes("w-full items-center"):
			ui.label(name or str(user.get("name") or f"User #{user_id}")).classes("text-lg font-semibold text-blue-900")
			ui.space()

			async def do_apply() -> None:
				await apply_loan_for_user(page.action, page.api, user_id, runner=run.io_bound)

			btn = ui.button("Applying..." if applying else "Apply for Loan", icon="add_card", on_click=do_apply).props(
				button_props("success")
			).classes(button_classes())
			if applying:
				btn.props("loading")
				btn.disable()

		error = page.action.errors.get(user_id)
		if error:
			ui.label(error).classes("text-sm text-red-600")

		detail_grid(
			"User Details",
			[
				("ID", user_id),
				("Username", user.get("user_name")),
				("Email", user.get("email")),
				("Phone Number", user.get("phone_number")),
				("Wallet Balance", user.get("wallet_balance")),
				("Active", yes_no(user.get("is_active"))),
				("System User", yes_no(user.get("is_system_user"))),
				("Corporate ID", user.get("corporate_id")),
				("Created At", user.get("created_at")),
			],
		)

		fayda = [f for f in (user.get("fayda_customers") or []) if isinstance(f, dict)]
		if section_toggle(page, user_id, "fayda", "Show Fayda Customers", "Hide Fayda Customers"):
			if fayda:
				table_rows(FAYDA_COLUMNS, [_fayda_row(f) for f in fayda])
			else:
				ui.label("No fayda customers found.").classes("text-sm text-blue-600")

		loan_user = user.get("loan_user") if isinstance(user.get("loan_user"), dict) else None
		if section_toggle(page, user_id, "loan_user", "Show Loan User", "Hide Loan User"):
			if loan_user:
				detail_grid(
					None,
					[
						("ID", loan_user.get("id")),
						("Loan Balance", loan_user.get("loan_balance")),
						("Loan Cap", loan_user.get("loan_cap")),
						("Approved", yes_no(loan_user.get("is_approved"))),
						("Approved Date", loan_user.get("approved_date")),
					],
				)
			else:
				ui.label("No loan user record.").classes("text-sm text-blue-600")

		loans = [loan for loan in (user.get("loans") or []) if isinstance(loan, dict)]
		if section_toggle(page, user_id, "loans", f"Show Loans ({len(loans)})", "Hide Loans"):
			if loans:
				table_rows(LOAN_COLUMNS, [_loan_row(loan) for loan in loans])
			else:
				ui.label("No loans found.").classes("text-sm text-blue-600")


def render(container: ui.element, ctx: PageContext) -> None:
	page = create_list_page(ctx, USERS)

	def content(_area: ui.element) -> None:
		build_filter_bar(page, columns=2)
		build_page_size_select(page)
		build_list_body(page, lambda user: _render_user(page, user), loading_text="Loading users...")

	def toolbar(_area: ui.element) -> None:
		ui.button("Refresh", icon="refresh", on_click=page.controller.refresh).props(
			button_props("primary")
		).classes(button_classes())

	build_page(ctx, container, title=USERS.title, content=content, toolbar=toolbar)
	page.controller.refresh()
