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
	user_detail_pairs,
	yes_no,
)
from services.mutations import approve_loan_user
from services.resources import LOAN_USERS


def _render_loan_user(page: ListPage, loan_user: Dict[str, Any]) -> None:
	row_id = loan_user.get("id")
	approved = loan_user.get("is_approved") == 1
	busy = page.pending.is_pending(row_id)

	with ui.card().classes(panel_classes()):
		with ui.row().classes("w-full items-center"):
			ui.label(f"Loan User #{row_id}").classes("text-lg font-semibold text-blue-900")
			ui.space()
			if approved:
				ui.badge("Approved").props("color=positive")
			else:
				ui.input(
					"Loan cap",
					value=str(page.action.draft(row_id).get("loan_cap", "") or ""),
					on_change=lambda e: page.action.stage(row_id, "loan_cap", e.value),
				).props("dense outlined").classes("w-40")

				async def do_approve() -> None:
					await approve_loan_user(page.action, page.api, row_id, runner=run.io_bound)

				btn = ui.button("Approve", icon="check", on_click=do_approve).props(
					button_props("success")
				).classes(button_classes())
				if busy:
					btn.props("loading")
					btn.disable()

		error = page.action.errors.get(row_id)
		if error:
			ui.label(error).classes("text-sm text-red-600")

		detail_grid(
			"Loan User Details",
			[
				("ID", loan_user.get("id")),
				("User ID", loan_user.get("user_id")),
				("Loan Balance", loan_user.get("loan_balance")),
				("Loan Cap", loan_user.get("loan_cap")),
				("Is Approved", yes_no(loan_user.get("is_approved"))),
				("Approved Date", loan_user.get("approved_date")),
				("Created At", loan_user.get("created_at")),
				("Updated At", loan_user.get("updated_at")),
			],
		)

		user = loan_user.get("user") if isinstance(loan_user.get("user"), dict) else None
		if user and section_toggle(page, row_id, "user", "Show User Details", "Hide User Details"):
			detail_grid(None, user_detail_pairs(user))


def render(container: ui.element, ctx: PageContext) -> None:
	page = create_list_page(ctx, LOAN_USERS)
	filter_sync = {"fn": lambda: None}

	def content(_area: ui.element) -> None:
		filter_sync["fn"] = build_filter_bar(page, columns=3)
		build_page_size_select(page)
		build_list_body(page, lambda row: _render_loan_user(page, row), loading_text="Loading loan users...")

	def do_refresh() -> None:
		# Refresh here starts over: filters cleared, back to page 1
		page.expansion.clear()
		page.controller.reset()
		filter_sync["fn"]()

	def toolbar(_area: ui.element) -> None:
		ui.button("Refresh", icon="refresh", on_click=do_refresh).props(
			button_props("primary")
		).classes(button_classes())

	build_page(ctx, container, title=LOAN_USERS.title, content=content, toolbar=toolbar)
	page.controller.refresh()
