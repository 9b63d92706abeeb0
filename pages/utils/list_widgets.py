from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional

from loguru import logger
from nicegui import run, ui

from auth.session import logout
from layout.app_style import button_classes, button_props, muted_text_classes, section_title_classes
from layout.context import PageContext
from services.api_client import ApiClient
from services.api_models import AUTH_OUTCOMES, ApiResult
from services.app_config import get_app_config
from services.expansion_state import ExpansionState, PendingFlags
from services.list_controller import ListController
from services.logging_setup import log_timing
from services.mutations import MutationAction
from services.pagination import build_pagination, result_summary
from services.resources import ListResource

ItemRenderer = Callable[[Dict[str, Any]], None]


def render_value(value: Any) -> str:
	return "N/A" if value is None else str(value)


def yes_no(value: Any) -> str:
	return "Yes" if value else "No"


@dataclass
class ListPage:
	"""Everything one list view owns: API client, controller, mutation state."""

	ctx: PageContext
	api: ApiClient
	controller: ListController
	action: MutationAction
	expansion: ExpansionState
	pending: PendingFlags
	refresh_body: Callable[[], None] = lambda: None
	_redirected: bool = field(default=False, repr=False)

	async def fetch(self, resource: ListResource, params: Dict[str, Any]) -> ApiResult:
		with log_timing("ListPage.fetch", path=resource.path, params=params):
			return await run.io_bound(self.api.fetch_list, resource.path, params)

	def redirect_to_login(self, result: ApiResult) -> None:
		if self._redirected:
			return
		self._redirected = True
		logger.warning(
			f"[redirect_to_login] - leaving_page - resource={self.controller.resource.key} "
			f"outcome={result.outcome} status={result.status}"
		)
		# a rejected token is useless, the login page stores a fresh one
		if result.outcome in AUTH_OUTCOMES:
			logout()
		self.ctx.run_cleanups()
		ui.navigate.to("/login")


def create_list_page(ctx: PageContext, resource: ListResource) -> ListPage:
	cfg = get_app_config()
	api = ApiClient(cfg.api, ctx.session)
	expansion = ExpansionState()
	pending = PendingFlags()
	client = ui.context.client

	page: ListPage

	def on_unauthenticated(result: ApiResult) -> None:
		# may run from a fetch task, outside any UI slot
		with client:
			page.redirect_to_login(result)

	def notify(message: str, kind: str) -> None:
		with client:
			ui.notify(message, type=kind)

	controller = ListController(
		resource,
		lambda res, params: page.fetch(res, params),
		on_unauthenticated=on_unauthenticated,
		page_sizes=cfg.lists.page_sizes,
		page_size=cfg.lists.default_page_size,
		debounce_s=cfg.lists.debounce_ms / 1000.0,
		redirect_on_server_error=cfg.errors.redirect_on_server_error,
		redirect_on_transport_error=cfg.errors.redirect_on_transport_error,
	)
	action = MutationAction(
		controller,
		pending=pending,
		expansion=expansion,
		notify=notify,
		on_unauthenticated=on_unauthenticated,
		on_change=lambda: page.refresh_body(),
	)
	page = ListPage(ctx=ctx, api=api, controller=controller, action=action, expansion=expansion, pending=pending)
	return page


# ------------------------------------------------------------------ filters / page size


def build_filter_bar(page: ListPage, *, columns: int = 4) -> Callable[[], None]:
	"""Filter inputs plus Clear/Search. Returns a function that copies the controller's filters back into the inputs."""
	controller = page.controller
	inputs: Dict[str, ui.element] = {}
	syncing = {"active": False}

	def on_value(name: str, value: Any) -> None:
		if syncing["active"]:
			return
		controller.set_filter(name, value)

	def sync_inputs() -> None:
		syncing["active"] = True
		try:
			for name, element in inputs.items():
				element.set_value(controller.filters.get(name, ""))
		finally:
			syncing["active"] = False

	def do_apply() -> None:
		controller.apply_filters()

	def do_clear() -> None:
		controller.clear_filters()
		sync_inputs()

	with ui.card().classes("w-full"):
		with ui.grid(columns=columns).classes("w-full gap-4"):
			for f in controller.resource.filters:
				if f.kind == "select":
					element = ui.select(
						options=dict(f.options),
						value=controller.filters.get(f.name, ""),
						label=f.label,
						on_change=lambda e, n=f.name: on_value(n, e.value),
					).props("dense outlined").classes("w-full")
				else:
					element = ui.input(
						f.label,
						placeholder=f.placeholder,
						value=controller.filters.get(f.name, ""),
						on_change=lambda e, n=f.name: on_value(n, e.value),
					).props("dense outlined clearable").classes("w-full")
					element.on("keydown.enter", lambda _e: do_apply())
				inputs[f.name] = element

		with ui.row().classes("w-full justify-end gap-2 mt-2"):
			ui.button("Clear", icon="clear", on_click=do_clear).props(button_props("neutral")).classes(button_classes())
			ui.button("Search", icon="search", on_click=do_apply).props(button_props("primary")).classes(button_classes())

	return sync_inputs


def build_page_size_select(page: ListPage) -> ui.select:
	controller = page.controller

	def on_size(e) -> None:
		controller.set_page_size(int(e.value))

	with ui.row().classes("items-center gap-2"):
		ui.label("Items per page:").classes(muted_text_classes())
		return ui.select(
			options=list(controller.page_sizes),
			value=controller.page_size,
			on_change=on_size,
		).props("dense outlined").classes("w-24")


def build_pagination_bar(page: ListPage) -> None:
	controller = page.controller
	if controller.meta is None:
		return
	controls = build_pagination(controller.meta, controller.page)

	with ui.row().classes("w-full items-center justify-center gap-1 mt-2"):
		ui.button("First", on_click=lambda: controller.set_page(1)).props(
			"flat dense no-caps"
		).set_enabled(controls.first_enabled)
		ui.button("Previous", on_click=lambda: controller.set_page(controls.prev_page)).props(
			"flat dense no-caps"
		).set_enabled(controls.prev_enabled)
		for number in controls.pages:
			btn = ui.button(str(number), on_click=lambda n=number: controller.set_page(n)).props("dense no-caps")
			btn.props("unelevated color=primary" if number == controls.current_page else "outline color=primary")
		ui.button("Next", on_click=lambda: controller.set_page(controls.next_page)).props(
			"flat dense no-caps"
		).set_enabled(controls.next_enabled)
		ui.button("Last", on_click=lambda: controller.set_page(controls.last_page)).props(
			"flat dense no-caps"
		).set_enabled(controls.last_enabled)


# ------------------------------------------------------------------ list body


def build_list_body(page: ListPage, render_item: ItemRenderer, *, loading_text: str = "Loading...") -> None:
	"""Summary, items and pagination. Rebuilt whenever the controller or a mutation changes state."""
	controller = page.controller

	@ui.refreshable
	def _body() -> None:
		summary = result_summary(controller.meta)
		if summary:
			ui.label(summary).classes(muted_text_classes())

		if controller.loading:
			with ui.row().classes("w-full justify-center items-center gap-2 py-8"):
				ui.spinner(size="lg")
				ui.label(loading_text).classes("text-blue-600")
			return

		if not controller.items:
			ui.label(controller.message or controller.resource.empty_text).classes("w-full text-center text-blue-600 py-8")
			# an empty page past the end still needs a way back
			build_pagination_bar(page)
			return

		with ui.column().classes("w-full gap-4"):
			for item in controller.items:
				render_item(item)

		build_pagination_bar(page)

	with ui.column().classes("w-full gap-2"):
		_body()

	page.refresh_body = _body.refresh
	page.ctx.add_cleanup(controller.on_change(lambda _c: _body.refresh()))


# ------------------------------------------------------------------ entry pieces


def detail_grid(title: Optional[str], pairs: Iterable[tuple[str, Any]], *, columns: int = 3) -> None:
	if title:
		ui.label(title).classes(section_title_classes())
	with ui.grid(columns=columns).classes("w-full gap-x-6 gap-y-2"):
		for label, value in pairs:
			with ui.column().classes("gap-0"):
				ui.label(label).classes("text-xs font-semibold text-blue-700")
				ui.label(render_value(value)).classes("text-sm break-all")


def section_toggle(page: ListPage, entity_id: Any, section: str, show_text: str, hide_text: str) -> bool:
	"""Clickable "Show/Hide ..." link. Returns whether the section is open."""
	is_open = page.expansion.is_open(entity_id, section)

	def on_click() -> None:
		page.expansion.toggle(entity_id, section)
		page.refresh_body()

	ui.label(f"▲ {hide_text}" if is_open else f"▼ {show_text}").classes(
		"text-sm text-blue-600 cursor-pointer hover:underline font-semibold"
	).on("click", on_click)
	return is_open


def table_rows(columns: Iterable[tuple[str, str]], rows: Iterable[Dict[str, Any]]) -> None:
	columns = list(columns)
	ui.table(
		columns=[{"name": key, "label": label, "field": key, "align": "left"} for key, label in columns],
		rows=[{key: render_value(row.get(key)) for key, _label in columns} for row in rows],
		row_key=columns[0][0] if columns else "id",
	).props("dense flat bordered").classes("w-full")


# ------------------------------------------------------------------ shared user record

USER_FIELDS = (
	("ID", "id"),
	("Username", "user_name"),
	("First Name", "first_name"),
	("Last Name", "last_name"),
	("Email", "email"),
	("Phone Number", "phone_number"),
	("Wallet Balance", "wallet_balance"),
	("Status", "status"),
	("Provider", "provider"),
	("Corporate ID", "corporate_id"),
	("Last Active", "last_active_at"),
	("Created At", "created_at"),
)

USER_FLAGS = (
	("Verified", "is_verified"),
	("Active", "is_active"),
	("System User", "is_system_user"),
	("Bypass Quantity Restriction", "bypass_product_quantity_restriction"),
)


def user_detail_pairs(user: Dict[str, Any]) -> list[tuple[str, Any]]:
	return [(label, user.get(key)) for label, key in USER_FIELDS] + [
		(label, yes_no(user.get(key))) for label, key in USER_FLAGS
	]
