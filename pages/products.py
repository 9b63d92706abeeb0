from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from loguru import logger
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
	yes_no,
)
from services.api_models import AUTH_OUTCOMES, FetchOutcome
from services.mutations import toggle_product_loan_eligibility
from services.resources import PRODUCTS, category_products_path


class CategoryStrip:
	"""Horizontal category chips above the product list. Picking one narrows the list to that category."""

	def __init__(self, page: ListPage) -> None:
		self.page = page
		self.categories: list[Dict[str, Any]] = []
		self.selected: Optional[int] = None
		self.loading = False
		self.error = ""
		self.refresh: Callable[[], None] = lambda: None

	async def load(self) -> None:
		self.loading = True
		self.error = ""
		self.refresh()
		try:
			result = await run.io_bound(self.page.api.list_categories)
		finally:
			self.loading = False

		if result.ok:
			data = result.data if isinstance(result.data, list) else []
			self.categories = [c for c in data if isinstance(c, dict)]
			logger.info(f"[CategoryStrip.load] - categories_loaded - count={len(self.categories)}")
		elif result.outcome in AUTH_OUTCOMES:
			self.page.redirect_to_login(result)
			return
		elif result.outcome == FetchOutcome.TRANSPORT_ERROR:
			self.error = "Error loading categories"
			self.page.redirect_to_login(result)
			return
		else:
			logger.warning(f"[CategoryStrip.load] - categories_failed - status={result.status} message={result.message}")
			self.error = "Failed to load categories"
		self.refresh()

	def select(self, category_id: Optional[int]) -> None:
		if category_id == self.selected:
			return
		self.selected = category_id
		path = PRODUCTS.path if category_id is None else category_products_path(category_id)
		logger.info(f"[CategoryStrip.select] - category_selected - category_id={category_id} path={path}")
		self.page.controller.set_path(path)
		self.refresh()

	def build(self) -> None:
		if self.loading:
			ui.label("Loading categories...").classes("w-full text-center text-blue-600 py-2")
			return
		if self.error:
			ui.label(self.error).classes("w-full text-center text-red-600 py-2")
			return
		if not self.categories:
			ui.label("No categories found.").classes("w-full text-center text-blue-600 py-2")
			return

		with ui.row().classes("w-full flex-nowrap gap-3 overflow-x-auto pb-2"):
			self._chip("All products", None, None)
			for category in self.categories:
				self._chip(str(category.get("name") or "-"), category.get("id"), category.get("products_count"))

	def _chip(self, name: str, category_id: Optional[int], count: Any) -> None:
		active = category_id == self.selected
		card = ui.card().classes(
			"w-32 shrink-0 px-3 py-2 cursor-pointer "
			+ ("bg-blue-600 text-white" if active else "bg-white hover:bg-blue-50")
		)
		card.on("click", lambda: self.select(category_id))
		with card:
			ui.label(name).classes("text-base font-semibold truncate")
			if count is not None:
				ui.label(f"Products: {count}").classes("text-xs")


def _render_product(page: ListPage, product: Dict[str, Any]) -> None:
	product_id = product.get("id")
	eligible = bool(product.get("is_loan_eligible"))
	busy = page.pending.is_pending(product_id)

	with ui.card().classes(panel_classes()):
		with ui.row().classes("w-full items-center"):
			ui.label(str(product.get("name") or f"Product #{product_id}")).classes("text-lg font-semibold text-blue-900")
			if product.get("deleted_at"):
				ui.badge("Trashed").props("color=negative")
			ui.space()

			async def on_toggle(e) -> None:
				if bool(e.value) == eligible:
					return
				await toggle_product_loan_eligibility(page.action, page.api, product_id, bool(e.value), runner=run.io_bound)
				# a failed toggle snaps back when the body is rebuilt

			switch = ui.switch("Loan eligible", value=eligible, on_change=on_toggle)
			if busy:
				switch.disable()

		detail_grid(
			None,
			[
				("ID", product_id),
				("Brand", product.get("brand")),
				("Supplier", product.get("supplier_name")),
				("Price", product.get("price")),
				("Quantity", product.get("quantity")),
				("Loan Eligible", yes_no(product.get("is_loan_eligible"))),
			],
			columns=3,
		)


def render(container: ui.element, ctx: PageContext) -> None:
	page = create_list_page(ctx, PRODUCTS)
	strip = CategoryStrip(page)

	@ui.refreshable
	def categories_view() -> None:
		strip.build()

	strip.refresh = categories_view.refresh

	def content(_area: ui.element) -> None:
		categories_view()
		build_filter_bar(page)
		build_page_size_select(page)
		build_list_body(page, lambda product: _render_product(page, product), loading_text="Loading products...")

	async def do_refresh() -> None:
		page.controller.refresh()
		await strip.load()

	def toolbar(_area: ui.element) -> None:
		ui.button("Refresh", icon="refresh", on_click=do_refresh).props(
			button_props("primary")
		).classes(button_classes())

	build_page(ctx, container, title=PRODUCTS.title, content=content, toolbar=toolbar)
	page.controller.refresh()
	ui.timer(0, strip.load, once=True)
