from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional
from nicegui import ui, app
from loguru import logger

from layout.context import PageContext
from pages import loans, loan_users, products, users

from services.app_config import get_app_config


# All pages get (container, ctx) so they can use ctx.session, ctx.add_cleanup, etc.
RenderFn = Callable[[ui.element, PageContext], None]
OnEnterFn = Callable[[PageContext], None]

# delay before the page is rendered, so the drawer spinner reaches the browser first
NAV_RENDER_DELAY_S = 0.05


@dataclass(frozen=True)
class Route:
	label: str
	icon: str
	render: RenderFn
	on_enter: Optional[OnEnterFn] = None


BASE_ROUTES: Dict[str, Route] = {
	"loans": Route("Loans", "request_quote", loans.render),
	"loan_users": Route("Loan Users", "how_to_reg", loan_users.render),
	"products": Route("Products", "inventory_2", products.render),
	"users": Route("Users", "group", users.render),
}


def get_routes() -> Dict[str, Route]:
	return dict(BASE_ROUTES)


def get_visible_routes() -> Dict[str, Route]:
	visible = get_app_config().ui.navigation.visible_routes
	routes = get_routes()
	return routes if not visible else {key: route for key, route in routes.items() if key in visible}


def is_route_visible(key: str) -> bool:
	return key in get_visible_routes()


# supports visiting: http://localhost:8080/?page=products
def get_initial_route_from_url(default: str = "loans") -> str:
	"""Read ?page=... from the current request (deep link)."""
	try:
		page = ui.context.request.query_params.get("page")
	except RuntimeError:
		page = None
	if page and is_route_visible(page):
		return page
	return default if is_route_visible(default) else next(iter(get_visible_routes()), "loans")


def request_navigation(ctx: PageContext, route_key: str) -> None:
	"""Drawer click: show the spinner on the target entry, then render on the next tick."""
	if not ctx.nav_loading.begin(route_key, ctx.current_route):
		return
	logger.info(f"[request_navigation] - nav_requested - from={ctx.current_route} to={route_key}")
	if ctx.refresh_drawer:
		ctx.refresh_drawer()
	ui.timer(NAV_RENDER_DELAY_S, lambda: navigate(ctx, route_key), once=True)


def navigate(ctx: PageContext, route_key: str) -> None:
	route = get_routes().get(route_key)
	if not route or not is_route_visible(route_key):
		ctx.nav_loading.end(route_key)
		ui.notify(f"Unknown route: {route_key}", type="negative")
		return

	try:
		# per-user state (persists if storage_secret stays the same)
		app.storage.user["current_route"] = route_key
		ctx.current_route = route_key

		# update the URL (deep-link) without reloading
		ui.run_javascript(f"history.replaceState(null, '', '?page={route_key}')")

		# listeners of the previous page must not refresh elements that are about to be deleted
		ctx.run_cleanups()

		if ctx.main_area:
			ctx.main_area.clear()
			with ctx.main_area:
				route.render(ctx.main_area, ctx)

		if route.on_enter:
			route.on_enter(ctx)
	finally:
		ctx.nav_loading.end(route_key)
		if ctx.refresh_drawer:
			ctx.refresh_drawer()
