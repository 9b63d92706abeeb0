from nicegui import ui
from layout.context import PageContext
from layout.router import get_visible_routes, request_navigation, Route
from services.app_config import get_app_config



def _render_drawer_content(ctx: PageContext) -> None:
	"""Rebuild the drawer buttons from current visible routes and navigation flags."""
	ctx.nav_buttons.clear()
	is_dark = bool(getattr(get_app_config().ui.navigation, "dark_mode", False))
	inactive_color = "grey-3" if is_dark else "grey-8"
	for key, route in get_visible_routes().items():
		btn = _add_nav_button(ctx, route, key)
		if ctx.nav_loading.is_loading(key):
			btn.props("unelevated color=primary loading")
			btn.disable()
		elif key == ctx.current_route:
			# Selected look, not clickable:
			btn.props("unelevated color=primary")
			btn.disable()
		else:
			# Normal look:
			btn.props(f"flat color={inactive_color}")


def build_drawer(ctx: PageContext) -> ui.left_drawer:
	is_dark = bool(getattr(get_app_config().ui.navigation, "dark_mode", False))
	drawer_classes = "bg-slate-900 text-gray-100" if is_dark else "bg-gray-50"
	drawer = ui.left_drawer(value=True, bordered=True).props("width=180").classes(drawer_classes)
	ctx.drawer = drawer

	with drawer:
		# All dynamic content goes into this column (so we can clear/rebuild it)
		with ui.column().classes("w-full") as content:
			ctx.drawer_content = content

			# per-client refreshable
			@ui.refreshable
			def _drawer_view() -> None:
				_render_drawer_content(ctx)

			_drawer_view()

	# Convenience function for other modules
	ctx.refresh_drawer = _drawer_view.refresh

	return drawer


def _add_nav_button(ctx: PageContext, route: Route, key: str) -> ui.button:
	btn = ui.button(
		route.label,
		icon=route.icon,
		on_click=lambda k=key: request_navigation(ctx, k),
	).props("no-caps").classes(
		"w-full justify-start px-4")  # w-full justify-start makes the icon/text stay left, even with full width.
	ctx.nav_buttons[key] = btn
	return btn
