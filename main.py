import os
from nicegui import ui, app

from auth.middleware import AuthMiddleware
from auth.login_page import register_login_page
from auth.session import get_session

from layout.context import PageContext
from layout.main_area import build_main_area
from layout.router import navigate, get_initial_route_from_url
from layout.header import build_header
from layout.drawer import build_drawer

from services.app_config import load_app_config
from services.logging_setup import setup_logging
from loguru import logger


# ------------------------------------------------------------------
# GLOBAL SETUP (PROCESS LIFETIME)
# ------------------------------------------------------------------

setup_logging(app_name="loan_admin")
logger.info("Starting NiceGUI")

APP_CONFIG = load_app_config()
logger.info(f"[main] - config_loaded - base_url={APP_CONFIG.api.base_url} login_required={APP_CONFIG.auth.login_required}")


# ------------------------------------------------------------------
# UI
# ------------------------------------------------------------------

HEADER_PX = 64

register_login_page()
if APP_CONFIG.auth.login_required:
	app.add_middleware(AuthMiddleware)


@ui.page("/")
def index():
	ui.colors(primary="#2563eb")
	if APP_CONFIG.ui.navigation.dark_mode:
		ui.dark_mode().enable()

	ui.add_head_html("""
	<style>
		html, body { height: 100%; margin: 0; overflow: hidden; }
	</style>
	""")

	# --------- PER SESSION CONTEXT ---------
	ctx = PageContext(session=get_session())
	ui.context.client.on_disconnect(ctx.run_cleanups)

	# --------- LAYOUT ---------
	build_header(ctx)
	build_drawer(ctx)

	with ui.row().classes("w-full").style(f"height: calc(100vh - {HEADER_PX}px);"):
		with ui.column().classes("w-full h-full min-h-0 min-w-0 overflow-hidden p-4 pb-6 gap-4"):
			build_main_area(ctx)

	default_route = app.storage.user.get(
		"current_route", APP_CONFIG.ui.navigation.main_route
	)
	initial = get_initial_route_from_url(default_route)
	navigate(ctx, initial)


ui.run(
	title="Loan Admin Dashboard",
	reload=False,
	storage_secret=os.environ["NICEGUI_STORAGE_SECRET"],
)
