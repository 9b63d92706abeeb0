from datetime import datetime

from nicegui import ui

from layout.context import PageContext
from auth.session import get_user, logout
from services.app_config import get_app_config, save_app_config
from layout.app_style import button_classes, button_props
from loguru import logger


def build_header(ctx: PageContext) -> ui.header:
    cfg = get_app_config()
    is_dark = bool(getattr(cfg.ui.navigation, "dark_mode", False))
    header = ui.header().classes("h-16 w-full bg-gradient-to-r from-blue-800 to-blue-600 text-white")

    with header:
        with ui.row().classes("h-full items-center w-full px-4 gap-2"):
            ui.button(icon="menu", on_click=lambda: ctx.drawer.toggle() if ctx.drawer else None).props(
                "flat round dense color=white"
            ).tooltip("Toggle navigation menu")

            ui.icon("account_balance").classes("text-white")
            ui.label("Loan Admin Dashboard").classes("text-lg font-semibold")
            ui.space()

            mode_icon = "dark_mode" if is_dark else "light_mode"

            def on_toggle_theme() -> None:
                cfg_local = get_app_config()
                current = bool(getattr(cfg_local.ui.navigation, "dark_mode", False))
                cfg_local.ui.navigation.dark_mode = not current
                logger.info(
                    f"[on_toggle_theme] - theme_mode_changed - old={current} new={cfg_local.ui.navigation.dark_mode}"
                )
                save_app_config(cfg_local)
                ui.run_javascript("location.reload()")

            ui.button(icon=mode_icon, on_click=on_toggle_theme).props("flat round dense color=white").tooltip(
                "Switch between light and dark mode"
            )

            dt_label = ui.label("").classes("ml-2 text-sm text-blue-100")

            def update_time() -> None:
                dt_label.set_text(datetime.now().strftime("%d-%m-%Y %H:%M"))

            update_time()
            ui.timer(60.0, update_time)

            user = get_user()
            username = user.username if user else "unknown"

            with ui.row().classes("ml-3 items-center gap-2"):
                ui.icon("account_circle")
                with ui.column().classes("gap-0"):
                    ui.label(username).classes("text-sm")
                    ui.label((user.display_name if user else "") or "-").classes("text-xs text-blue-100")

            def do_logout() -> None:
                logger.info(f"[do_logout] - logout_clicked - username={username}")
                ctx.run_cleanups()
                logout()
                ui.navigate.to("/login")

            ui.button("Logout", icon="logout", on_click=do_logout).props(
                button_props("danger")
            ).classes(button_classes()).tooltip("Sign out and forget the stored token")

    return header
