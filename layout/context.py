from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Callable
from nicegui import ui

from auth.session import ApiSession
from layout.nav_state import NavLoadingFlags


@dataclass
class PageContext:
	# -----------------------------
	# Layout UI references
	# -----------------------------

	# Reference to the left navigation drawer element (so header can toggle it)
	drawer: Optional[ui.left_drawer] = None

	# Dynamic container inside the drawer. Only this element should be cleared and rebuilt when routes change.
	drawer_content: Optional[ui.element] = None

	# --- Callback that rebuilds the drawer_content---
	refresh_drawer: Optional[Callable[[], None]] = None

	# The container where the current page content is rendered
	# (router clears it and renders the selected page inside)
	main_area: Optional[ui.column] = None

	# -----------------------------
	# Navigation / drawer helpers
	# -----------------------------

	# Drawer navigation buttons indexed by route key (e.g. "loans", "products").
	nav_buttons: dict[str, ui.button] = field(default_factory=dict)

	# Routes whose navigation has been requested but not rendered yet.
	nav_loading: NavLoadingFlags = field(default_factory=NavLoadingFlags)

	current_route: str = ""

	# -------- Remote API --------
	# Bearer credential read once when the page is built and passed explicitly to every ApiClient.
	session: ApiSession = field(default_factory=ApiSession)

	# Callbacks run before the main area is cleared (unsubscribe list listeners, cancel timers).
	cleanups: list[Callable[[], None]] = field(default_factory=list)

	def add_cleanup(self, fn: Callable[[], None]) -> None:
		self.cleanups.append(fn)

	def run_cleanups(self) -> None:
		fns, self.cleanups = self.cleanups, []
		for fn in fns:
			fn()
