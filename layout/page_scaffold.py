from __future__ import annotations

from typing import Callable, Literal, Optional
from nicegui import ui

from layout.context import PageContext


ContentBuilder = Callable[[ui.element], None]
ToolbarBuilder = Callable[[ui.element], None]
ScrollMode = Literal["scaffold", "none"]


def build_page(
	ctx: PageContext,
	container: ui.element,
	*,
	title: str | None = None,
	content: ContentBuilder,
	toolbar: Optional[ToolbarBuilder] = None,
	content_padding_classes: str = "",  # e.g. "pr-1"
	scroll_mode: ScrollMode = "scaffold",
) -> None:
	"""
	Standard page layout:

	- Fills available height (h-full + min-h-0)
	- Title row with an optional toolbar on the right (Refresh buttons etc.)
	- Scroll behavior selectable:
		- scroll_mode="scaffold": the scaffold content area scrolls (default)
		- scroll_mode="none": scaffold does NOT scroll; page content must manage its own scroll
	"""

	with container:
		# Outer column must be full height and allow inner flex child to shrink
		with ui.column().classes("w-full h-full min-h-0 min-w-0"):
			if title or toolbar:
				with ui.row().classes("w-full items-center"):
					if title:
						ui.label(title).classes("text-2xl font-bold")
					ui.space()
					if toolbar:
						with ui.row().classes("items-center gap-2") as toolbar_area:
							toolbar(toolbar_area)

			overflow = "overflow-auto" if scroll_mode == "scaffold" else "overflow-hidden"
			with ui.column().classes(
				"w-full flex-1 min-h-0 min-w-0 %s %s" % (overflow, content_padding_classes or "")
			) as content_area:
				content(content_area)
