from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from services.api_models import PageMeta

WINDOW_RADIUS = 2


def page_window(current_page: int, last_page: int, radius: int = WINDOW_RADIUS) -> list[int]:
	"""Page numbers to show: first, last, and everything within `radius` of the current page."""
	last_page = max(1, int(last_page))
	current_page = min(max(1, int(current_page)), last_page)
	return [
		p for p in range(1, last_page + 1)
		if abs(p - current_page) <= radius or p == 1 or p == last_page
	]


@dataclass(frozen=True)
class PaginationControls:
	current_page: int
	last_page: int
	pages: tuple[int, ...]
	first_enabled: bool
	prev_enabled: bool
	next_enabled: bool
	last_enabled: bool
	prev_page: int
	next_page: int


def build_pagination(meta: PageMeta, current_page: Optional[int] = None) -> PaginationControls:
	"""Controls for the requested page.

	A requested page past `last_page` (a page-size change keeps the page number) is
	shown without a highlighted number, and Previous/Last lead back into range.
	"""
	requested = current_page if current_page is not None else meta.current_page
	last = max(1, meta.last_page)
	current = min(max(1, requested), last)
	in_range = current == requested
	return PaginationControls(
		current_page=requested,
		last_page=last,
		pages=tuple(page_window(current, last)),
		first_enabled=requested > 1,
		prev_enabled=requested > 1,
		next_enabled=requested < last,
		last_enabled=requested != last,
		prev_page=current - 1 if in_range else current,
		next_page=current + 1,
	)


def result_summary(meta: Optional[PageMeta]) -> str:
	if meta is None:
		return ""
	if meta.total == 0 or meta.from_ is None or meta.to is None:
		return "No results"
	return f"Showing {meta.from_} to {meta.to} of {meta.total} results"
