from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from loguru import logger

from services.api_models import AUTH_OUTCOMES, ApiResult, FetchOutcome, PageMeta
from services.resources import ListResource, build_list_params

T = TypeVar("T", bound=dict)

FetchFn = Callable[[ListResource, Dict[str, Any]], Awaitable[ApiResult]]
RedirectFn = Callable[[ApiResult], None]
Listener = Callable[["ListController"], None]
PatchFn = Callable[[Dict[str, Any]], Dict[str, Any]]

DEFAULT_PAGE_SIZES = (5, 10, 20, 50, 100)


class ListController(Generic[T]):
	"""
	Pagination + filter state for one list page.

	Two ways to fetch:
	- filter changes are debounced, then bump `search_trigger`, which always
	  returns to page 1
	- page / page size changes fetch directly and keep the filters

	Each fetch gets a sequence number. Only the result of the newest fetch is
	applied, older responses are dropped when they arrive.
	"""

	def __init__(
		self,
		resource: ListResource,
		fetch: FetchFn,
		*,
		on_unauthenticated: Optional[RedirectFn] = None,
		page_sizes: Iterable[int] = DEFAULT_PAGE_SIZES,
		page_size: Optional[int] = None,
		debounce_s: float = 0.5,
		redirect_on_server_error: bool = True,
		redirect_on_transport_error: bool = True,
	) -> None:
		self.resource = resource
		self._fetch = fetch
		self._on_unauthenticated = on_unauthenticated
		self.page_sizes: tuple[int, ...] = tuple(page_sizes)
		self.page_size = page_size if page_size is not None else (10 if 10 in self.page_sizes else self.page_sizes[0])
		if self.page_size not in self.page_sizes:
			raise ValueError(f"page_size {self.page_size} not in {self.page_sizes}")
		self.debounce_s = float(debounce_s)
		self.redirect_on_server_error = redirect_on_server_error
		self.redirect_on_transport_error = redirect_on_transport_error

		self.page = 1
		self.filters: Dict[str, str] = {name: "" for name in resource.filter_names}
		self.search_trigger = 0
		self.items: List[T] = []
		self.meta: Optional[PageMeta] = None
		self.loading = False
		self.message = ""

		self._seq = 0
		self._inflight = 0
		self._debounce_handle: Optional[asyncio.TimerHandle] = None
		self._tasks: set[asyncio.Task] = set()
		self._listeners: list[Listener] = []
		# entity id -> (latest fetch seq when patched, patch)
		self._pending_patches: Dict[Any, tuple[int, PatchFn]] = {}
		self._log = logger.bind(component="ListController", resource=resource.key)

	# ------------------------------------------------------------------ listeners

	def on_change(self, listener: Listener) -> Callable[[], None]:
		self._listeners.append(listener)

		def unsubscribe() -> None:
			if listener in self._listeners:
				self._listeners.remove(listener)

		return unsubscribe

	def _notify(self) -> None:
		for listener in list(self._listeners):
			listener(self)

	# ------------------------------------------------------------------ filters

	def set_filter(self, name: str, value: Any) -> None:
		if name not in self.filters:
			raise KeyError(f"unknown filter '{name}' for {self.resource.key}")
		self.filters[name] = "" if value is None else str(value)
		self._restart_debounce()

	def apply_filters(self) -> asyncio.Task:
		self._cancel_debounce()
		return self.trigger_search()

	def clear_filters(self) -> asyncio.Task:
		self.filters = {name: "" for name in self.filters}
		self._cancel_debounce()
		return self.trigger_search()

	def trigger_search(self) -> asyncio.Task:
		self.search_trigger += 1
		self.page = 1
		self._log.debug(f"[trigger_search] - search_triggered - trigger={self.search_trigger} filters={self.active_filters()}")
		return self._spawn(1)

	def active_filters(self) -> Dict[str, str]:
		return {k: v for k, v in self.filters.items() if v.strip()}

	def _restart_debounce(self) -> None:
		self._cancel_debounce()
		loop = asyncio.get_running_loop()
		self._debounce_handle = loop.call_later(self.debounce_s, self._on_debounce_expired)

	def _cancel_debounce(self) -> None:
		if self._debounce_handle is not None:
			self._debounce_handle.cancel()
			self._debounce_handle = None

	def _on_debounce_expired(self) -> None:
		self._debounce_handle = None
		self.trigger_search()

	# ------------------------------------------------------------------ paging

	@property
	def last_page(self) -> int:
		return self.meta.last_page if self.meta else 1

	def set_page(self, page: int) -> Optional[asyncio.Task]:
		if page == self.page or page < 1 or page > self.last_page:
			return None
		self.page = page
		return self._spawn(page)

	def set_page_size(self, size: int) -> Optional[asyncio.Task]:
		size = int(size)
		if size not in self.page_sizes:
			raise ValueError(f"page size {size} not in {self.page_sizes}")
		if size == self.page_size:
			return None
		# current page is kept as-is even if the new size makes it out of range
		self.page_size = size
		return self._spawn(self.page)

	def set_path(self, path: str) -> asyncio.Task:
		"""Point the controller at another endpoint of the same shape (e.g. one category's products)."""
		self.resource = self.resource.with_path(path)
		self._cancel_debounce()
		return self.trigger_search()

	def refresh(self) -> asyncio.Task:
		return self._spawn(self.page)

	def reset(self) -> asyncio.Task:
		self._cancel_debounce()
		self.filters = {name: "" for name in self.filters}
		self.items = []
		self.meta = None
		self.message = ""
		self.page = 1
		self._notify()
		return self._spawn(1)

	# ------------------------------------------------------------------ local patches

	def find_item(self, entity_id: Any) -> Optional[T]:
		for item in self.items:
			if self.resource.row_id(item) == entity_id:
				return item
		return None

	def patch_item(self, entity_id: Any, patch: PatchFn) -> bool:
		"""
		Replace one list entry with `patch(entry)`.

		If a fetch is in flight it may have been issued before the mutation
		landed, so the patch is kept and re-applied to that fetch's result.
		"""
		if self._inflight > 0:
			self._pending_patches[entity_id] = (self._seq, patch)
		found = self._apply_patch(entity_id, patch)
		if found:
			self._notify()
		return found

	def _apply_patch(self, entity_id: Any, patch: PatchFn) -> bool:
		found = False
		items: List[T] = []
		for item in self.items:
			if self.resource.row_id(item) == entity_id:
				items.append(patch(dict(item)))
				found = True
			else:
				items.append(item)
		if found:
			self.items = items
		return found

	# ------------------------------------------------------------------ fetching

	def _spawn(self, page: int) -> asyncio.Task:
		task = asyncio.ensure_future(self.load(page))
		self._tasks.add(task)
		task.add_done_callback(self._tasks.discard)
		return task

	async def load(self, page: int) -> Optional[ApiResult]:
		self._seq += 1
		seq = self._seq
		self._inflight += 1
		self.loading = True
		self._notify()

		params = build_list_params(self.resource, page, self.page_size, self.filters)
		self._log.debug(f"[load] - fetch_start - seq={seq} params={params}")
		try:
			result = await self._fetch(self.resource, params)
			if seq != self._seq:
				self._log.debug(f"[load] - stale_result_dropped - seq={seq} latest={self._seq} outcome={result.outcome}")
				return None
			self._apply_result(seq, result)
			return result
		finally:
			self._inflight -= 1
			self.loading = self._inflight > 0
			self._notify()

	def _apply_result(self, seq: int, result: ApiResult) -> None:
		outcome = result.outcome

		if outcome == FetchOutcome.SUCCESS:
			page = result.page_result()
			self.items = page.items
			self.meta = page.meta
			self.message = "" if page.items else self.resource.empty_text
			self._reapply_pending_patches(seq)
			self._log.info(
				f"[_apply_result] - list_loaded - seq={seq} items={len(page.items)} "
				f"page={page.meta.current_page if page.meta else '-'} total={page.meta.total if page.meta else '-'}"
			)
			return

		self._pending_patches.clear()

		if outcome in AUTH_OUTCOMES:
			self._log.warning(f"[_apply_result] - unauthenticated - outcome={outcome} status={result.status}")
			self._redirect(result)
			return

		if outcome == FetchOutcome.VALIDATION_EMPTY:
			self._log.info(f"[_apply_result] - validation_empty - status={result.status} message={result.message}")
			self.items = []
			self.meta = None
			self.message = self.resource.empty_text
			return

		if outcome == FetchOutcome.SERVER_ERROR:
			self._log.warning(f"[_apply_result] - server_error - status={result.status} message={result.message}")
			self.items = []
			self.meta = None
			self.message = result.message or "Failed to load data"
			if self.redirect_on_server_error:
				self._redirect(result)
			return

		self._log.warning(f"[_apply_result] - transport_error - message={result.message}")
		self.message = result.message or "Error loading data"
		if self.redirect_on_transport_error:
			self._redirect(result)
			return
		self.items = []
		self.meta = None

	def _reapply_pending_patches(self, seq: int) -> None:
		for entity_id, (patched_at_seq, patch) in list(self._pending_patches.items()):
			if seq <= patched_at_seq:
				self._apply_patch(entity_id, patch)
		self._pending_patches.clear()

	def _redirect(self, result: ApiResult) -> None:
		if self._on_unauthenticated is not None:
			self._on_unauthenticated(result)
