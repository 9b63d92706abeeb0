from __future__ import annotations

from typing import Dict


class NavLoadingFlags:
	"""Per-route "navigation in progress" flags shown as spinners in the drawer."""

	def __init__(self) -> None:
		self._flags: Dict[str, bool] = {}

	def begin(self, route_key: str, current_route: str) -> bool:
		# clicking the route that is already shown never starts a navigation
		if route_key == current_route:
			return False
		self._flags = {**self._flags, route_key: True}
		return True

	def end(self, route_key: str) -> None:
		if route_key in self._flags:
			self._flags = {k: v for k, v in self._flags.items() if k != route_key}

	def is_loading(self, route_key: str) -> bool:
		return self._flags.get(route_key, False)

	def any_loading(self) -> bool:
		return any(self._flags.values())

	def snapshot(self) -> Dict[str, bool]:
		return dict(self._flags)
