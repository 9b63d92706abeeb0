from __future__ import annotations

from typing import Any, Dict, FrozenSet, Mapping


class ExpansionState:
	"""
	Which detail sections are open, per entity.

	Every change swaps in a new top-level dict and a new frozenset for the
	touched entity. Other entities keep the exact same set objects, so a view
	can compare references to decide what to re-render.
	"""

	def __init__(self) -> None:
		self._sections: Dict[Any, FrozenSet[str]] = {}

	@property
	def snapshot(self) -> Mapping[Any, FrozenSet[str]]:
		return self._sections

	def sections(self, entity_id: Any) -> FrozenSet[str]:
		return self._sections.get(entity_id, frozenset())

	def is_open(self, entity_id: Any, section: str) -> bool:
		return section in self.sections(entity_id)

	def toggle(self, entity_id: Any, section: str) -> bool:
		"""Flip one section. Returns True when the section is now open."""
		current = self.sections(entity_id)
		if section in current:
			updated = current - {section}
		else:
			updated = current | {section}
		self._sections = {**self._sections, entity_id: frozenset(updated)}
		return section in updated

	def close(self, entity_id: Any, section: str) -> None:
		if self.is_open(entity_id, section):
			self.toggle(entity_id, section)

	def clear(self) -> None:
		self._sections = {}


class PendingFlags:
	"""In-flight mutation markers keyed by entity id."""

	def __init__(self) -> None:
		self._flags: Dict[Any, bool] = {}

	@property
	def snapshot(self) -> Mapping[Any, bool]:
		return self._flags

	def begin(self, entity_id: Any) -> None:
		self._flags = {**self._flags, entity_id: True}

	def end(self, entity_id: Any) -> None:
		self._flags = {**self._flags, entity_id: False}

	def is_pending(self, entity_id: Any) -> bool:
		return bool(self._flags.get(entity_id, False))
