from __future__ import annotations

import unittest

from layout.nav_state import NavLoadingFlags
from services.expansion_state import ExpansionState, PendingFlags


class ExpansionStateTests(unittest.TestCase):
    def test_entities_are_isolated(self) -> None:
        state = ExpansionState()
        state.toggle(7, "user")
        before_8 = state.sections(8)

        self.assertTrue(state.toggle(7, "transactions"))

        self.assertEqual(state.sections(7), frozenset({"user", "transactions"}))
        self.assertEqual(state.sections(8), frozenset())
        self.assertEqual(before_8, frozenset())

    def test_toggle_twice_closes(self) -> None:
        state = ExpansionState()
        self.assertTrue(state.toggle(1, "approve"))
        self.assertFalse(state.toggle(1, "approve"))
        self.assertFalse(state.is_open(1, "approve"))

    def test_changes_are_copy_on_write(self) -> None:
        state = ExpansionState()
        state.toggle(7, "user")
        state.toggle(8, "user")
        snapshot = state.snapshot
        set_8 = state.sections(8)

        state.toggle(7, "transactions")

        self.assertIsNot(state.snapshot, snapshot)
        self.assertEqual(snapshot[7], frozenset({"user"}))
        self.assertIs(state.sections(8), set_8)

    def test_close_only_touches_open_section(self) -> None:
        state = ExpansionState()
        state.toggle(3, "user")
        state.close(3, "approve")
        self.assertEqual(state.sections(3), frozenset({"user"}))
        state.close(3, "user")
        self.assertEqual(state.sections(3), frozenset())

    def test_clear(self) -> None:
        state = ExpansionState()
        state.toggle(1, "user")
        state.clear()
        self.assertEqual(dict(state.snapshot), {})


class PendingFlagsTests(unittest.TestCase):
    def test_begin_and_end(self) -> None:
        flags = PendingFlags()
        flags.begin(42)
        self.assertTrue(flags.is_pending(42))
        self.assertFalse(flags.is_pending(43))
        flags.end(42)
        self.assertFalse(flags.is_pending(42))


class NavLoadingFlagsTests(unittest.TestCase):
    def test_clicking_current_route_does_not_start_loading(self) -> None:
        flags = NavLoadingFlags()
        self.assertFalse(flags.begin("loans", current_route="loans"))
        self.assertFalse(flags.is_loading("loans"))

    def test_other_route_loads_until_rendered(self) -> None:
        flags = NavLoadingFlags()
        self.assertTrue(flags.begin("products", current_route="loans"))
        self.assertTrue(flags.is_loading("products"))
        self.assertTrue(flags.any_loading())

        flags.end("products")
        self.assertFalse(flags.is_loading("products"))
        self.assertEqual(flags.snapshot(), {})


if __name__ == "__main__":
    unittest.main()
