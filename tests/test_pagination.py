from __future__ import annotations

import unittest

from services.api_models import PageMeta
from services.pagination import build_pagination, page_window, result_summary


def page_meta(current_page: int, per_page: int, total: int) -> PageMeta:
    """Descriptor the API returns for one page of a result set."""
    last_page = max(1, -(-total // per_page))
    if total == 0:
        return PageMeta(current_page=1, last_page=1, total=0, per_page=per_page)
    return PageMeta(
        current_page=current_page,
        last_page=last_page,
        from_=(current_page - 1) * per_page + 1,
        to=min(current_page * per_page, total),
        total=total,
        per_page=per_page,
    )


class PageWindowTests(unittest.TestCase):
    def test_window_around_page_five_of_ten(self) -> None:
        self.assertEqual(page_window(5, 10), [1, 3, 4, 5, 6, 7, 10])

    def test_window_properties_hold_for_every_page(self) -> None:
        for last in range(1, 15):
            for current in range(1, last + 1):
                pages = page_window(current, last)
                self.assertEqual(pages, sorted(set(pages)))
                self.assertIn(1, pages)
                self.assertIn(last, pages)
                self.assertIn(current, pages)
                for p in pages:
                    self.assertTrue(1 <= p <= last)
                    self.assertTrue(abs(p - current) <= 2 or p in (1, last))

    def test_single_page(self) -> None:
        self.assertEqual(page_window(1, 1), [1])

    def test_out_of_range_current_is_clamped(self) -> None:
        self.assertEqual(page_window(12, 10), [1, 8, 9, 10])


class PaginationControlsTests(unittest.TestCase):
    def test_ninety_five_items_page_five(self) -> None:
        meta = page_meta(current_page=5, per_page=10, total=95)
        self.assertEqual(meta.last_page, 10)
        self.assertEqual((meta.from_, meta.to), (41, 50))

        controls = build_pagination(meta)
        self.assertEqual(controls.pages, (1, 3, 4, 5, 6, 7, 10))
        self.assertTrue(controls.first_enabled and controls.prev_enabled)
        self.assertTrue(controls.next_enabled and controls.last_enabled)
        self.assertEqual(result_summary(meta), "Showing 41 to 50 of 95 results")

    def test_first_and_last_page_disable_edges(self) -> None:
        first = build_pagination(page_meta(1, 10, 95))
        self.assertFalse(first.first_enabled)
        self.assertFalse(first.prev_enabled)
        self.assertTrue(first.next_enabled)

        last = build_pagination(page_meta(10, 10, 95))
        self.assertFalse(last.next_enabled)
        self.assertFalse(last.last_enabled)
        self.assertTrue(last.prev_enabled)

    def test_page_past_the_end_leads_back_into_range(self) -> None:
        meta = PageMeta(current_page=1, last_page=3, total=25, per_page=10)
        controls = build_pagination(meta, current_page=12)

        self.assertEqual(controls.pages, (1, 2, 3))
        self.assertNotIn(controls.current_page, controls.pages)
        self.assertTrue(controls.first_enabled and controls.prev_enabled and controls.last_enabled)
        self.assertFalse(controls.next_enabled)
        self.assertEqual(controls.prev_page, 3)

    def test_prev_and_next_targets_inside_range(self) -> None:
        controls = build_pagination(page_meta(5, 10, 95))
        self.assertEqual((controls.prev_page, controls.next_page), (4, 6))

    def test_last_partial_page_range(self) -> None:
        meta = page_meta(10, 10, 95)
        self.assertEqual((meta.from_, meta.to), (91, 95))

    def test_empty_result_summary(self) -> None:
        self.assertEqual(result_summary(page_meta(1, 10, 0)), "No results")
        self.assertEqual(result_summary(None), "")


class PageMetaParsingTests(unittest.TestCase):
    def test_missing_keys_default(self) -> None:
        meta = PageMeta.from_dict({"current_page": 3})
        self.assertEqual(meta.last_page, 1)
        self.assertEqual(meta.current_page, 1)
        self.assertIsNone(meta.from_)

    def test_non_dict_is_none(self) -> None:
        self.assertIsNone(PageMeta.from_dict(None))
        self.assertIsNone(PageMeta.from_dict([1, 2]))

    def test_from_key_is_mapped(self) -> None:
        meta = PageMeta.from_dict({"current_page": 2, "last_page": 4, "from": 11, "to": 20, "total": 35, "per_page": 10})
        self.assertEqual((meta.current_page, meta.from_, meta.to, meta.total), (2, 11, 20, 35))


if __name__ == "__main__":
    unittest.main()
