#!/usr/bin/env python3
"""
Unit tests for ListProjection (displayed list vs. working copy, search, patches).

Run with:
    python -m pytest tests/test_list_projection.py
"""
import datetime
import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import database
from playlist_core.models import Category, GameRecord
from playlist_core.repositories import VideoGameRepository
from playlist_core.services import ListProjection


def _record(game_id, title, categories=(Category.WISHLIST,)):
    return GameRecord(
        id=game_id,
        title=title,
        platform='SNES',
        publisher='Nintendo',
        release_date=datetime.date(1990, 11, 21),
        price=9.99,
        categories=frozenset(categories),
    )


def _loaded(category=Category.WISHLIST, records=None, on_removed=None):
    projection = ListProjection(category, on_removed=on_removed)
    projection.load(records if records is not None else [
        _record(1, 'F-Zero'),
        _record(2, 'Super Mario World'),
        _record(3, 'Super Metroid', categories=(Category.WISHLIST, Category.BACKLOG)),
    ])
    projection.snapshot()
    return projection


# ===========================================================================
# Reload protocol
# ===========================================================================

class TestReload(unittest.TestCase):

    def test_load_does_not_touch_working_copy(self):
        projection = ListProjection(Category.WISHLIST)
        projection.load([_record(1, 'F-Zero')])
        self.assertEqual(projection.ids(), [1])
        self.assertEqual(projection.working_copy, [])

    def test_snapshot_copies_displayed_list(self):
        projection = _loaded()
        self.assertEqual(projection.working_copy, projection.authoritative)
        self.assertIsNot(projection.working_copy, projection.authoritative)

    def test_len_and_is_empty(self):
        projection = _loaded()
        self.assertEqual(len(projection), 3)
        self.assertFalse(projection.is_empty)
        self.assertTrue(ListProjection('backlog').is_empty)


# ===========================================================================
# Search
# ===========================================================================

class TestSearch(unittest.TestCase):

    def test_search_filters_display_only(self):
        projection = _loaded()
        result = projection.search('super')
        self.assertEqual([r.id for r in result], [2, 3])
        self.assertEqual(projection.ids(), [2, 3])
        self.assertEqual(len(projection.working_copy), 3)

    def test_searches_do_not_compound(self):
        projection = _loaded()
        projection.search('super m')
        projection.search('f')
        self.assertEqual(projection.ids(), [1])

    def test_empty_query_restores_working_copy(self):
        projection = _loaded()
        original = list(projection.working_copy)
        for query in ('super', 'super met', 'zzz', ''):
            projection.search(query)
        self.assertEqual(projection.authoritative, original)
        self.assertEqual(projection.query, '')

    def test_search_is_not_substring(self):
        projection = _loaded()
        self.assertEqual(projection.search('mario'), [])

    def test_apply_filter_with_custom_predicate(self):
        projection = _loaded()
        result = projection.apply_filter(lambda r: r.is_backlog)
        self.assertEqual([r.id for r in result], [3])


# ===========================================================================
# Patches
# ===========================================================================

class TestPatchCategoryFlag(unittest.TestCase):

    def test_clearing_own_category_removes_from_display_only(self):
        removed = []
        projection = _loaded(on_removed=lambda index, record: removed.append((index, record.id)))

        projection.patch_category_flag(2, Category.WISHLIST, False)

        self.assertEqual(projection.ids(), [1, 3])
        self.assertEqual([r.id for r in projection.working_copy], [1, 2, 3])
        self.assertFalse(projection.working_copy[1].is_wishlist)
        self.assertEqual(removed, [(1, 2)])

    def test_other_category_updates_both_lists(self):
        projection = _loaded()
        projection.patch_category_flag(1, Category.COMPLETION, True)
        self.assertEqual(projection.ids(), [1, 2, 3])
        self.assertTrue(projection.authoritative[0].is_completion)
        self.assertTrue(projection.working_copy[0].is_completion)

    def test_patch_correlates_by_id_while_filtered(self):
        removed = []
        projection = _loaded(on_removed=lambda index, record: removed.append(index))
        projection.search('super met')

        projection.patch_category_flag(3, Category.WISHLIST, False)

        self.assertEqual(projection.ids(), [])
        self.assertEqual(removed, [0])
        self.assertFalse(projection.working_copy[2].is_wishlist)

    def test_unknown_id_is_ignored(self):
        projection = _loaded()
        projection.patch_category_flag(99, Category.WISHLIST, False)
        self.assertEqual(projection.ids(), [1, 2, 3])


class TestRemoveById(unittest.TestCase):

    def test_remove_drops_from_both_lists(self):
        removed = []
        projection = _loaded(on_removed=lambda index, record: removed.append(record.id))
        projection.remove_by_id(1)
        self.assertEqual(projection.ids(), [2, 3])
        self.assertEqual([r.id for r in projection.working_copy], [2, 3])
        self.assertEqual(removed, [1])

    def test_remove_while_filtered_out_only_touches_working_copy(self):
        removed = []
        projection = _loaded(on_removed=lambda index, record: removed.append(record.id))
        projection.search('f')
        projection.remove_by_id(2)
        self.assertEqual(projection.ids(), [1])
        self.assertEqual([r.id for r in projection.working_copy], [1, 3])
        self.assertEqual(removed, [])

    def test_removing_everything_after_bulk_delete_leaves_empty_lists(self):
        engine = create_engine('sqlite:///:memory:',
                               connect_args={"check_same_thread": False},
                               poolclass=StaticPool)
        database.Base.metadata.create_all(engine)
        repo = VideoGameRepository(sessionmaker(bind=engine))
        for title in ('Earthbound', 'Chrono Trigger'):
            repo.create(_record(None, title))
        projection = ListProjection(Category.WISHLIST)
        projection.load(repo.list_by_category(Category.WISHLIST))
        projection.snapshot()

        ids = projection.ids()
        repo.delete_all()
        for game_id in ids:
            projection.remove_by_id(game_id)

        self.assertEqual(projection.authoritative, [])
        self.assertEqual(projection.working_copy, [])


if __name__ == '__main__':
    unittest.main()
