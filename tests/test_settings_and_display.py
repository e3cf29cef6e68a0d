#!/usr/bin/env python3
"""
Unit tests for preferences, settings, library loading and display formatting.

Run with:
    python -m pytest tests/test_settings_and_display.py
"""
import datetime
import json
import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import database
from playlist_core.models import Category, DEFAULT_SORT, GameRecord, SortField, SortOrder
from playlist_core.repositories import PreferencesRepository, VideoGameRepository
from playlist_core.services import DisplayService, LibraryService, ListProjection, SettingsService


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TmpDirMixin(unittest.TestCase):
    """Creates a fresh temp directory for each test and cd's into it."""

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self._orig = os.getcwd()
        os.chdir(self.tmp)

    def tearDown(self):
        os.chdir(self._orig)
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _path(self, name: str) -> str:
        return os.path.join(self.tmp, name)


def _make_repository():
    engine = create_engine('sqlite:///:memory:',
                           connect_args={"check_same_thread": False},
                           poolclass=StaticPool)
    database.Base.metadata.create_all(engine)
    return VideoGameRepository(sessionmaker(bind=engine))


def _game(title, playtime=None, price=0.0, categories=(Category.BACKLOG,)):
    return GameRecord(
        title=title,
        platform='PS2',
        publisher='Sony',
        release_date=datetime.date(2005, 10, 18),
        playtime=playtime,
        price=price,
        categories=frozenset(categories),
    )


# ===========================================================================
# PreferencesRepository
# ===========================================================================

class TestPreferencesRepository(TmpDirMixin):

    def test_missing_file_starts_empty(self):
        repo = PreferencesRepository(self._path('prefs.json'))
        self.assertEqual(repo.data, {})
        self.assertIsNone(repo.find('sort', 'backlog'))

    def test_upsert_persists(self):
        path = self._path('prefs.json')
        PreferencesRepository(path).upsert('settings', 'display_images', False)
        self.assertFalse(PreferencesRepository(path).find('settings', 'display_images'))
        with open(path, encoding='utf-8') as fh:
            self.assertEqual(json.load(fh), {'settings': {'display_images': False}})

    def test_corrupt_file_falls_back_to_empty(self):
        path = self._path('prefs.json')
        with open(path, 'w', encoding='utf-8') as fh:
            fh.write('{not json')
        self.assertEqual(PreferencesRepository(path).data, {})

    def test_non_object_file_falls_back_to_empty(self):
        path = self._path('prefs.json')
        with open(path, 'w', encoding='utf-8') as fh:
            json.dump(['sort'], fh)
        self.assertEqual(PreferencesRepository(path).data, {})

    def test_no_temp_files_left_behind(self):
        repo = PreferencesRepository(self._path('prefs.json'))
        repo.upsert('sort', 'wishlist', {'field': 'metric', 'order': 'desc'})
        self.assertEqual(os.listdir(self.tmp), ['prefs.json'])


# ===========================================================================
# SettingsService
# ===========================================================================

class TestSettingsService(TmpDirMixin):

    def setUp(self):
        super().setUp()
        self.prefs = PreferencesRepository(self._path('prefs.json'))
        self.svc = SettingsService(self.prefs)

    def test_sort_defaults_to_title_ascending(self):
        self.assertEqual(self.svc.get_sort_preference('backlog'), DEFAULT_SORT)

    def test_sort_preference_is_per_view(self):
        self.svc.set_sort_preference('wishlist', SortField.METRIC, SortOrder.DESCENDING)
        self.assertEqual(self.svc.get_sort_preference('wishlist'),
                         (SortField.METRIC, SortOrder.DESCENDING))
        self.assertEqual(self.svc.get_sort_preference('backlog'), DEFAULT_SORT)

    def test_sort_preference_survives_restart(self):
        self.svc.set_sort_preference('completion', 'date', 'asc')
        reloaded = SettingsService(PreferencesRepository(self._path('prefs.json')))
        self.assertEqual(reloaded.get_sort_preference('completion'),
                         (SortField.DATE, SortOrder.ASCENDING))

    def test_invalid_stored_sort_falls_back(self):
        self.prefs.upsert('sort', 'backlog', {'field': 'rating', 'order': 'asc'})
        with self.assertLogs('playlist.settings', level='WARNING'):
            self.assertEqual(self.svc.get_sort_preference('backlog'), DEFAULT_SORT)

    def test_flags_default_true(self):
        self.assertTrue(self.svc.always_confirm_delete)
        self.assertTrue(self.svc.display_images)

    def test_flags_can_be_switched_off(self):
        self.svc.set_always_confirm_delete(False)
        self.svc.set_display_images(False)
        self.assertFalse(self.svc.always_confirm_delete)
        self.assertFalse(self.svc.display_images)

    def test_non_bool_flag_falls_back(self):
        self.prefs.upsert('settings', 'display_images', 'no')
        self.assertTrue(self.svc.display_images)


# ===========================================================================
# LibraryService
# ===========================================================================

class TestLibraryService(TmpDirMixin):

    def setUp(self):
        super().setUp()
        self.repo = _make_repository()
        self.settings = SettingsService(PreferencesRepository(self._path('prefs.json')))
        self.svc = LibraryService(self.repo, self.settings)
        self.svc.add_game(_game('Shadow of the Colossus', playtime=12))
        self.svc.add_game(_game('Ico', playtime=7))
        self.svc.add_game(_game('Okami', playtime=40))

    def _titles(self, records):
        return [r.title for r in records]

    def test_list_view_uses_default_sort(self):
        self.assertEqual(self._titles(self.svc.list_view(Category.BACKLOG)),
                         ['Ico', 'Okami', 'Shadow of the Colossus'])

    def test_list_view_stores_new_choice(self):
        self.svc.list_view('backlog', SortField.METRIC, SortOrder.DESCENDING)
        self.assertEqual(self.settings.get_sort_preference('backlog'),
                         (SortField.METRIC, SortOrder.DESCENDING))
        self.assertEqual(self._titles(self.svc.list_view('backlog')),
                         ['Okami', 'Shadow of the Colossus', 'Ico'])

    def test_list_view_keeps_omitted_half(self):
        self.settings.set_sort_preference('backlog', SortField.METRIC, SortOrder.DESCENDING)
        self.svc.list_view('backlog', order=SortOrder.ASCENDING)
        self.assertEqual(self.settings.get_sort_preference('backlog'),
                         (SortField.METRIC, SortOrder.ASCENDING))

    def test_load_projection_reapplies_search(self):
        projection = ListProjection(Category.BACKLOG)
        self.svc.load_projection(projection)
        projection.search('o')
        self.svc.add_game(_game('Odin Sphere'))

        displayed = self.svc.load_projection(projection)

        self.assertEqual(self._titles(displayed), ['Odin Sphere', 'Okami'])
        self.assertEqual(len(projection.working_copy), 4)

    def test_edit_and_read(self):
        game_id = self.svc.add_game(_game('Rogue Galaxy'))
        self.svc.edit_game(game_id, _game('Rogue Galaxy', price=19.99))
        self.assertEqual(self.svc.read_game(game_id).price, 19.99)

    def test_delete_all_games(self):
        self.assertTrue(self.svc.delete_all_games())
        self.assertEqual(self.svc.total_games(), 0)
        self.assertFalse(self.svc.delete_all_games())


# ===========================================================================
# DisplayService
# ===========================================================================

class TestDisplayService(TmpDirMixin):

    def test_format_price(self):
        self.assertEqual(DisplayService.format_price(0), 'Free')
        self.assertEqual(DisplayService.format_price(59.9), '$59.90')

    def test_format_playtime(self):
        self.assertEqual(DisplayService.format_playtime(None), 'No playtime')
        self.assertEqual(DisplayService.format_playtime(1), '1 hour')
        self.assertEqual(DisplayService.format_playtime(30), '30 hours')

    def test_view_date_and_metric(self):
        record = _game('Katamari Damacy', playtime=9, price=19.99,
                       categories=(Category.COMPLETION, Category.WISHLIST))
        svc = DisplayService()
        self.assertEqual(svc.view_date(Category.COMPLETION, record), 'No completion date')
        self.assertEqual(svc.view_date(Category.WISHLIST, record), '2005-10-18')
        self.assertEqual(svc.view_metric(Category.COMPLETION, record), '9 hours')
        self.assertEqual(svc.view_metric(Category.WISHLIST, record), '$19.99')

    def test_resolve_cover_existing_file(self):
        cover = self._path('cover.png')
        open(cover, 'wb').close()
        svc = DisplayService(placeholder='placeholder.png')
        self.assertEqual(svc.resolve_cover(cover), cover)
        self.assertEqual(svc.resolve_cover('file://' + cover), cover)

    def test_resolve_cover_falls_back_to_placeholder(self):
        svc = DisplayService(placeholder='placeholder.png')
        self.assertEqual(svc.resolve_cover(self._path('gone.png')), 'placeholder.png')
        self.assertEqual(svc.resolve_cover('https://example.com/a.png'), 'placeholder.png')
        self.assertEqual(svc.resolve_cover(None), 'placeholder.png')

    def test_resolve_cover_disabled(self):
        settings = MagicMock()
        settings.display_images = False
        svc = DisplayService(settings=settings, placeholder='placeholder.png')
        self.assertIsNone(svc.resolve_cover(self._path('cover.png')))


if __name__ == '__main__':
    unittest.main()
