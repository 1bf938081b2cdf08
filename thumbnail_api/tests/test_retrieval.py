"""Tests for fallback retrieval."""

import logging
from unittest.mock import MagicMock

import pytest

from conftest import URI, URI_HASH, make_media_stream
from thumbnail_api.errors import TransportError
from thumbnail_api.retrieval import retrieve_thumbnail

KEY = URI_HASH + '-LARGE'


def storage(name, result=None, legacy=False):
    mock = MagicMock()
    mock.name = name
    mock.legacy = legacy
    mock.retrieve.return_value = result
    return mock


class TestRetrieveThumbnail:
    """Tests for retrieve_thumbnail."""

    def test_first_hit_wins(self):
        """Test that storages after the first hit are never queried."""
        media = make_media_stream()
        a, b, c = storage('A'), storage('B', media), storage('C', make_media_stream())

        result = retrieve_thumbnail([a, b, c], KEY, URI)

        assert result is media
        a.retrieve.assert_called_once_with(KEY, URI)
        b.retrieve.assert_called_once_with(KEY, URI)
        c.retrieve.assert_not_called()

    def test_not_found(self):
        storages = [storage('A'), storage('B')]

        assert retrieve_thumbnail(storages, KEY) is None
        for s in storages:
            s.retrieve.assert_called_once_with(KEY, None)

    def test_errors_propagate(self):
        """Test that a failing storage stops the fallback."""
        a, b = storage('A'), storage('B', make_media_stream())
        a.retrieve.side_effect = TransportError("connection refused")

        with pytest.raises(TransportError):
            retrieve_thumbnail([a, b], KEY)
        b.retrieve.assert_not_called()

    def test_legacy_hit_logged(self, caplog):
        """Test that hits from legacy storages are logged for migration tracking."""
        storages = [storage('new'), storage('old', make_media_stream(), legacy=True)]

        with caplog.at_level(logging.INFO, logger='thumbnail_api.migration'):
            retrieve_thumbnail(storages, KEY)

        records = [r for r in caplog.records if r.name == 'thumbnail_api.migration']
        assert len(records) == 1
        assert records[0].storage == 'old'
        assert records[0].thumbnail_id == KEY

    def test_regular_hit_not_logged_for_migration(self, caplog):
        with caplog.at_level(logging.INFO, logger='thumbnail_api.migration'):
            retrieve_thumbnail([storage('new', make_media_stream())], KEY)

        assert not [r for r in caplog.records if r.name == 'thumbnail_api.migration']
