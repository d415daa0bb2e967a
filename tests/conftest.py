"""Shared test fixtures for MoodMentor backend tests."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId


def make_cursor(documents=None):
    """A Motor-like cursor whose chain methods return itself."""
    cursor = MagicMock()
    cursor.sort = MagicMock(return_value=cursor)
    cursor.skip = MagicMock(return_value=cursor)
    cursor.limit = MagicMock(return_value=cursor)
    cursor.to_list = AsyncMock(return_value=list(documents or []))
    return cursor


def make_collection():
    collection = AsyncMock()
    # Motor's find() and aggregate() return cursors synchronously,
    # so they are MagicMocks. find_one, insert_one etc. stay AsyncMock.
    collection.find = MagicMock(return_value=make_cursor())
    collection.aggregate = MagicMock(return_value=make_cursor())
    return collection


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def mock_collection():
    return make_collection()


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def collections():
    """Per-name collections for services that touch more than one."""
    return {}


@pytest.fixture
def multi_db(collections):
    def get(name):
        if name not in collections:
            collections[name] = make_collection()
        return collections[name]

    db = MagicMock()
    db.__getitem__ = MagicMock(side_effect=get)
    return db


@pytest.fixture
def cursor_factory():
    return make_cursor
