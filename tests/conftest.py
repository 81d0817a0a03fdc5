"""Pytest configuration and fixtures."""

import pytest

from timeblock.models import Category, Record
from timeblock.storage import InMemoryRecordStore


@pytest.fixture
def work_category():
    """Category selected by #work."""
    return Category(id="work", label="Work", color="#4A90D9", patterns=["#work"])


@pytest.fixture
def personal_category():
    """Category selected by #personal or [[Personal]]."""
    return Category(
        id="personal",
        label="Personal",
        color="#7CB342",
        patterns=["#personal", "[[Personal]]"],
    )


@pytest.fixture
def categories(work_category, personal_category):
    """Both categories, work first."""
    return [work_category, personal_category]


@pytest.fixture
def outline_records():
    """A small day page: grandparent(#personal) > parent(#work) > entries."""
    return [
        Record(id="gp", text="Life #personal", parent_id=None, order=0),
        Record(id="p", text="Projects #work", parent_id="gp", order=0),
        Record(id="r1", text="10:00-11:00 standup", parent_id="p", order=0),
        Record(id="r2", text="10:30-12:00 review", parent_id="p", order=1),
        Record(id="r3", text="13:00-14:00 lunch", parent_id="gp", order=1),
        Record(id="n1", text="no time here", parent_id="p", order=2),
    ]


@pytest.fixture
def outline_store(outline_records):
    """In-memory store over the outline records."""
    return InMemoryRecordStore(outline_records)
