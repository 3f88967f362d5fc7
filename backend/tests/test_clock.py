"""
Tests for the system clock and id generation.
"""
import re
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from recipe_storage.core.deps import SystemClock, new_recipe_id

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


def test_clock_is_utc_millisecond_precision():
    now = SystemClock()()
    assert now.tzinfo == timezone.utc
    assert now.microsecond % 1000 == 0


def test_clock_never_goes_backwards():
    clock = SystemClock()
    later = datetime(2024, 1, 1, 12, 0, 5, tzinfo=timezone.utc)
    earlier = later - timedelta(seconds=3)

    with patch("recipe_storage.core.deps.datetime") as mock_dt:
        mock_dt.now.side_effect = [later, earlier]
        first = clock()
        second = clock()

    assert first == later
    assert second == later


def test_recipe_ids_are_random_lowercase_uuids():
    ids = {new_recipe_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(UUID_RE.match(i) for i in ids)
