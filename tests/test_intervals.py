from datetime import timedelta

import pytest

from linguist.srs.intervals import EBBINGHAUS_INTERVALS, IntervalTable


def test_default_table_follows_forgetting_curve():
    table = IntervalTable(EBBINGHAUS_INTERVALS)
    assert table.days == (1, 2, 4, 7, 15, 30)
    assert table.max_stage == 5
    assert len(table) == 6


def test_stage_is_clamped_to_last_entry():
    table = IntervalTable([1, 2, 4])
    assert table.stage_for(0) == 0
    assert table.stage_for(2) == 2
    assert table.stage_for(3) == 2
    assert table.stage_for(100) == 2
    assert table.interval(100) == timedelta(days=4)


def test_negative_stage_maps_to_first_entry():
    table = IntervalTable([3, 5])
    assert table.days_for(-1) == 3


@pytest.mark.parametrize("days", [[], [0, 1], [-1], [2, 1]])
def test_invalid_tables_are_rejected(days):
    with pytest.raises(ValueError):
        IntervalTable(days)


def test_tables_compare_by_value():
    assert IntervalTable([1, 2]) == IntervalTable((1, 2))
    assert hash(IntervalTable([1, 2])) == hash(IntervalTable([1, 2]))
    assert IntervalTable([1, 2]) != IntervalTable([1, 3])
