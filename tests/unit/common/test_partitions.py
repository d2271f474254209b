"""Tests for per-key partitioning helpers."""

from warehouse.common.partitions import latest, nulls_first, partition_by, with_next


def test_partition_by_keeps_input_order():
    rows = [('a', 1), ('b', 2), ('a', 3), ('b', 4), ('c', 5)]

    partitions = partition_by(rows, key=lambda row: row[0])

    assert list(partitions) == ['a', 'b', 'c']
    assert partitions['a'] == [('a', 1), ('a', 3)]
    assert partitions['b'] == [('b', 2), ('b', 4)]


def test_latest_picks_maximum():
    rows = [{'id': 1, 'v': 3}, {'id': 2, 'v': 7}, {'id': 3, 'v': 5}]
    assert latest(rows, order_by=lambda row: row['v'])['id'] == 2


def test_latest_ties_keep_first_row():
    rows = [{'id': 1, 'v': 7}, {'id': 2, 'v': 7}]
    assert latest(rows, order_by=lambda row: row['v'])['id'] == 1


def test_latest_nulls_rank_last():
    rows = [{'id': 1, 'v': None}, {'id': 2, 'v': 1}, {'id': 3, 'v': None}]
    assert latest(rows, order_by=lambda row: row['v'])['id'] == 2


def test_latest_all_nulls_keeps_first_row():
    rows = [{'id': 1, 'v': None}, {'id': 2, 'v': None}]
    assert latest(rows, order_by=lambda row: row['v'])['id'] == 1


def test_with_next_orders_ascending_and_pairs_successor():
    pairs = with_next([30, 10, 20], order_by=lambda value: value)
    assert pairs == [(10, 20), (20, 30), (30, None)]


def test_with_next_puts_nulls_first():
    rows = [{'d': 2}, {'d': None}, {'d': 1}]

    pairs = with_next(rows, order_by=lambda row: row['d'])

    assert [row['d'] for row, _ in pairs] == [None, 1, 2]


def test_with_next_single_row():
    assert with_next(['only'], order_by=lambda value: value) == [('only', None)]


def test_nulls_first_sort_key():
    assert sorted([3, None, 1], key=nulls_first) == [None, 1, 3]
